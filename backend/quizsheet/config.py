from dotenv import load_dotenv
import os

load_dotenv()

# Optional path to the Kahoot spreadsheet template. When unset a blank workbook
# with the same header block is generated.
QUIZ_TEMPLATE_PATH = os.getenv("QUIZ_TEMPLATE_PATH") or None
MAX_UPLOAD_BYTES = int(os.getenv("MAX_UPLOAD_BYTES", str(5 * 1024 * 1024)))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv(
        "CORS_ORIGINS",
        "http://localhost:5173,http://127.0.0.1:5173,http://localhost:3000,http://127.0.0.1:3000",
    ).split(",")
    if origin.strip()
]

MAX_QUESTIONS = 100
MIN_TIME_LIMIT = 5
MAX_TIME_LIMIT = 240
CSV_DEFAULT_TIME_LIMIT = 20
RENDER_DEFAULT_TIME_LIMIT = 20
CONVERSION_DEFAULT_TIME_LIMIT = 30
CHOICES_PER_QUESTION = 4
