from fastapi import APIRouter, UploadFile, File, Depends, HTTPException, status
from fastapi.responses import FileResponse
from starlette.background import BackgroundTask
from typing import Optional
import logging
import os
import random

from .. import config
from ..dependencies import get_rng, get_template_path
from ..schemas.conversion_schema import ConversionRequest
from ..schemas.preview_schema import PreviewResult
from ..services.csv_service import ALLOWED_EXTENSIONS, parse_upload
from ..services.excel_service import QuizGenerationError, cleanup_file, generate_quiz_file

router = APIRouter(prefix="/quiz", tags=["Quiz"])

logger = logging.getLogger(__name__)

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


# Upload CSV & Preview
@router.post("/upload", response_model=PreviewResult)
async def upload_questions(file: UploadFile = File(...)):
    # check file extension and size, then return parsed preview
    file_extension = os.path.splitext(file.filename or "")[1].lower()
    if file_extension not in ALLOWED_EXTENSIONS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid file extension. Only {sorted(ALLOWED_EXTENSIONS)} are allowed.",
        )

    contents = await file.read()
    if len(contents) > config.MAX_UPLOAD_BYTES:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"File size must be less than {config.MAX_UPLOAD_BYTES // (1024 * 1024)}MB",
        )

    try:
        preview = parse_upload(file.filename, contents)
    except ValueError as e:
        # UnicodeDecodeError is a ValueError too
        logger.warning("Rejected upload %s: %s", file.filename, e)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Could not read uploaded file: {e}",
        )

    return preview


# Confirm & build the quiz spreadsheet
@router.post("/convert")
def convert_questions(
    payload: ConversionRequest,
    rng: random.Random = Depends(get_rng),
    template_path: Optional[str] = Depends(get_template_path),
):
    try:
        quiz_file = generate_quiz_file(
            payload.questions,
            shuffle_questions=payload.shuffle_questions,
            shuffle_answers=payload.shuffle_answers,
            time_limit=payload.default_time_limit,
            template_path=template_path,
            rng=rng,
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except QuizGenerationError as e:
        logger.exception("Quiz generation failed: %s", e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to generate quiz spreadsheet",
        )

    # the temp file is removed once the response has been streamed
    return FileResponse(
        quiz_file,
        media_type=XLSX_MEDIA_TYPE,
        filename="kahoot-quiz.xlsx",
        background=BackgroundTask(cleanup_file, quiz_file),
    )
