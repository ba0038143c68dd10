import csv
import io
import logging
import os
from typing import Iterable, List, Sequence

import pandas as pd

from ..config import MAX_QUESTIONS
from ..schemas.preview_schema import ErrorType, PreviewResult, ValidationError
from .column_service import create_column_mapping, detect_columns, validate_required_columns
from .question_builder import build_question
from .validation_service import validate_row

logger = logging.getLogger(__name__)

CSV_EXTENSIONS = {".csv"}
# pandas reader engine per spreadsheet format
SPREADSHEET_ENGINES = {".xlsx": "openpyxl", ".xls": "xlrd", ".ods": "odf"}
SPREADSHEET_EXTENSIONS = set(SPREADSHEET_ENGINES)
ALLOWED_EXTENSIONS = CSV_EXTENSIONS | SPREADSHEET_EXTENSIONS


def parse_csv(source) -> PreviewResult:
    """
    Parse an uploaded CSV of quiz questions into a preview.

    `source` may be bytes, text or a file object. Bytes are decoded as UTF-8;
    a byte order mark written by spreadsheet exports is ignored.
    """
    if hasattr(source, "read"):
        source = source.read()
    if isinstance(source, bytes):
        source = source.decode("utf-8-sig")
    text = source.lstrip("\ufeff")

    rows = csv.reader(io.StringIO(text, newline=""))
    return build_preview(rows, empty_message="CSV file is empty")


def parse_excel(source, engine=None) -> PreviewResult:
    """Parse the first sheet of a spreadsheet upload; every cell is read as text."""
    if isinstance(source, bytes):
        source = io.BytesIO(source)
    try:
        df = pd.read_excel(source, header=None, dtype=str, engine=engine)
    except Exception as e:
        raise ValueError(f"Could not read spreadsheet: {e}") from e

    df = df.fillna("")
    return build_preview(df.values.tolist(), empty_message="Spreadsheet is empty")


def parse_upload(filename: str, contents: bytes) -> PreviewResult:
    file_extension = os.path.splitext(filename or "")[1].lower()
    if file_extension in CSV_EXTENSIONS:
        return parse_csv(contents)
    if file_extension in SPREADSHEET_EXTENSIONS:
        return parse_excel(contents, engine=SPREADSHEET_ENGINES[file_extension])
    raise ValueError(f"Invalid file extension. Only {sorted(ALLOWED_EXTENSIONS)} are allowed.")


def build_preview(rows: Iterable[Sequence], empty_message: str = "CSV file is empty") -> PreviewResult:
    """
    Run header detection, column checks and per-row validation over raw rows.

    Row numbers are 1-based positions in the file, so the first data row under
    the header is row 2. Every record after the header is a data row,
    blank ones included. At most MAX_QUESTIONS data rows are processed.
    """
    records = [(number, list(row)) for number, row in enumerate(rows, start=1)]

    if not records:
        return PreviewResult(errors=[ValidationError(kind=ErrorType.EMPTY_FIELD, message=empty_message)])

    _, headers = records[0]
    headers = ["" if header is None else str(header) for header in headers]
    column_map = detect_columns(headers)
    column_mapping = create_column_mapping(headers, column_map)

    column_errors = validate_required_columns(column_map)
    if column_errors:
        return PreviewResult(errors=column_errors, column_mapping=column_mapping)

    questions = []
    errors: List[ValidationError] = []
    total_rows = 0

    for row_number, row in records[1:]:
        total_rows += 1

        if total_rows > MAX_QUESTIONS:
            errors.append(ValidationError(
                kind=ErrorType.INVALID_ANSWER,
                row_number=row_number,
                message=f"Maximum {MAX_QUESTIONS} questions allowed. Remaining rows will be ignored.",
            ))
            break

        row_errors = validate_row(row, row_number, column_map)
        if not row_errors:
            question, row_errors = build_question(row, row_number, column_map)
            if question is not None:
                questions.append(question)
        errors.extend(row_errors)

    logger.info(
        "Parsed upload: %s total rows, %s valid questions, %s errors",
        total_rows, len(questions), len(errors),
    )

    return PreviewResult(
        questions=questions,
        errors=errors,
        column_mapping=column_mapping,
        total_rows=total_rows,
        valid_rows=len(questions),
    )
