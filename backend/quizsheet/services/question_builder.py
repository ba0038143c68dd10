import logging
from typing import Dict, List, Optional, Sequence, Tuple

from ..config import CSV_DEFAULT_TIME_LIMIT
from ..schemas.preview_schema import ErrorType, ValidationError
from ..schemas.question_schema import Choice, Question
from .column_service import CORRECT_ANSWER, OPTION_ROLES, QUESTION, TIME_LIMIT
from .validation_service import get_cell, is_blank, parse_int

logger = logging.getLogger(__name__)


def read_time_limit(row: Sequence, column_map: Dict[str, int]) -> int:
    value = get_cell(row, column_map.get(TIME_LIMIT))
    if is_blank(value):
        return CSV_DEFAULT_TIME_LIMIT
    try:
        return parse_int(value)
    except ValueError:
        logger.warning("Invalid time limit value, using default: %s", value)
        return CSV_DEFAULT_TIME_LIMIT


def build_question(
    row: Sequence, row_number: int, column_map: Dict[str, int]
) -> Tuple[Optional[Question], List[ValidationError]]:
    """
    Turn a row that passed validate_row into a Question.

    Returns (question, []) on success. If the row still cannot form a valid
    question, for instance two options share the correct answer's text,
    returns (None, [error]) instead of raising.
    """
    text = (get_cell(row, column_map.get(QUESTION)) or "").strip()
    correct_answer = (get_cell(row, column_map.get(CORRECT_ANSWER)) or "").strip()

    options = [(get_cell(row, column_map.get(role)) or "").strip() for role in OPTION_ROLES]

    try:
        choices = [Choice(text=option, is_correct=option == correct_answer) for option in options]
        question = Question(
            text=text,
            choices=choices,
            time_limit_seconds=read_time_limit(row, column_map),
        )
    except ValueError as e:
        reason = _first_error_message(e)
        logger.warning("Failed to parse row %s: %s", row_number, reason)
        return None, [ValidationError(
            kind=ErrorType.INVALID_ANSWER,
            row_number=row_number,
            message=f"Failed to parse row: {reason}",
        )]

    return question, []


def _first_error_message(error: ValueError) -> str:
    # pydantic wraps validator messages; surface the first one only
    details = getattr(error, "errors", None)
    if callable(details):
        for detail in details():
            message = str(detail.get("msg", "")).removeprefix("Value error, ")
            if message:
                return message
    return str(error)
