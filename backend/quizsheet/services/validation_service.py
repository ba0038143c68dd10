import re
from typing import Dict, List, Optional, Sequence

from ..config import MAX_TIME_LIMIT, MIN_TIME_LIMIT
from ..schemas.preview_schema import ErrorType, ValidationError
from .column_service import CORRECT_ANSWER, OPTION_ROLES, QUESTION, ROLE_LABELS, TIME_LIMIT

_INTEGER = re.compile(r"[+-]?[0-9]+")
# whole-number cells must fit a signed 32-bit integer
_INT32_MIN, _INT32_MAX = -2**31, 2**31 - 1


def get_cell(row: Sequence, column_index: Optional[int]) -> Optional[str]:
    """Cell text at `column_index`, or None when the column is unmapped or the row is too short."""
    if column_index is None or column_index >= len(row):
        return None
    value = row[column_index]
    return None if value is None else str(value)


def is_blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


def parse_int(value: str) -> int:
    text = value.strip()
    if not _INTEGER.fullmatch(text):
        raise ValueError(f"invalid integer: {value!r}")
    number = int(text)
    if number < _INT32_MIN or number > _INT32_MAX:
        raise ValueError(f"integer out of range: {value!r}")
    return number


def validate_row(row: Sequence, row_number: int, column_map: Dict[str, int]) -> List[ValidationError]:
    """
    Check one data row and return every problem found (empty list if the row is usable).

    Rules are evaluated independently so a row can report several errors at
    once, e.g. an empty question and an out-of-range time limit.
    """
    errors: List[ValidationError] = []

    def add(kind, column_name, message):
        errors.append(ValidationError(kind=kind, row_number=row_number, column_name=column_name, message=message))

    if is_blank(get_cell(row, column_map.get(QUESTION))):
        add(ErrorType.EMPTY_FIELD, ROLE_LABELS[QUESTION], "Question text is empty")

    options = []
    for role in OPTION_ROLES:
        option = get_cell(row, column_map.get(role))
        if is_blank(option):
            label = ROLE_LABELS[role]
            add(ErrorType.EMPTY_FIELD, label, f"{label} is empty")
        else:
            options.append(option.strip())

    correct_answer = get_cell(row, column_map.get(CORRECT_ANSWER))
    if is_blank(correct_answer):
        add(ErrorType.EMPTY_FIELD, ROLE_LABELS[CORRECT_ANSWER], "Correct answer is empty")
    elif len(options) == len(OPTION_ROLES) and correct_answer.strip() not in options:
        add(
            ErrorType.INVALID_ANSWER,
            ROLE_LABELS[CORRECT_ANSWER],
            "Correct answer must exactly match one of the four options (case-sensitive)",
        )

    if TIME_LIMIT in column_map:
        time_limit = get_cell(row, column_map[TIME_LIMIT])
        if not is_blank(time_limit):
            try:
                seconds = parse_int(time_limit)
            except ValueError:
                add(ErrorType.INVALID_TIME_LIMIT, ROLE_LABELS[TIME_LIMIT], "Time limit must be a valid number")
            else:
                if seconds < MIN_TIME_LIMIT or seconds > MAX_TIME_LIMIT:
                    add(
                        ErrorType.INVALID_TIME_LIMIT,
                        ROLE_LABELS[TIME_LIMIT],
                        f"Time limit must be between {MIN_TIME_LIMIT} and {MAX_TIME_LIMIT} seconds",
                    )

    return errors
