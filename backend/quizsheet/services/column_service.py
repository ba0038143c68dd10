import logging
from typing import Dict, List, Sequence

from ..config import CHOICES_PER_QUESTION
from ..schemas.preview_schema import ErrorType, ValidationError

logger = logging.getLogger(__name__)

QUESTION = "question"
CORRECT_ANSWER = "correctAnswer"
TIME_LIMIT = "timeLimit"
OPTION_ROLES = [f"option{n}" for n in range(1, CHOICES_PER_QUESTION + 1)]

# Header synonyms per role, compared after trim + lower-case. Order matters:
# question, correct answer and time limit are tested before the options.
ROLE_PATTERNS = [
    (QUESTION, {"question", "q", "question_text", "question text"}),
    (CORRECT_ANSWER, {"correct answer", "correct", "answer", "solution"}),
    (TIME_LIMIT, {"time limit", "time", "seconds", "duration"}),
] + [
    (role, {f"option {n}", f"option{n}", f"answer {n}", f"choice {n}", letter})
    for n, (role, letter) in enumerate(zip(OPTION_ROLES, "abcd"), start=1)
]

# Labels used when reporting errors against a role
ROLE_LABELS = {
    QUESTION: "Question",
    **{role: f"Option {n}" for n, role in enumerate(OPTION_ROLES, start=1)},
    CORRECT_ANSWER: "Correct Answer",
    TIME_LIMIT: "Time Limit",
}

REQUIRED_ROLES = [QUESTION, *OPTION_ROLES, CORRECT_ANSWER]


def match_role(header: str):
    """Return the role a header cell names, or None."""
    normalized = (header or "").strip().lower()
    for role, patterns in ROLE_PATTERNS:
        if normalized in patterns:
            return role
    return None


def detect_columns(headers: Sequence[str]) -> Dict[str, int]:
    """
    Map canonical roles to zero-based column positions.

    Headers that match no role are ignored. When two headers name the same
    role the right-most one wins.
    """
    column_map: Dict[str, int] = {}
    for index, header in enumerate(headers):
        role = match_role(header)
        if role is not None:
            column_map[role] = index

    logger.debug("Detected columns: %s", column_map)
    return column_map


def validate_required_columns(column_map: Dict[str, int]) -> List[ValidationError]:
    errors = []
    for role in REQUIRED_ROLES:
        if role not in column_map:
            label = ROLE_LABELS[role]
            errors.append(ValidationError(
                kind=ErrorType.MISSING_COLUMN,
                column_name=label,
                message=f"{label} column not found",
            ))
    return errors


def create_column_mapping(headers: Sequence[str], column_map: Dict[str, int]) -> Dict[str, str]:
    return {role: headers[index] for role, index in column_map.items()}
