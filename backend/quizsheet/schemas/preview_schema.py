from pydantic import BaseModel, Field, validator
from typing import Dict, List, Optional
import enum

from .question_schema import Question


class ErrorType(str, enum.Enum):
    """Categories of problems found while reading an uploaded question file."""
    MISSING_COLUMN = "MISSING_COLUMN"
    INVALID_ANSWER = "INVALID_ANSWER"
    INVALID_TIME_LIMIT = "INVALID_TIME_LIMIT"
    EMPTY_FIELD = "EMPTY_FIELD"


class ValidationError(BaseModel):
    """
    One problem found in an uploaded file.

    `row_number` is the 1-based row in the file (the header is row 1) and is
    left empty for header-level problems such as a missing column.
    """
    kind: ErrorType
    row_number: Optional[int] = Field(None, ge=1)
    column_name: Optional[str] = None
    message: str

    class Config:
        frozen = True

    @validator("message")
    def message_must_not_be_blank(cls, v):
        if not v or not v.strip():
            raise ValueError("Error message cannot be empty")
        return v


class PreviewResult(BaseModel):
    """Parsed questions plus every problem found, shown to the user before conversion."""
    questions: List[Question] = Field(default_factory=list)
    errors: List[ValidationError] = Field(default_factory=list)
    # canonical role -> header text as it appeared in the file
    column_mapping: Dict[str, str] = Field(default_factory=dict)
    total_rows: int = Field(0, ge=0)
    valid_rows: int = Field(0, ge=0)

    @validator("valid_rows")
    def valid_rows_consistent(cls, v, values):
        total = values.get("total_rows")
        if total is not None and v > total:
            raise ValueError("valid_rows cannot exceed total_rows")
        questions = values.get("questions")
        if questions is not None and v != len(questions):
            raise ValueError("valid_rows must equal the number of parsed questions")
        return v

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    @property
    def is_fully_valid(self) -> bool:
        return self.valid_rows == self.total_rows and not self.has_errors
