from pydantic import BaseModel, Field, validator
from typing import List

from .question_schema import Question
from ..config import CONVERSION_DEFAULT_TIME_LIMIT, MAX_TIME_LIMIT, MIN_TIME_LIMIT


class ConversionOptions(BaseModel):
    shuffle_questions: bool = False
    shuffle_answers: bool = False
    default_time_limit: int = CONVERSION_DEFAULT_TIME_LIMIT

    @validator("default_time_limit")
    def time_limit_in_range(cls, v):
        if v < MIN_TIME_LIMIT or v > MAX_TIME_LIMIT:
            raise ValueError(
                f"Default time limit must be between {MIN_TIME_LIMIT} and {MAX_TIME_LIMIT} seconds"
            )
        return v


class ConversionRequest(ConversionOptions):
    """Questions confirmed from a preview, plus the options used to build the quiz file."""
    questions: List[Question] = Field(..., description="Questions to write, in order.")

    @validator("questions")
    def questions_not_empty(cls, v):
        if not v:
            raise ValueError("Questions list cannot be empty")
        return v
