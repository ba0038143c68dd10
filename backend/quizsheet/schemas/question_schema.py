from pydantic import BaseModel, Field, validator
from typing import Tuple

from ..config import CHOICES_PER_QUESTION, CSV_DEFAULT_TIME_LIMIT


class Choice(BaseModel):
    """A single answer choice of a quiz question."""
    text: str = Field(..., description="The answer text shown to players.")
    is_correct: bool = Field(False, description="Whether this choice is the correct answer.")

    class Config:
        frozen = True

    @validator("text")
    def text_must_not_be_blank(cls, v):
        if not v or not v.strip():
            raise ValueError("Answer text cannot be empty")
        return v


class Question(BaseModel):
    """
    A multiple choice question in canonical form.

    A question always carries exactly four choices and exactly one of them is
    marked correct. Instances are immutable; shuffling produces new objects.
    """
    text: str = Field(..., description="The question text.")
    choices: Tuple[Choice, ...] = Field(..., description="The four answer choices, in display order.")
    time_limit_seconds: int = Field(CSV_DEFAULT_TIME_LIMIT, description="Seconds players get to answer.")

    class Config:
        frozen = True

    @validator("text")
    def text_must_not_be_blank(cls, v):
        if not v or not v.strip():
            raise ValueError("Question text cannot be empty")
        return v

    @validator("choices")
    def exactly_one_correct_choice(cls, v):
        if len(v) != CHOICES_PER_QUESTION:
            raise ValueError(f"Must have exactly {CHOICES_PER_QUESTION} choices")
        correct_count = sum(1 for choice in v if choice.is_correct)
        if correct_count != 1:
            raise ValueError("Must have exactly one correct answer")
        return v

    @property
    def correct_choice(self) -> Choice:
        return next(choice for choice in self.choices if choice.is_correct)
