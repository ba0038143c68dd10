import logging
import os
import random
import tempfile
from datetime import datetime
from pathlib import Path
from typing import List, NamedTuple, Optional, Sequence, Tuple

from openpyxl import Workbook, load_workbook

from ..config import RENDER_DEFAULT_TIME_LIMIT
from ..schemas.question_schema import Question

logger = logging.getLogger(__name__)

# Layout of the Kahoot quiz spreadsheet template (openpyxl, 1-based).
# Changing the template requires changing these offsets.
HEADER_ROW = 8
STARTING_ROW = 9
QUESTION_COLUMN = 2
FIRST_CHOICE_COLUMN = 3
TIME_LIMIT_COLUMN = 7
CORRECT_ANSWER_COLUMN = 8

TEMPLATE_HEADERS = [
    "Question - max 120 characters",
    "Answer 1 - max 75 characters",
    "Answer 2 - max 75 characters",
    "Answer 3 - max 75 characters",
    "Answer 4 - max 75 characters",
    "Time limit (sec) – 5, 10, 20, 30, 60, 90, 120, or 240 secs",
    "Correct answer(s) - choose at least one",
]


class QuizGenerationError(Exception):
    """The quiz spreadsheet could not be produced (template or file I/O failure)."""


class QuizRow(NamedTuple):
    question: str
    answers: Tuple[str, ...]
    time_limit: int
    correct_answer: int  # 1-based position within answers


def validate_questions(questions: Sequence[Question]) -> None:
    if not questions:
        raise ValueError("Questions list cannot be null or empty")

    for question in questions:
        if not question.choices:
            raise ValueError(f"Question must have choices: {question.text}")
        if not any(choice.is_correct for choice in question.choices):
            raise ValueError(f"Question must have at least one correct answer: {question.text}")


def shuffle_question_order(questions: Sequence[Question], rng: random.Random) -> List[Question]:
    """Return the questions in random order; the input sequence is left untouched."""
    shuffled = list(questions)
    rng.shuffle(shuffled)
    logger.info("Shuffled %s questions", len(shuffled))
    return shuffled


def shuffle_choice_order(question: Question, rng: random.Random) -> Question:
    """Return a copy of the question with its choices permuted. Each choice keeps its correct flag."""
    indices = list(range(len(question.choices)))
    rng.shuffle(indices)
    logger.debug("Shuffled answer positions for question: %s", question.text)
    return Question(
        text=question.text,
        choices=[question.choices[i] for i in indices],
        time_limit_seconds=question.time_limit_seconds,
    )


def prepare_questions(
    questions: Sequence[Question],
    shuffle_questions: bool = False,
    shuffle_answers: bool = False,
    rng: Optional[random.Random] = None,
) -> List[Question]:
    rng = rng or random.Random()
    processed = list(questions)
    if shuffle_questions:
        processed = shuffle_question_order(processed, rng)
    if shuffle_answers:
        processed = [shuffle_choice_order(question, rng) for question in processed]
    return processed


def resolve_time_limit(time_limit: Optional[int]) -> int:
    return time_limit if time_limit and time_limit > 0 else RENDER_DEFAULT_TIME_LIMIT


def render_rows(questions: Sequence[Question], time_limit: int) -> List[QuizRow]:
    rows = []
    for question in questions:
        correct = next(i for i, choice in enumerate(question.choices, start=1) if choice.is_correct)
        rows.append(QuizRow(
            question=question.text,
            answers=tuple(choice.text for choice in question.choices),
            time_limit=time_limit,
            correct_answer=correct,
        ))
    return rows


def build_default_template() -> Workbook:
    """A workbook with the header block of the Kahoot quiz template, used when no template file is configured."""
    wb = Workbook()
    ws = wb.active
    ws.title = "Sheet1"
    ws.cell(row=1, column=1, value="Quiz template")
    ws.cell(row=2, column=1, value=(
        "Add questions, at least two answer alternatives, time limit and choose correct answers "
        "(at least one). Have fun creating your awesome quiz!"
    ))
    ws.cell(row=3, column=1, value=(
        "Remember: questions have a limit of 120 characters and answers can have 75 characters max."
    ))
    for offset, header in enumerate(TEMPLATE_HEADERS):
        ws.cell(row=HEADER_ROW, column=QUESTION_COLUMN + offset, value=header)
    return wb


def load_template(template_path: Optional[str] = None) -> Workbook:
    if template_path is None:
        return build_default_template()
    if not os.path.exists(template_path):
        raise FileNotFoundError(f"Template file not found: {template_path}")
    return load_workbook(template_path)


def populate_questions(worksheet, rows: Sequence[QuizRow]) -> None:
    for row_number, row in enumerate(rows, start=STARTING_ROW):
        worksheet.cell(row=row_number, column=QUESTION_COLUMN, value=row.question)
        for offset, answer in enumerate(row.answers):
            worksheet.cell(row=row_number, column=FIRST_CHOICE_COLUMN + offset, value=answer)
        worksheet.cell(row=row_number, column=TIME_LIMIT_COLUMN, value=row.time_limit)
        worksheet.cell(row=row_number, column=CORRECT_ANSWER_COLUMN, value=row.correct_answer)


def create_temporary_file() -> Path:
    timestamp = datetime.now().strftime("%Y.%m.%d.%H.%M.%S")
    fd, path = tempfile.mkstemp(prefix=f"kahoot-quiz-{timestamp}-", suffix=".xlsx")
    os.close(fd)
    return Path(path)


def cleanup_file(file_path) -> None:
    try:
        Path(file_path).unlink(missing_ok=True)
        logger.debug("Cleaned up temporary file: %s", file_path)
    except OSError as e:
        logger.warning("Failed to cleanup temporary file: %s (%s)", file_path, e)


def generate_quiz_file(
    questions: Sequence[Question],
    shuffle_questions: bool = False,
    shuffle_answers: bool = False,
    time_limit: int = 0,
    template_path: Optional[str] = None,
    rng: Optional[random.Random] = None,
) -> Path:
    """
    Write the questions into a copy of the quiz template and return the file path.

    Invalid questions raise ValueError before any file is created. Any later
    failure removes the partial file and raises QuizGenerationError. On
    success the caller owns the file and should remove it with cleanup_file
    once it has been sent.
    """
    validate_questions(questions)

    processed = prepare_questions(questions, shuffle_questions, shuffle_answers, rng)
    time_limit = resolve_time_limit(time_limit)
    logger.info(
        "Generating template with %s questions, timeLimit=%ss, shuffleQuestions=%s, shuffleAnswers=%s",
        len(processed), time_limit, shuffle_questions, shuffle_answers,
    )

    temp_file = create_temporary_file()
    logger.info("Created temporary file: %s", temp_file)

    try:
        workbook = load_template(template_path)
        populate_questions(workbook.worksheets[0], render_rows(processed, time_limit))
        workbook.save(temp_file)
    except Exception as e:
        cleanup_file(temp_file)
        raise QuizGenerationError("Failed to generate quiz spreadsheet") from e

    logger.info("Successfully populated %s questions with %ss time limit", len(processed), time_limit)
    return temp_file
