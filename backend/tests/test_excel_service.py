import logging
import random
from pathlib import Path

import pytest
from openpyxl import Workbook, load_workbook

from quizsheet.schemas.question_schema import Choice, Question
from quizsheet.services import excel_service
from quizsheet.services.excel_service import (
    QuizGenerationError,
    cleanup_file,
    generate_quiz_file,
    prepare_questions,
    render_rows,
    resolve_time_limit,
    shuffle_choice_order,
    shuffle_question_order,
    validate_questions,
)


def make_question(text, answers, correct, time_limit=20):
    return Question(
        text=text,
        choices=[Choice(text=a, is_correct=a == correct) for a in answers],
        time_limit_seconds=time_limit,
    )


@pytest.fixture
def questions():
    return [
        make_question("What is 2+2?", ["3", "4", "5", "6"], "4"),
        make_question("Sky colour?", ["Red", "Blue", "Green", "Yellow"], "Blue"),
        make_question("Largest planet?", ["Mars", "Venus", "Jupiter", "Earth"], "Jupiter"),
        make_question("H2O is?", ["Water", "Salt", "Gold", "Air"], "Water"),
    ]


class DummyQuestion:
    def __init__(self, text, choices):
        self.text = text
        self.choices = choices


def test_validate_questions_rejects_bad_input():
    with pytest.raises(ValueError):
        validate_questions([])
    with pytest.raises(ValueError):
        validate_questions([DummyQuestion("No choices?", [])])
    with pytest.raises(ValueError):
        validate_questions([DummyQuestion("No answer?", [Choice(text="a"), Choice(text="b")])])


def test_render_rows(questions):
    rows = render_rows(questions, 30)
    assert rows[0].question == "What is 2+2?"
    assert rows[0].answers == ("3", "4", "5", "6")
    assert rows[0].time_limit == 30
    assert rows[0].correct_answer == 2
    assert [r.correct_answer for r in rows] == [2, 2, 3, 1]


def test_resolve_time_limit():
    assert resolve_time_limit(45) == 45
    assert resolve_time_limit(0) == 20
    assert resolve_time_limit(-3) == 20
    assert resolve_time_limit(None) == 20


def test_shuffle_question_order_keeps_source(questions):
    original = list(questions)
    shuffled = shuffle_question_order(questions, random.Random(1))
    assert questions == original
    assert sorted(q.text for q in shuffled) == sorted(q.text for q in questions)


def test_shuffle_is_reproducible_with_seeded_rng(questions):
    first = prepare_questions(questions, True, True, random.Random(42))
    second = prepare_questions(questions, True, True, random.Random(42))
    assert first == second


def test_shuffle_answers_preserves_choices_and_correct_text(questions):
    rng = random.Random(5)
    for _ in range(20):
        for question in questions:
            shuffled = shuffle_choice_order(question, rng)
            assert shuffled.text == question.text
            assert sorted(c.text for c in shuffled.choices) == sorted(c.text for c in question.choices)
            assert shuffled.correct_choice.text == question.correct_choice.text
            assert sum(c.is_correct for c in shuffled.choices) == 1


def test_rendered_correct_index_follows_shuffled_answers(questions):
    processed = prepare_questions(questions, shuffle_answers=True, rng=random.Random(9))
    for question, row in zip(processed, render_rows(processed, 20)):
        assert row.answers[row.correct_answer - 1] == question.correct_choice.text


def test_no_shuffle_keeps_order(questions):
    assert prepare_questions(questions) == questions


def test_generate_quiz_file_writes_template_layout(questions):
    path = generate_quiz_file(questions, time_limit=0)
    try:
        ws = load_workbook(path).worksheets[0]
        assert ws["B8"].value == "Question - max 120 characters"
        assert ws["B9"].value == "What is 2+2?"
        assert [ws.cell(row=9, column=c).value for c in range(3, 7)] == ["3", "4", "5", "6"]
        assert ws["G9"].value == 20
        assert ws["H9"].value == 2
        assert ws["B12"].value == "H2O is?"
        assert ws["H12"].value == 1
        assert ws["B13"].value is None
    finally:
        cleanup_file(path)
    assert not Path(path).exists()


def test_generate_quiz_file_with_shuffled_answers(questions):
    path = generate_quiz_file(questions, shuffle_answers=True, time_limit=60, rng=random.Random(3))
    try:
        ws = load_workbook(path).worksheets[0]
        for row_number, question in enumerate(questions, start=9):
            answers = [ws.cell(row=row_number, column=c).value for c in range(3, 7)]
            correct = ws.cell(row=row_number, column=8).value
            assert ws.cell(row=row_number, column=2).value == question.text
            assert sorted(answers) == sorted(c.text for c in question.choices)
            assert answers[correct - 1] == question.correct_choice.text
            assert ws.cell(row=row_number, column=7).value == 60
    finally:
        cleanup_file(path)


def test_generate_quiz_file_uses_template(tmp_path, questions):
    template = tmp_path / "template.xlsx"
    wb = Workbook()
    wb.active["A1"] = "Custom template"
    wb.save(template)

    path = generate_quiz_file(questions[:1], template_path=str(template))
    try:
        ws = load_workbook(path).worksheets[0]
        assert ws["A1"].value == "Custom template"
        assert ws["B9"].value == "What is 2+2?"
    finally:
        cleanup_file(path)
    # the template itself is never modified
    assert load_workbook(template).active["B9"].value is None


def test_missing_template_cleans_up_partial_file(tmp_path, monkeypatch, questions):
    target = tmp_path / "partial.xlsx"

    def fake_temporary_file():
        target.touch()
        return target

    monkeypatch.setattr(excel_service, "create_temporary_file", fake_temporary_file)

    with pytest.raises(QuizGenerationError):
        generate_quiz_file(questions, template_path=str(tmp_path / "missing.xlsx"))
    assert not target.exists()


def test_invalid_questions_create_no_file(monkeypatch):
    def fail():
        raise AssertionError("temporary file must not be created")

    monkeypatch.setattr(excel_service, "create_temporary_file", fail)
    with pytest.raises(ValueError):
        generate_quiz_file([])


def test_cleanup_failure_is_logged_not_raised(tmp_path, caplog):
    with caplog.at_level(logging.WARNING):
        cleanup_file(tmp_path)
    assert "Failed to cleanup temporary file" in caplog.text
    assert tmp_path.exists()
