"""Tests for study session grading."""

import pytest

from ai_tutor.services.models import QuizQuestion, StudySession


def _session() -> StudySession:
    questions = [
        QuizQuestion(question="2 + 2?", options=["3", "4", "5", "6"], correct_answer=1),
        QuizQuestion(question="Capital of France?", options=["Rome", "Paris"], correct_answer=1),
    ]
    return StudySession(conversation_id="conv-1", questions=questions, total_questions=2)


def test_correct_answer_scores_and_advances() -> None:
    session = _session()

    updated = session.answer_current(1)

    assert updated.score == 1
    assert updated.current_question_index == 1
    assert updated.questions[0].user_answer == 1
    assert updated.questions[0].is_correct is True
    assert not updated.is_completed
    # The original snapshot is left untouched.
    assert session.score == 0
    assert session.questions[0].user_answer is None


def test_last_answer_completes_the_session() -> None:
    session = _session().answer_current(0).answer_current(1)

    assert session.is_completed
    assert session.score == 1
    assert session.current_question_index == 1
    assert session.questions[0].is_correct is False


def test_answering_a_completed_session_is_rejected() -> None:
    session = _session().answer_current(1).answer_current(1)

    with pytest.raises(ValueError, match="already completed"):
        session.answer_current(0)


def test_out_of_range_answer_is_rejected() -> None:
    with pytest.raises(ValueError, match="out of range"):
        _session().answer_current(4)
