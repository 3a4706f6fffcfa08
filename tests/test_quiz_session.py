# tests/test_quiz_session.py
import pytest

from mediminder.services.quiz_service import SOURCE_FALLBACK, fallback_questions
from mediminder.services.quiz_session import (
    STATUS_COMPLETED,
    STATUS_IN_PROGRESS,
    QuizCompletedError,
    QuizSession,
)


@pytest.mark.quiz
class TestQuizSession:
    def test_empty_question_list_is_rejected(self):
        with pytest.raises(ValueError):
            QuizSession(questions=[], source=SOURCE_FALLBACK)

    def test_score_counts_correct_answers(self):
        questions = fallback_questions(shuffle=False)
        session = QuizSession(questions=questions, source=SOURCE_FALLBACK)

        assert session.submit_answer(questions[0].correct_answer) is None
        assert session.submit_answer((questions[1].correct_answer + 1) % 4) is None
        assert session.status == STATUS_IN_PROGRESS
        assert session.question_index == 2

        attempt = session.submit_answer(questions[2].correct_answer)
        assert session.status == STATUS_COMPLETED
        assert session.score == 2
        assert attempt is not None
        assert attempt.answers == session.answers
        assert len(attempt.questions) == 3

    def test_attempt_emitted_exactly_once(self):
        questions = fallback_questions(shuffle=False)
        session = QuizSession(questions=questions, source=SOURCE_FALLBACK)
        emitted = [session.submit_answer(0) for _ in questions]
        assert sum(1 for a in emitted if a is not None) == 1
        assert emitted[-1] is not None

        with pytest.raises(QuizCompletedError):
            session.submit_answer(0)
        assert session.question_index == len(questions)
        assert len(session.answers) == len(questions)

    def test_undo_last_answer_reopens_the_final_question(self):
        questions = fallback_questions(shuffle=False)
        session = QuizSession(questions=questions, source=SOURCE_FALLBACK)
        for q in questions:
            session.submit_answer(q.correct_answer)
        assert session.score == 3

        session.undo_last_answer()
        assert session.status == STATUS_IN_PROGRESS
        assert session.score == 2
        assert session.question_index == 2

        assert session.submit_answer(questions[2].correct_answer) is not None

