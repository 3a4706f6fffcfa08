# mediminder/services/quiz_session.py
# In-memory quiz progress for a single user: InProgress(index, score, answers) -> Completed.
from dataclasses import dataclass, field
from typing import List, Optional

from mediminder.models.quiz import QuizAttemptCreate, QuizQuestion, QuizSessionState

STATUS_IN_PROGRESS = "in_progress"
STATUS_COMPLETED = "completed"


class QuizCompletedError(Exception):
    """Raised when an answer arrives after the last question was answered."""
    pass


@dataclass
class QuizSession:
    questions: List[QuizQuestion]
    source: str
    question_index: int = 0
    score: int = 0
    answers: List[int] = field(default_factory=list)
    attempt_id: Optional[str] = None

    def __post_init__(self):
        if not self.questions:
            raise ValueError("A quiz session needs at least one question")

    @property
    def completed(self) -> bool:
        return self.question_index >= len(self.questions)

    @property
    def status(self) -> str:
        return STATUS_COMPLETED if self.completed else STATUS_IN_PROGRESS

    def submit_answer(self, selected_option: int) -> Optional[QuizAttemptCreate]:
        """
        Records the answer for the current question and advances.
        Returns the attempt to persist on the transition to Completed, otherwise None.
        """
        if self.completed:
            raise QuizCompletedError("This quiz is already complete. Restart to take it again.")

        question = self.questions[self.question_index]
        self.answers.append(selected_option)
        if selected_option == question.correct_answer:
            self.score += 1
        self.question_index += 1

        if self.completed:
            return QuizAttemptCreate(questions=list(self.questions), answers=list(self.answers))
        return None

    def undo_last_answer(self) -> None:
        """Steps back one question; used when the completed attempt could not be saved."""
        if not self.answers:
            return
        selected_option = self.answers.pop()
        self.question_index -= 1
        if selected_option == self.questions[self.question_index].correct_answer:
            self.score -= 1

    def to_state(self) -> QuizSessionState:
        return QuizSessionState(
            status=self.status,
            question_index=self.question_index,
            score=self.score,
            total_questions=len(self.questions),
            answers=list(self.answers),
            questions=self.questions,
            source=self.source,
            attempt_id=self.attempt_id,
        )
