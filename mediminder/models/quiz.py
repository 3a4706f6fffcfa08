# Data models for quiz questions and recorded attempts
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

OPTIONS_PER_QUESTION = 4


class QuizQuestion(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    question_text: str = Field(..., alias="questionText")
    options: List[str] = Field(..., description="Exactly four answer options.")
    correct_answer: int = Field(..., alias="correctAnswer", description="0-based index into options.")
    explanation: Optional[str] = None
    medication_id: Optional[str] = Field(None, alias="medicationId")

    @model_validator(mode="after")
    def check_options(self):
        if len(self.options) != OPTIONS_PER_QUESTION:
            raise ValueError(f"A question needs exactly {OPTIONS_PER_QUESTION} options, got {len(self.options)}")
        if not 0 <= self.correct_answer < len(self.options):
            raise ValueError(f"correct_answer {self.correct_answer} is out of range")
        return self


class QuizQuestionSet(BaseModel):
    """Structured-output contract requested from the AI provider."""
    questions: List[QuizQuestion]


class MedicationInput(BaseModel):
    id: Optional[str] = None
    name: str
    dosage: str
    frequency: str


class QuizGenerateRequest(BaseModel):
    medications: List[MedicationInput]


class QuizAttemptCreate(BaseModel):
    questions: List[QuizQuestion]
    answers: List[int]

    @model_validator(mode="after")
    def check_lengths(self):
        if not self.questions:
            raise ValueError("An attempt needs at least one question")
        if len(self.answers) != len(self.questions):
            raise ValueError("answers must have one entry per question")
        return self


class QuizAttemptOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    questions: List[QuizQuestion]
    answers: List[int]
    score: int
    total_questions: int
    timestamp: datetime


class AnswerSubmission(BaseModel):
    selected_option: int = Field(..., ge=0, lt=OPTIONS_PER_QUESTION)


class QuizSessionState(BaseModel):
    status: str  # "in_progress" or "completed"
    question_index: int
    score: int
    total_questions: int
    answers: List[int]
    questions: List[QuizQuestion]
    source: str  # "ai" or "fallback"
    attempt_id: Optional[str] = None
