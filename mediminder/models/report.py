# Data models for the doctor-facing knowledge report (derived, never persisted)
from typing import Dict, List, Optional

from pydantic import BaseModel

from mediminder.models.enums import PriorityLevel, Topic


class MedicationKnowledge(BaseModel):
    total: int = 0
    missed: int = 0
    topics: Dict[Topic, int] = {}


class EducationArea(BaseModel):
    medication: str
    level: PriorityLevel
    description: str


class Recommendation(BaseModel):
    title: str
    description: str


class MissedQuestion(BaseModel):
    question_text: str
    options: List[str]
    correct_answer: int
    explanation: Optional[str] = None
    medication_name: str
    topic: Topic


class KnowledgeReport(BaseModel):
    date: str
    patient_name: str
    overall_score: int
    medication_knowledge: Dict[str, MedicationKnowledge]
    areas_for_education: List[EducationArea]
    specific_questions: List[MissedQuestion]
    recommendations: List[Recommendation]
