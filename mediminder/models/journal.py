# Data models for the symptom journal
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from mediminder.models.enums import Severity


class JournalAnalysis(BaseModel):
    """Structured-output contract for AI extraction from a journal entry."""
    symptoms: List[str] = Field(default_factory=list, description="Symptoms the user mentions.")
    medication: Optional[str] = Field(None, description="Medication the entry refers to, if any.")
    severity: Optional[Severity] = Field(None, description="Overall severity: mild, moderate or severe.")
    time_after_dose_minutes: Optional[int] = Field(None, ge=0, description="Minutes between the dose and the symptom.")
    confidence: Optional[float] = Field(None, ge=0, le=1, description="Confidence of the extraction, 0 to 1.")


class JournalEntryCreate(BaseModel):
    text: str = Field(..., min_length=1)
    medication: Optional[str] = None
    analysis: Optional[JournalAnalysis] = None


class JournalEntryUpdate(JournalEntryCreate):
    pass


class JournalEntryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    text: str
    timestamp: datetime
    medication: Optional[str] = None
    symptoms: List[str] = []
    severity: Optional[Severity] = None
    time_after_dose_minutes: Optional[int] = None
    confidence: Optional[float] = None
    audio_ref: Optional[str] = None


class AnalyzeRequest(BaseModel):
    text: str = Field(..., min_length=1)


class JournalInsight(BaseModel):
    pattern: str
    explanation: str
    recommendations: List[str]
