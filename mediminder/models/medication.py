# Data models for the medication registry
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class MedicationCreate(BaseModel):
    name: str = Field(..., min_length=1)
    dosage: str = Field(..., min_length=1)
    frequency: str = Field(..., min_length=1)
    notes: Optional[str] = None


class MedicationUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    dosage: Optional[str] = Field(None, min_length=1)
    frequency: Optional[str] = Field(None, min_length=1)
    notes: Optional[str] = None


class MedicationOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    name: str
    dosage: str
    frequency: str
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class MedicationDraft(BaseModel):
    """Medication details recognized from a photo, not yet saved."""
    name: str = Field(..., description="Medication name as printed on the package.")
    dosage: str = Field(..., description="Strength or dose per unit, e.g. '500 mg'.")
    frequency: str = Field(..., description="How often it is taken.")
    notes: str = Field("", description="Warnings or special instructions.")


class RecognitionResult(BaseModel):
    """Structured-output contract for the vision model."""
    identified: bool = Field(..., description="False when the medicine could not be identified with confidence.")
    reason: Optional[str] = Field(None, description="Why identification failed, when identified is false.")
    name: Optional[str] = None
    dosage: Optional[str] = None
    frequency: Optional[str] = None
    notes: Optional[str] = None
