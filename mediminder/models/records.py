# mediminder/models/records.py
# Persistent collections: one table per document collection, owner id on every row.
import uuid
from sqlalchemy import (
    Column,
    Integer,
    String,
    DateTime,
    JSON,
    Text,
    Float,
)
from sqlalchemy.orm import declarative_base
from datetime import datetime


Base = declarative_base()


def _new_id() -> str:
    return uuid.uuid4().hex


class Medication(Base):
    __tablename__ = "medications"
    id = Column(String, primary_key=True, default=_new_id)
    user_id = Column(String, index=True, nullable=False)
    name = Column(String, nullable=False)
    dosage = Column(String, nullable=False)
    frequency = Column(String, nullable=False)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class JournalEntry(Base):
    __tablename__ = "journal"
    id = Column(String, primary_key=True, default=_new_id)
    user_id = Column(String, index=True, nullable=False)
    text = Column(Text, nullable=False)
    timestamp = Column(DateTime, default=datetime.utcnow)
    medication = Column(String, nullable=True)
    symptoms = Column(JSON, default=lambda: [])
    severity = Column(String, nullable=True)  # mild / moderate / severe
    time_after_dose_minutes = Column(Integer, nullable=True)
    confidence = Column(Float, nullable=True)
    audio_ref = Column(String, nullable=True)


class QuizAttempt(Base):
    """Immutable once written; rows are only ever inserted and listed."""
    __tablename__ = "quiz_attempts"
    id = Column(String, primary_key=True, default=_new_id)
    user_id = Column(String, index=True, nullable=False)
    questions = Column(JSON, nullable=False)  # ordered list of the questions shown
    answers = Column(JSON, nullable=False)    # chosen option index per question
    score = Column(Integer, nullable=False)
    total_questions = Column(Integer, nullable=False)
    timestamp = Column(DateTime, default=datetime.utcnow)
