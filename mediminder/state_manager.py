# mediminder/state_manager.py
# Owner-scoped access to the stored collections, plus the in-memory quiz sessions.
from typing import Dict, List, Optional

from fastapi import HTTPException
from sqlalchemy.future import select
from sqlalchemy.ext.asyncio import AsyncSession

from mediminder.models.journal import JournalAnalysis
from mediminder.models.medication import MedicationCreate, MedicationUpdate
from mediminder.models.quiz import QuizAttemptCreate
from mediminder.models.records import JournalEntry, Medication, QuizAttempt
from mediminder.services.quiz_session import QuizSession
from mediminder.utils.logger import logger

# Active quiz sessions, one per user. Not persisted; lost on restart.
quiz_sessions: Dict[str, QuizSession] = {}


# --- Medications ---

async def list_medications(session: AsyncSession, user_id: str) -> List[Medication]:
    result = await session.execute(
        select(Medication).filter_by(user_id=user_id).order_by(Medication.created_at)
    )
    return list(result.scalars().all())

async def get_medication(session: AsyncSession, user_id: str, medication_id: str) -> Medication:
    """Fetches a medication owned by user_id; other owners' records are reported as missing."""
    result = await session.execute(
        select(Medication).filter_by(id=medication_id, user_id=user_id)
    )
    medication = result.scalars().first()
    if not medication:
        raise HTTPException(status_code=404, detail="Medication not found")
    return medication

async def create_medication(session: AsyncSession, user_id: str, data: MedicationCreate) -> Medication:
    medication = Medication(user_id=user_id, **data.model_dump())
    session.add(medication)
    await session.commit()
    await session.refresh(medication)
    logger.info(f"Added medication '{medication.name}' for user {user_id}.")
    return medication

async def update_medication(session: AsyncSession, user_id: str, medication_id: str, data: MedicationUpdate) -> Medication:
    medication = await get_medication(session, user_id, medication_id)
    for field_name, value in data.model_dump(exclude_unset=True).items():
        setattr(medication, field_name, value)
    await session.commit()
    await session.refresh(medication)
    logger.info(f"Updated medication {medication_id} for user {user_id}.")
    return medication

async def delete_medication(session: AsyncSession, user_id: str, medication_id: str) -> None:
    medication = await get_medication(session, user_id, medication_id)
    await session.delete(medication)
    await session.commit()
    logger.info(f"Deleted medication {medication_id} for user {user_id}.")


# --- Journal ---

async def list_journal_entries(session: AsyncSession, user_id: str) -> List[JournalEntry]:
    result = await session.execute(
        select(JournalEntry).filter_by(user_id=user_id).order_by(JournalEntry.timestamp.desc())
    )
    return list(result.scalars().all())

async def get_journal_entry(session: AsyncSession, user_id: str, entry_id: str) -> JournalEntry:
    result = await session.execute(
        select(JournalEntry).filter_by(id=entry_id, user_id=user_id)
    )
    entry = result.scalars().first()
    if not entry:
        raise HTTPException(status_code=404, detail="Journal entry not found")
    return entry

def _apply_entry_fields(entry: JournalEntry, text: str, medication: Optional[str], analysis: Optional[JournalAnalysis]) -> None:
    # An explicitly selected medication wins over the one the analysis found.
    analysis = analysis or JournalAnalysis()
    entry.text = text
    entry.medication = medication or analysis.medication
    entry.symptoms = list(analysis.symptoms)
    entry.severity = analysis.severity.value if analysis.severity else None
    entry.time_after_dose_minutes = analysis.time_after_dose_minutes
    entry.confidence = analysis.confidence

async def create_journal_entry(
    session: AsyncSession,
    user_id: str,
    text: str,
    medication: Optional[str] = None,
    analysis: Optional[JournalAnalysis] = None,
    audio_ref: Optional[str] = None,
) -> JournalEntry:
    entry = JournalEntry(user_id=user_id, audio_ref=audio_ref)
    _apply_entry_fields(entry, text, medication, analysis)
    session.add(entry)
    await session.commit()
    await session.refresh(entry)
    logger.info(f"Added journal entry {entry.id} for user {user_id}.")
    return entry

async def update_journal_entry(
    session: AsyncSession,
    user_id: str,
    entry_id: str,
    text: str,
    medication: Optional[str] = None,
    analysis: Optional[JournalAnalysis] = None,
) -> JournalEntry:
    entry = await get_journal_entry(session, user_id, entry_id)
    _apply_entry_fields(entry, text, medication, analysis)
    await session.commit()
    await session.refresh(entry)
    logger.info(f"Updated journal entry {entry_id} for user {user_id}.")
    return entry

async def delete_journal_entry(session: AsyncSession, user_id: str, entry_id: str) -> None:
    entry = await get_journal_entry(session, user_id, entry_id)
    await session.delete(entry)
    await session.commit()
    logger.info(f"Deleted journal entry {entry_id} for user {user_id}.")


# --- Quiz attempts ---

async def record_quiz_attempt(session: AsyncSession, user_id: str, attempt: QuizAttemptCreate) -> QuizAttempt:
    """Persists a finished attempt. The score is recomputed from the answers."""
    score = sum(
        1 for question, answer in zip(attempt.questions, attempt.answers)
        if answer == question.correct_answer
    )
    record = QuizAttempt(
        user_id=user_id,
        questions=[q.model_dump() for q in attempt.questions],
        answers=list(attempt.answers),
        score=score,
        total_questions=len(attempt.questions),
    )
    session.add(record)
    await session.commit()
    await session.refresh(record)
    logger.info(f"Recorded quiz attempt {record.id} for user {user_id}: {score}/{record.total_questions}.")
    return record

async def list_quiz_attempts(session: AsyncSession, user_id: str) -> List[QuizAttempt]:
    """Full attempt history, newest first."""
    result = await session.execute(
        select(QuizAttempt).filter_by(user_id=user_id).order_by(QuizAttempt.timestamp.desc())
    )
    return list(result.scalars().all())
