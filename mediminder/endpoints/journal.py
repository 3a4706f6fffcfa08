# Endpoints for the symptom journal: CRUD, AI analysis, voice entries and pattern insights
# mediminder/endpoints/journal.py
import os
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from mediminder.models.journal import (
    AnalyzeRequest,
    JournalAnalysis,
    JournalEntryCreate,
    JournalEntryOut,
    JournalEntryUpdate,
    JournalInsight,
)
from mediminder.services.journal_service import journal_service
from mediminder.services.voice_service import voice_service
from mediminder.state_manager import (
    create_journal_entry,
    delete_journal_entry,
    get_journal_entry,
    list_journal_entries,
    update_journal_entry,
)
from mediminder.utils.db import get_db
from mediminder.utils.session import SessionContext, get_session_context
from mediminder.utils.uploads import read_upload, save_upload

router = APIRouter()


@router.get("/", response_model=List[JournalEntryOut])
async def get_entries(ctx: SessionContext = Depends(get_session_context), db: AsyncSession = Depends(get_db)):
    return await list_journal_entries(db, ctx.user_id)


@router.post("/", response_model=JournalEntryOut, status_code=201)
async def add_entry(
    entry: JournalEntryCreate,
    ctx: SessionContext = Depends(get_session_context),
    db: AsyncSession = Depends(get_db),
):
    return await create_journal_entry(db, ctx.user_id, entry.text, entry.medication, entry.analysis)


@router.post("/analyze", response_model=JournalAnalysis)
async def analyze_entry(request: AnalyzeRequest, ctx: SessionContext = Depends(get_session_context)):
    """Extracts symptoms, medication, severity and timing; empty when the AI is unavailable."""
    return await journal_service.analyze_entry(request.text)


@router.post("/voice", response_model=JournalEntryOut, status_code=201)
async def add_voice_entry(
    audio: UploadFile | None = File(None),
    medication: Optional[str] = Form(None),
    ctx: SessionContext = Depends(get_session_context),
    db: AsyncSession = Depends(get_db),
):
    """Transcribes a recorded entry, analyzes it, and saves it with a reference to the recording."""
    if audio is None:
        raise HTTPException(status_code=400, detail="No audio file provided")
    content = read_upload(audio)
    extension = os.path.splitext(audio.filename)[1].lower() or ".webm"
    audio_path = save_upload(content, "audio", extension)
    try:
        text = await voice_service.transcribe(audio_path)
        analysis = await journal_service.analyze_entry(text)
        return await create_journal_entry(
            db, ctx.user_id, text, medication, analysis, audio_ref=os.path.basename(audio_path)
        )
    except Exception:
        # Recordings are only kept when an entry points to them.
        if os.path.exists(audio_path):
            os.remove(audio_path)
        raise


@router.get("/insights", response_model=JournalInsight)
async def get_insights(ctx: SessionContext = Depends(get_session_context), db: AsyncSession = Depends(get_db)):
    entries = await list_journal_entries(db, ctx.user_id)
    return journal_service.generate_insights(entries)


@router.get("/{entry_id}", response_model=JournalEntryOut)
async def get_entry(entry_id: str, ctx: SessionContext = Depends(get_session_context), db: AsyncSession = Depends(get_db)):
    return await get_journal_entry(db, ctx.user_id, entry_id)


@router.put("/{entry_id}", response_model=JournalEntryOut)
async def edit_entry(
    entry_id: str,
    entry: JournalEntryUpdate,
    ctx: SessionContext = Depends(get_session_context),
    db: AsyncSession = Depends(get_db),
):
    return await update_journal_entry(db, ctx.user_id, entry_id, entry.text, entry.medication, entry.analysis)


@router.delete("/{entry_id}", status_code=204)
async def remove_entry(entry_id: str, ctx: SessionContext = Depends(get_session_context), db: AsyncSession = Depends(get_db)):
    await delete_journal_entry(db, ctx.user_id, entry_id)
