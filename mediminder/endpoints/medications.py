# mediminder/endpoints/medications.py
from typing import List

from fastapi import APIRouter, Depends, File, UploadFile
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from mediminder.models.medication import MedicationCreate, MedicationDraft, MedicationOut, MedicationUpdate
from mediminder.services.medication_service import medication_service, medication_speech_text
from mediminder.services.voice_service import voice_service
from mediminder.state_manager import (
    create_medication,
    delete_medication,
    get_medication,
    list_medications,
    update_medication,
)
from mediminder.utils.db import get_db
from mediminder.utils.logger import logger
from mediminder.utils.session import SessionContext, get_session_context
from mediminder.utils.uploads import image_extension, read_upload

router = APIRouter()


class SpokenText(BaseModel):
    text: str
    audio_url: str


@router.get("/", response_model=List[MedicationOut])
async def get_medications(ctx: SessionContext = Depends(get_session_context), db: AsyncSession = Depends(get_db)):
    return await list_medications(db, ctx.user_id)


@router.post("/", response_model=MedicationOut, status_code=201)
async def add_medication(
    medication: MedicationCreate,
    ctx: SessionContext = Depends(get_session_context),
    db: AsyncSession = Depends(get_db),
):
    return await create_medication(db, ctx.user_id, medication)


@router.post("/recognize", response_model=MedicationDraft)
async def recognize_medication(file: UploadFile = File(...), ctx: SessionContext = Depends(get_session_context)):
    """
    Identifies a medicine from a photo and returns a draft for the user to
    confirm. Nothing is saved.
    """
    extension = image_extension(file.filename)
    content = read_upload(file)
    mime_type = file.content_type or f"image/{extension.lstrip('.').replace('jpg', 'jpeg')}"
    logger.info(f"Recognizing medicine for user {ctx.user_id} ({file.filename}, {len(content)} bytes)")
    return await medication_service.recognize_medicine(content, mime_type)


@router.get("/{medication_id}", response_model=MedicationOut)
async def get_single_medication(
    medication_id: str,
    ctx: SessionContext = Depends(get_session_context),
    db: AsyncSession = Depends(get_db),
):
    return await get_medication(db, ctx.user_id, medication_id)


@router.put("/{medication_id}", response_model=MedicationOut)
async def edit_medication(
    medication_id: str,
    medication: MedicationUpdate,
    ctx: SessionContext = Depends(get_session_context),
    db: AsyncSession = Depends(get_db),
):
    return await update_medication(db, ctx.user_id, medication_id, medication)


@router.delete("/{medication_id}", status_code=204)
async def remove_medication(
    medication_id: str,
    ctx: SessionContext = Depends(get_session_context),
    db: AsyncSession = Depends(get_db),
):
    await delete_medication(db, ctx.user_id, medication_id)


@router.post("/{medication_id}/speak", response_model=SpokenText)
async def speak_medication(
    medication_id: str,
    ctx: SessionContext = Depends(get_session_context),
    db: AsyncSession = Depends(get_db),
):
    """Reads a stored medication's details aloud through the AI narrator."""
    medication = await get_medication(db, ctx.user_id, medication_id)
    text, url = await voice_service.enhance_and_speak(medication_speech_text(medication), prefix="medication")
    return SpokenText(text=text, audio_url=url)
