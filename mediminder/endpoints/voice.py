# Endpoints for the voice assistant and AI nurse
# mediminder/endpoints/voice.py
import os

from fastapi import APIRouter, File, HTTPException, UploadFile
from pydantic import BaseModel

from mediminder.services.voice_service import voice_service
from mediminder.utils.logger import logger
from mediminder.utils.uploads import read_upload, save_upload

router = APIRouter()


class TextRequest(BaseModel):
    text: str | None = None


class NurseRequest(BaseModel):
    text: str | None = None
    nurse_name: str | None = None
    personalized: bool = True


class VoiceResponse(BaseModel):
    text: str
    audio_url: str


class NurseResponse(BaseModel):
    response: str
    audio_url: str


def _require_text(text: str | None) -> str:
    if not text or not text.strip():
        raise HTTPException(status_code=400, detail="No text provided")
    return text


@router.post("/process-voice", response_model=VoiceResponse)
async def process_voice(audio: UploadFile | None = File(None)):
    """Answers a spoken question with a spoken reply."""
    if audio is None:
        raise HTTPException(status_code=400, detail="No audio file provided")
    content = read_upload(audio)
    extension = os.path.splitext(audio.filename)[1].lower() or ".webm"
    audio_path = save_upload(content, "audio", extension)
    logger.info(f"Received audio file {audio.filename} ({len(content)} bytes, {audio.content_type})")
    text, url = await voice_service.process_voice(audio_path)
    return VoiceResponse(text=text, audio_url=url)


@router.post("/nurse", response_model=NurseResponse)
async def nurse(request: NurseRequest):
    text = _require_text(request.text)
    response_text, url = await voice_service.nurse_reply(text, request.nurse_name, request.personalized)
    return NurseResponse(response=response_text, audio_url=url)


@router.post("/speak-medication", response_model=VoiceResponse)
async def speak_medication(request: TextRequest):
    text, url = await voice_service.enhance_and_speak(_require_text(request.text), prefix="medication")
    return VoiceResponse(text=text, audio_url=url)


@router.post("/process-medication", response_model=VoiceResponse)
async def process_medication(request: TextRequest):
    text, url = await voice_service.enhance_and_speak(_require_text(request.text), prefix="response")
    return VoiceResponse(text=text, audio_url=url)
