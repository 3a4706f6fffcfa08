# Voice pipelines: speech-to-text, chat, text-to-speech; generated audio is served from /audio
# mediminder/services/voice_service.py
import os
from typing import Tuple

from mediminder.services.ai_provider import ai_provider
from mediminder.services.prompt_library import (
    GENERAL_NURSE_INSTRUCTION,
    PERSONALIZED_NURSE_INSTRUCTION,
    PROMPT_LIBRARY,
)
from mediminder.utils.config import settings
from mediminder.utils.logger import logger
from mediminder.utils.uploads import audio_url, ensure_uploads_dir, unique_filename


class VoiceService:
    async def _speak(self, text: str, prefix: str) -> str:
        """Renders text to an mp3 in the uploads dir and returns its public URL."""
        filename = unique_filename(prefix, ".mp3")
        await ai_provider.synthesize_speech(text, os.path.join(ensure_uploads_dir(), filename))
        return audio_url(filename)

    async def transcribe(self, audio_path: str) -> str:
        text = await ai_provider.transcribe(audio_path)
        logger.info(f"Transcribed {os.path.basename(audio_path)} ({len(text)} chars).")
        return text

    async def process_voice(self, audio_path: str) -> Tuple[str, str]:
        """Transcribes a recording, answers it, and speaks the answer. The recording is removed afterwards."""
        try:
            transcript = await self.transcribe(audio_path)
            response_text = await ai_provider.complete(PROMPT_LIBRARY["Voice Assistant"], {"text": transcript})
            return response_text, await self._speak(response_text, "response")
        finally:
            if os.path.exists(audio_path):
                os.remove(audio_path)

    async def enhance_and_speak(self, text: str, prefix: str = "medication") -> Tuple[str, str]:
        enhanced_text = await ai_provider.complete(PROMPT_LIBRARY["Medication Narrator"], {"text": text})
        return enhanced_text, await self._speak(enhanced_text, prefix)

    async def nurse_reply(self, text: str, nurse_name: str | None = None, personalized: bool = True) -> Tuple[str, str]:
        inputs = {
            "text": text,
            "nurse_name": nurse_name or settings.default_nurse_name,
            "personalization": PERSONALIZED_NURSE_INSTRUCTION if personalized else GENERAL_NURSE_INSTRUCTION,
        }
        logger.info(f"AI nurse '{inputs['nurse_name']}' replying (personalized={personalized}).")
        response_text = await ai_provider.complete(PROMPT_LIBRARY["AI Nurse"], inputs)
        return response_text, await self._speak(response_text, "nurse-response")


voice_service = VoiceService()
