# mediminder/services/medication_service.py
import re

from mediminder.models.medication import MedicationDraft, RecognitionResult
from mediminder.services.ai_provider import StructuredOutputError, ai_provider
from mediminder.services.prompt_library import (
    MEDICINE_RECOGNITION_STRUCTURED_PROMPT,
    MEDICINE_RECOGNITION_SYSTEM_PROMPT,
    MEDICINE_RECOGNITION_USER_PROMPT,
)
from mediminder.utils.logger import logger

_FIELD_PATTERNS = {
    "name": re.compile(r"Medication Name:\s*(.+?)(?=\n|$)"),
    "dosage": re.compile(r"Dosage:\s*(.+?)(?=\n|$)"),
    "frequency": re.compile(r"Frequency:\s*(.+?)(?=\n|$)"),
    "notes": re.compile(r"Notes:\s*(.+?)(?=\n|$)"),
}
_REQUIRED_FIELDS = ("name", "dosage", "frequency")
_INCOMPLETE_MESSAGE = "Could not extract all required medication information. Please try scanning again."


class MedicationParseError(Exception):
    """The recognized medicine is missing required fields or could not be identified."""
    pass


def parse_medicine_info(medicine_info: str) -> MedicationDraft:
    """
    Degraded parser for the labelled text format:
    'Medication Name: ...', 'Dosage: ...', 'Frequency: ...', 'Notes: ...'.
    """
    text = (medicine_info or "").strip()
    if text.startswith("Error:"):
        raise MedicationParseError(text[len("Error:"):].strip() or "The medicine could not be identified.")

    parsed = {}
    for field_name, pattern in _FIELD_PATTERNS.items():
        match = pattern.search(text)
        parsed[field_name] = match.group(1).strip() if match else ""

    if not all(parsed[f] for f in _REQUIRED_FIELDS):
        raise MedicationParseError(_INCOMPLETE_MESSAGE)
    return MedicationDraft(**parsed)


def draft_from_recognition(result: RecognitionResult) -> MedicationDraft:
    if not result.identified:
        raise MedicationParseError(result.reason or "The medicine could not be identified.")
    fields = {
        "name": (result.name or "").strip(),
        "dosage": (result.dosage or "").strip(),
        "frequency": (result.frequency or "").strip(),
    }
    if not all(fields.values()):
        raise MedicationParseError(_INCOMPLETE_MESSAGE)
    return MedicationDraft(notes=(result.notes or "").strip(), **fields)


def medication_speech_text(medication) -> str:
    """Sentence read aloud when a user asks to hear a medication's details."""
    text = (
        f"Here are the details for {medication.name}: "
        f"The dosage is {medication.dosage}. "
        f"Take it {medication.frequency}."
    )
    if medication.notes:
        text += f" Additional notes: {medication.notes}"
    return text


class MedicationService:
    async def recognize_medicine(self, image_bytes: bytes, mime_type: str) -> MedicationDraft:
        """
        Identifies a medicine from a photo. Raises MedicationParseError when it
        cannot be identified and AIProviderError when the provider fails.
        """
        try:
            result = await ai_provider.describe_image_structured(
                MEDICINE_RECOGNITION_STRUCTURED_PROMPT,
                MEDICINE_RECOGNITION_USER_PROMPT,
                image_bytes,
                mime_type,
                RecognitionResult,
            )
            return draft_from_recognition(result)
        except StructuredOutputError:
            logger.warning("Structured recognition failed; retrying with the labelled text format.")

        medicine_info = await ai_provider.describe_image(
            MEDICINE_RECOGNITION_SYSTEM_PROMPT,
            MEDICINE_RECOGNITION_USER_PROMPT,
            image_bytes,
            mime_type,
        )
        return parse_medicine_info(medicine_info)


medication_service = MedicationService()
