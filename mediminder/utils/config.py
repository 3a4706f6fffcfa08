# mediminder/utils/config.py
import os
from typing import List
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

# Load .env file before defining settings
load_dotenv()

class Settings(BaseSettings):
    # Storage
    database_url: str = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./mediminder.db")
    uploads_dir: str = os.getenv("UPLOADS_DIR", "./uploads")
    allowed_image_extensions: List[str] = [".jpg", ".jpeg", ".png", ".gif"]
    max_upload_bytes: int = 10 * 1024 * 1024  # 10 MB

    log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()

    # --- AI Provider Configuration (OpenAI) ---
    openai_api_key: str | None = os.getenv("OPENAI_API_KEY")
    chat_model_name: str = os.getenv("OPENAI_MODEL_NAME", "gpt-3.5-turbo")
    vision_model_name: str = os.getenv("OPENAI_VISION_MODEL_NAME", "gpt-4o")
    transcription_model_name: str = "whisper-1"
    tts_model_name: str = "tts-1"
    tts_voice: str = "alloy"
    default_nurse_name: str = "Sarah"

    # Quiz generation
    quiz_question_count: int = 5
    quiz_temperature: float = 0.7
    quiz_max_tokens: int = 1500
    vision_max_tokens: int = 500

    # Knowledge report thresholds (miss rate, percent, strict comparison)
    high_priority_miss_rate: float = 50
    medium_priority_miss_rate: float = 25
    missed_question_sample_size: int = 5

    class Config:
        # Values from the environment override the defaults above
        env_file_encoding = 'utf-8'

settings = Settings()
