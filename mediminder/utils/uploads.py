# mediminder/utils/uploads.py
import os
import time
import uuid

from fastapi import HTTPException, UploadFile

from mediminder.utils.config import settings


def ensure_uploads_dir() -> str:
    os.makedirs(settings.uploads_dir, exist_ok=True)
    return settings.uploads_dir


def unique_filename(prefix: str, extension: str) -> str:
    """e.g. response-1718000000000-1a2b3c4d.mp3"""
    return f"{prefix}-{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}{extension}"


def audio_url(filename: str) -> str:
    return f"/audio/{filename}"


def read_upload(file: UploadFile) -> bytes:
    """Reads an upload, rejecting empty or oversized files."""
    if not file.filename:
        raise HTTPException(status_code=400, detail="No file provided")
    content = file.file.read(settings.max_upload_bytes + 1)
    if len(content) > settings.max_upload_bytes:
        raise HTTPException(status_code=400, detail="File too large")
    if not content:
        raise HTTPException(status_code=400, detail="Uploaded file is empty")
    return content


def save_upload(content: bytes, prefix: str, extension: str) -> str:
    """Writes upload bytes into the uploads dir and returns the path."""
    path = os.path.join(ensure_uploads_dir(), unique_filename(prefix, extension))
    with open(path, "wb") as out:
        out.write(content)
    return path


def image_extension(filename: str) -> str:
    """Lower-cased extension of an image upload; 400 unless it is an allowed image type."""
    extension = os.path.splitext(filename or "")[1].lower()
    if extension not in settings.allowed_image_extensions:
        raise HTTPException(status_code=400, detail="Only image files are allowed!")
    return extension
