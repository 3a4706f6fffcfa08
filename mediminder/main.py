# FastAPI entry point; wires routers, storage, static audio files and error handlers
# mediminder/main.py
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from contextlib import asynccontextmanager
from sqlalchemy.exc import SQLAlchemyError
import os
import sys

# Add project root to sys.path to allow for absolute imports
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

# Import routers and services
from mediminder.endpoints import (
    medications as medications_router,
    journal as journal_router,
    quiz as quiz_router,
    reports as reports_router,
    voice as voice_router,
)
from mediminder.services.ai_provider import AIProviderError
from mediminder.services.analytics import NoAttemptsError
from mediminder.services.medication_service import MedicationParseError
from mediminder.services.quiz_service import QuizParseError
from mediminder.services.quiz_session import QuizCompletedError
from mediminder.utils.config import settings
from mediminder.utils.logger import logger
from mediminder.utils.db import engine
from mediminder.utils.uploads import ensure_uploads_dir
from mediminder.models.records import Base

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manages application startup and shutdown events.
    """
    logger.info("MediMinder API starting up...")

    # Create database tables if they don't exist
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    logger.info(f"Serving generated audio from {ensure_uploads_dir()}")
    if not settings.openai_api_key:
        logger.warning("OPENAI_API_KEY is not set; AI features will fail until it is configured.")

    logger.info("Startup complete.")
    yield
    # On shutdown
    logger.info("MediMinder API shutting down...")
    await engine.dispose()

# --- FastAPI App Initialization ---
app = FastAPI(
    title="MediMinder API",
    description="API for medication management, knowledge quizzes and doctor reports.",
    version="1.0.0",
    lifespan=lifespan
)

# --- CORS Middleware ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # In production, restrict this to your frontend's domain
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- Error Handlers ---
@app.exception_handler(AIProviderError)
async def ai_provider_error_handler(request: Request, exc: AIProviderError):
    logger.error(f"AI provider failure on {request.url.path}: {exc}")
    return JSONResponse(status_code=502, content={"detail": "AI provider is unavailable"})

@app.exception_handler(QuizParseError)
async def quiz_parse_error_handler(request: Request, exc: QuizParseError):
    logger.error(f"Unparseable quiz response on {request.url.path}: {exc}")
    return JSONResponse(status_code=502, content={"detail": "Failed to parse AI response"})

@app.exception_handler(MedicationParseError)
async def medication_parse_error_handler(request: Request, exc: MedicationParseError):
    logger.warning(f"Medicine recognition rejected: {exc}")
    return JSONResponse(status_code=400, content={"detail": str(exc)})

@app.exception_handler(NoAttemptsError)
async def no_attempts_error_handler(request: Request, exc: NoAttemptsError):
    return JSONResponse(status_code=400, content={"detail": str(exc)})

@app.exception_handler(QuizCompletedError)
async def quiz_completed_error_handler(request: Request, exc: QuizCompletedError):
    return JSONResponse(status_code=409, content={"detail": str(exc)})

@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.exception(f"Database error on {request.url.path}")
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})

# --- API Routers ---
app.include_router(medications_router.router, prefix="/medications", tags=["Medications"])
app.include_router(journal_router.router, prefix="/journal", tags=["Journal"])
app.include_router(quiz_router.router, prefix="/quiz", tags=["Quiz"])
app.include_router(reports_router.router, prefix="/reports", tags=["Reports"])
app.include_router(voice_router.router, prefix="/voice", tags=["Voice"])

# Generated speech and uploaded recordings are served from the uploads dir
app.mount("/audio", StaticFiles(directory=ensure_uploads_dir()), name="audio")

# --- Root Endpoint ---
@app.get("/")
async def root():
    return {"message": "Welcome to the MediMinder API"}
