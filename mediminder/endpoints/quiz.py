# Endpoints for generating quizzes, running a quiz session, and recording attempts
# mediminder/endpoints/quiz.py
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from mediminder.models.quiz import (
    AnswerSubmission,
    QuizAttemptCreate,
    QuizAttemptOut,
    QuizGenerateRequest,
    QuizQuestionSet,
    QuizSessionState,
)
from mediminder.services.quiz_service import quiz_service
from mediminder.services.quiz_session import QuizSession
from mediminder.state_manager import list_medications, list_quiz_attempts, quiz_sessions, record_quiz_attempt
from mediminder.utils.db import get_db
from mediminder.utils.logger import logger
from mediminder.utils.session import SessionContext, get_session_context

router = APIRouter()


@router.post("/generate", response_model=QuizQuestionSet)
async def generate_quiz(request: QuizGenerateRequest):
    """Generates AI questions for the given medications. Provider errors are not masked here."""
    if not request.medications:
        raise HTTPException(status_code=400, detail="Medications array is required")
    questions = await quiz_service.generate_ai_questions(request.medications)
    return QuizQuestionSet(questions=questions)


@router.post("/session", response_model=QuizSessionState)
async def start_session(ctx: SessionContext = Depends(get_session_context), db: AsyncSession = Depends(get_db)):
    """Starts (or replaces) the caller's quiz with questions for their medications."""
    medications = await list_medications(db, ctx.user_id)
    questions, source = await quiz_service.get_questions(medications)
    session = QuizSession(questions=questions, source=source)
    quiz_sessions[ctx.user_id] = session
    logger.info(f"Started {source} quiz for user {ctx.user_id} with {len(questions)} questions.")
    return session.to_state()


@router.get("/session", response_model=QuizSessionState)
async def get_session(ctx: SessionContext = Depends(get_session_context)):
    session = quiz_sessions.get(ctx.user_id)
    if not session:
        raise HTTPException(status_code=404, detail="No active quiz")
    return session.to_state()


@router.post("/session/answer", response_model=QuizSessionState)
async def submit_answer(
    submission: AnswerSubmission,
    ctx: SessionContext = Depends(get_session_context),
    db: AsyncSession = Depends(get_db),
):
    session = quiz_sessions.get(ctx.user_id)
    if not session:
        raise HTTPException(status_code=404, detail="No active quiz")

    attempt = session.submit_answer(submission.selected_option)
    if attempt is not None:
        try:
            record = await record_quiz_attempt(db, ctx.user_id, attempt)
        except SQLAlchemyError:
            # A restart during the save replaced this session; leave the new one alone.
            if quiz_sessions.get(ctx.user_id) is session:
                session.undo_last_answer()
            raise
        session.attempt_id = record.id
    return session.to_state()


@router.post("/session/restart", response_model=QuizSessionState)
async def restart_session(ctx: SessionContext = Depends(get_session_context), db: AsyncSession = Depends(get_db)):
    """Replaces the caller's quiz with a fresh (or reshuffled) question set."""
    medications = await list_medications(db, ctx.user_id)
    questions, source = await quiz_service.get_questions(medications, restart=True)
    session = quiz_sessions[ctx.user_id] = QuizSession(questions=questions, source=source)
    logger.info(f"Restarted quiz for user {ctx.user_id} ({source}).")
    return session.to_state()


@router.post("/attempts", response_model=QuizAttemptOut, status_code=201)
async def create_attempt(
    attempt: QuizAttemptCreate,
    ctx: SessionContext = Depends(get_session_context),
    db: AsyncSession = Depends(get_db),
):
    """Records an attempt from a client that ran the quiz itself."""
    return await record_quiz_attempt(db, ctx.user_id, attempt)


@router.get("/attempts", response_model=List[QuizAttemptOut])
async def get_attempts(ctx: SessionContext = Depends(get_session_context), db: AsyncSession = Depends(get_db)):
    return await list_quiz_attempts(db, ctx.user_id)
