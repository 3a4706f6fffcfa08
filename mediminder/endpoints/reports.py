# mediminder/endpoints/reports.py
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from mediminder.models.report import KnowledgeReport
from mediminder.services.analytics import build_knowledge_report
from mediminder.state_manager import list_quiz_attempts
from mediminder.utils.db import get_db
from mediminder.utils.logger import logger
from mediminder.utils.session import SessionContext, get_session_context

router = APIRouter()


@router.get("/knowledge", response_model=KnowledgeReport)
async def get_knowledge_report(ctx: SessionContext = Depends(get_session_context), db: AsyncSession = Depends(get_db)):
    """
    Builds the doctor-facing medication knowledge report from the caller's
    complete quiz history. Fails with 400 when no quiz has been completed yet.
    """
    attempts = await list_quiz_attempts(db, ctx.user_id)
    logger.debug(f"Building knowledge report for user {ctx.user_id} from {len(attempts)} attempts")
    return build_knowledge_report(attempts, patient_name=ctx.display_name)
