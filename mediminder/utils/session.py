# mediminder/utils/session.py
from dataclasses import dataclass

from fastapi import Header, HTTPException


@dataclass(frozen=True)
class SessionContext:
    """Identity of the caller, passed explicitly into every owner-scoped operation."""
    user_id: str
    display_name: str | None = None


async def get_session_context(
    x_user_id: str | None = Header(None),
    x_user_email: str | None = Header(None),
) -> SessionContext:
    """
    Builds the session context from request headers.
    Authentication happens upstream; this layer only requires that an owner id is present.
    """
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(status_code=401, detail="Missing X-User-Id header")
    return SessionContext(user_id=x_user_id.strip(), display_name=x_user_email)
