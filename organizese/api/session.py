"""
Per-request session context.

Authentication happens upstream; the gateway forwards the authenticated user id
in the X-User-Id header. The context is built per request and injected with
Depends - nothing about the session is kept in module state.
"""
from dataclasses import dataclass
from typing import Optional

from fastapi import Header, HTTPException


@dataclass(frozen=True)
class SessionContext:
    user_id: str


async def get_session_context(x_user_id: Optional[str] = Header(default=None)) -> SessionContext:
    """Dependency for the current session"""
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(status_code=401, detail="Not authenticated")
    return SessionContext(user_id=x_user_id.strip())
