"""FastAPI dependencies for the database and the request context."""

from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from src.config import get_settings
from src.database import get_db
from src.graph.context import RequestContext
from src.services.auth import parse_session_token

settings = get_settings()


def get_request_context(
    request: Request,
    db: Annotated[Session, Depends(get_db)],
) -> RequestContext:
    """Build the per-request context from a pooled session and the session cookie."""
    username, session_token = parse_session_token(
        request.cookies.get(settings.session_cookie_name)
    )
    return RequestContext(db=db, username=username, session_token=session_token)
