"""Authentication API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.orm import Session

from src.api.dependencies import get_request_context
from src.config import get_settings
from src.database import get_db
from src.graph.context import RequestContext
from src.schemas.auth import (
    Credentials,
    LoginResponse,
    SessionResponse,
    UserRegister,
    UserResponse,
)
from src.services.auth import (
    create_session_token,
    create_user,
    get_user_by_username,
    try_login,
)
from src.services.errors import UnauthorizedError

settings = get_settings()

router = APIRouter(prefix="/api/v1/auth", tags=["auth"])


def _login(db: Session, credentials: Credentials, response: Response) -> LoginResponse:
    try:
        user = try_login(db, credentials.username, credentials.password)
    except UnauthorizedError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
        ) from e

    session_token = create_session_token(user)
    response.set_cookie(
        key=settings.session_cookie_name,
        value=session_token,
        max_age=settings.jwt_expiration_minutes * 60,
        httponly=True,
        samesite="lax",
        secure=settings.is_production,
    )
    return LoginResponse(username=user.username, session_token=session_token)


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register(
    user_data: UserRegister,
    db: Annotated[Session, Depends(get_db)],
):
    """Register a new user."""
    if get_user_by_username(db, user_data.username):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Username already registered",
        )

    user = create_user(db, user_data.username, user_data.password)
    return UserResponse.model_validate(user)


@router.get("/login", response_model=LoginResponse)
async def login_query(
    username: Annotated[str, Query(min_length=1)],
    password: Annotated[str, Query(min_length=1)],
    response: Response,
    db: Annotated[Session, Depends(get_db)],
):
    """Login with credentials passed as query parameters; sets the session cookie."""
    return _login(db, Credentials(username=username, password=password), response)


@router.post("/login", response_model=LoginResponse)
async def login(
    credentials: Credentials,
    response: Response,
    db: Annotated[Session, Depends(get_db)],
):
    """Login with username and password; sets the session cookie."""
    return _login(db, credentials, response)


@router.post("/logout")
async def logout(response: Response):
    """Logout by clearing the session cookie."""
    response.delete_cookie(settings.session_cookie_name)
    return {"message": "Logged out successfully"}


@router.get("/session", response_model=SessionResponse)
async def get_session(
    context: Annotated[RequestContext, Depends(get_request_context)],
):
    """Identity parsed from the session cookie. Not verified against the store."""
    return SessionResponse(username=context.username, session_token=context.session_token)
