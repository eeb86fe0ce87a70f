"""Authentication service: password checks and session tokens."""

import logging
from datetime import UTC, datetime, timedelta

from jose import jwt
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from src.config import get_settings
from src.models.user import User
from src.services.errors import UnauthorizedError

logger = logging.getLogger(__name__)

settings = get_settings()

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

SESSION_TOKEN_SEPARATOR = "##"


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Hash a password."""
    return pwd_context.hash(password)


def create_access_token(user_id: int, username: str) -> str:
    """Create a JWT access token."""
    expire = datetime.now(UTC) + timedelta(minutes=settings.jwt_expiration_minutes)
    to_encode = {
        "sub": str(user_id),
        "username": username,
        "exp": expire,
    }
    encoded_jwt = jwt.encode(to_encode, settings.jwt_secret, algorithm=settings.jwt_algorithm)
    return encoded_jwt


def create_session_token(user: User) -> str:
    """Build the session cookie value for a logged-in user: ``<username>##<jwt>``."""
    token = create_access_token(user.id, user.username)
    return f"{user.username}{SESSION_TOKEN_SEPARATOR}{token}"


def parse_session_token(raw: str | None) -> tuple[str | None, str | None]:
    """
    Split a session cookie value into (username, token).

    Purely syntactic: nothing is checked against the store. Values without the
    separator yield (None, None); extra segments are ignored.
    """
    if raw is None:
        return None, None
    parts = raw.split(SESSION_TOKEN_SEPARATOR)
    if len(parts) < 2:
        return None, None
    return parts[0], parts[1]


def get_user_by_username(db: Session, username: str) -> User | None:
    """Get a user by username."""
    return db.query(User).filter(User.username == username).first()


def try_login(db: Session, username: str, password: str) -> User:
    """Check credentials, raising UnauthorizedError for an unknown user or a wrong password."""
    user = get_user_by_username(db, username)
    if not user or not verify_password(password, user.password_hash):
        logger.info(f"Failed login for '{username}'")
        raise UnauthorizedError(username)
    return user


def create_user(db: Session, username: str, password: str) -> User:
    """Create a new user."""
    hashed_password = get_password_hash(password)
    user = User(username=username, password_hash=hashed_password)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user
