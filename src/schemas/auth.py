"""Authentication schemas."""

from pydantic import BaseModel, ConfigDict, Field


class UserRegister(BaseModel):
    """User registration request."""

    username: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=8, max_length=128)


class Credentials(BaseModel):
    """Login request."""

    username: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=1, max_length=128)


class UserResponse(BaseModel):
    """User information response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str


class LoginResponse(BaseModel):
    """Successful login: the session token is also set as a cookie."""

    username: str
    session_token: str


class SessionResponse(BaseModel):
    """Identity parsed from the session cookie of the current request."""

    username: str | None
    session_token: str | None
