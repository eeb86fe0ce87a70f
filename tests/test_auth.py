"""Session token and login tests."""

import pytest
from jose import jwt

from src.config import get_settings
from src.models.user import User
from src.services.auth import (
    create_session_token,
    create_user,
    parse_session_token,
    try_login,
)
from src.services.errors import UnauthorizedError

COOKIE = get_settings().session_cookie_name


# --- parse_session_token ---


def test_parse_session_token():
    """Test splitting a well-formed session cookie."""
    assert parse_session_token("alice##tok123") == ("alice", "tok123")


def test_parse_session_token_malformed():
    """Test that a value without the separator yields no identity."""
    assert parse_session_token("malformed") == (None, None)
    assert parse_session_token("") == (None, None)
    assert parse_session_token(None) == (None, None)


def test_parse_session_token_ignores_extra_segments():
    """Test that only the first two segments are used."""
    assert parse_session_token("alice##tok##extra") == ("alice", "tok")


def test_parse_session_token_single_hash_is_not_a_separator():
    """Test that the separator is the two-character sequence."""
    assert parse_session_token("alice#tok") == (None, None)


# --- try_login ---


def test_try_login(db):
    """Test that valid credentials return the user."""
    create_user(db, "alice", "password123")

    user = try_login(db, "alice", "password123")

    assert user.username == "alice"


def test_try_login_wrong_password(db):
    """Test that a wrong password is unauthorized."""
    create_user(db, "alice", "password123")

    with pytest.raises(UnauthorizedError) as exc_info:
        try_login(db, "alice", "wrong-password")

    assert exc_info.value.username == "alice"
    assert exc_info.value.code == "UNAUTHORIZED"


def test_try_login_unknown_user(db):
    """Test that an unknown user is unauthorized."""
    with pytest.raises(UnauthorizedError):
        try_login(db, "nobody", "password123")


def test_create_session_token_round_trips(db):
    """Test that the issued cookie value parses back to the username and a valid JWT."""
    user = create_user(db, "alice", "password123")

    username, token = parse_session_token(create_session_token(user))

    settings = get_settings()
    payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    assert username == "alice"
    assert payload["sub"] == str(user.id)
    assert payload["username"] == "alice"


# --- HTTP ---


def test_register(client, db):
    """Test registering a new user."""
    response = client.post(
        "/api/v1/auth/register", json={"username": "alice", "password": "password123"}
    )

    assert response.status_code == 201
    assert response.json()["username"] == "alice"
    assert db.query(User).count() == 1


def test_register_duplicate(client):
    """Test that a taken username is refused."""
    payload = {"username": "alice", "password": "password123"}
    client.post("/api/v1/auth/register", json=payload)

    response = client.post("/api/v1/auth/register", json=payload)

    assert response.status_code == 400


def test_login_sets_session_cookie(client, db):
    """Test that logging in sets the session cookie to <username>##<token>."""
    create_user(db, "alice", "password123")

    response = client.post(
        "/api/v1/auth/login", json={"username": "alice", "password": "password123"}
    )

    assert response.status_code == 200
    data = response.json()
    assert data["username"] == "alice"
    assert data["session_token"].startswith("alice##")
    assert response.cookies.get(COOKIE) == data["session_token"]


def test_login_with_query_parameters(client, db):
    """Test the query-string login form."""
    create_user(db, "alice", "password123")

    response = client.get(
        "/api/v1/auth/login", params={"username": "alice", "password": "password123"}
    )

    assert response.status_code == 200
    assert response.json()["username"] == "alice"


def test_login_wrong_password(client, db):
    """Test that bad credentials return 401 and no cookie."""
    create_user(db, "alice", "password123")

    response = client.post("/api/v1/auth/login", json={"username": "alice", "password": "nope"})

    assert response.status_code == 401
    assert COOKIE not in response.cookies


def test_session_reflects_cookie(client):
    """Test that the request context carries the identity parsed from the cookie."""
    client.cookies.set(COOKIE, "alice##tok123")

    response = client.get("/api/v1/auth/session")

    assert response.json() == {"username": "alice", "session_token": "tok123"}


def test_session_without_cookie(client):
    """Test that a missing cookie yields no identity."""
    response = client.get("/api/v1/auth/session")

    assert response.json() == {"username": None, "session_token": None}
