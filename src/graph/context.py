"""Per-request context handed to every GraphQL resolver."""

from sqlalchemy.orm import Session
from strawberry.fastapi import BaseContext

from src.services.recipe_service import RecipeService


class RequestContext(BaseContext):
    """Database session for this request plus the identity parsed from its session cookie.

    The identity is advisory: it is taken from the cookie as-is and never
    checked against the store.
    """

    def __init__(self, db: Session, username: str | None = None, session_token: str | None = None):
        super().__init__()
        self.db = db
        self.username = username
        self.session_token = session_token

    @property
    def recipes(self) -> RecipeService:
        return RecipeService(self.db)
