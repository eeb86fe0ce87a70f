"""Pydantic schemas for API requests and responses."""

from src.schemas.auth import Credentials, LoginResponse, SessionResponse, UserRegister, UserResponse
from src.schemas.recipe import IngredientEntry, RecipeCreate, RecipeResponse

__all__ = [
    "UserRegister",
    "Credentials",
    "LoginResponse",
    "SessionResponse",
    "UserResponse",
    "IngredientEntry",
    "RecipeCreate",
    "RecipeResponse",
]
