"""SQLAlchemy models."""

from src.models.recipe import Ingredient, Recipe, RecipeIngredient
from src.models.user import User

__all__ = [
    "User",
    "Recipe",
    "Ingredient",
    "RecipeIngredient",
]
