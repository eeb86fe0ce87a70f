"""Recipe schemas and row mapping."""

from collections.abc import Iterable

from pydantic import BaseModel, Field, field_validator

from src.models.recipe import Ingredient, Recipe, RecipeIngredient


def _not_blank(value: str) -> str:
    """Reject names made only of whitespace. The value is stored exactly as given."""
    if not value.strip():
        raise ValueError("must not be blank")
    return value


# --- Recipe Ingredient ---


class IngredientEntry(BaseModel):
    """An ingredient as it appears on a recipe: its name and the quantity used."""

    name: str = Field(..., min_length=1, max_length=255)
    quantity: str = Field(..., max_length=100)

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        return _not_blank(value)


# --- Recipe ---


class RecipeCreate(BaseModel):
    """Create or update a recipe together with its ingredients."""

    name: str = Field(..., min_length=1, max_length=255)
    ingredients: list[IngredientEntry] = []

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        return _not_blank(value)

    def recipe_row(self) -> dict:
        """Insert shape for the ``recipes`` table."""
        return {"name": self.name}

    def merged_ingredients(self) -> list[IngredientEntry]:
        """Ingredients with repeated names collapsed.

        A name keeps the position of its first occurrence and the quantity of
        its last one.
        """
        merged: dict[str, IngredientEntry] = {}
        for entry in self.ingredients:
            merged[entry.name] = (
                merged[entry.name].model_copy(update={"quantity": entry.quantity})
                if entry.name in merged
                else entry
            )
        return list(merged.values())

    def ingredient_rows(self) -> list[dict]:
        """Insert shapes for the ``ingredients`` table, one per distinct name."""
        return [{"name": entry.name} for entry in self.merged_ingredients()]


class RecipeResponse(BaseModel):
    """Recipe with the full list of its ingredients."""

    name: str
    ingredients: list[IngredientEntry]

    @classmethod
    def from_persisted(
        cls,
        recipe: Recipe,
        pairs: Iterable[tuple[RecipeIngredient, Ingredient]],
    ) -> "RecipeResponse":
        """Build the API shape from a recipe row and its joined association rows.

        Ingredients keep the order in which ``pairs`` are given.
        """
        return cls(
            name=recipe.name,
            ingredients=[
                IngredientEntry(name=ingredient.name, quantity=association.quantity)
                for association, ingredient in pairs
            ],
        )
