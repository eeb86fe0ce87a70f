"""GraphQL object and input types."""

import strawberry

from src.schemas.recipe import IngredientEntry, RecipeCreate, RecipeResponse


@strawberry.type
class RecipeIngredient:
    name: str
    quantity: str


@strawberry.type
class Recipe:
    name: str
    ingredients: list[RecipeIngredient]

    @classmethod
    def from_response(cls, recipe: RecipeResponse) -> "Recipe":
        return cls(
            name=recipe.name,
            ingredients=[
                RecipeIngredient(name=entry.name, quantity=entry.quantity)
                for entry in recipe.ingredients
            ],
        )


@strawberry.input
class NewIngredient:
    name: str
    quantity: str


@strawberry.input
class NewRecipe:
    name: str
    ingredients: list[NewIngredient]

    def to_create(self) -> RecipeCreate:
        return RecipeCreate(
            name=self.name,
            ingredients=[
                IngredientEntry(name=ingredient.name, quantity=ingredient.quantity)
                for ingredient in self.ingredients
            ],
        )
