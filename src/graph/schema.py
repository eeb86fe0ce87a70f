"""GraphQL schema: recipe queries and the recipe upsert mutation."""

import logging
from collections.abc import Callable
from typing import TypeVar

import strawberry
from graphql import GraphQLError
from pydantic import ValidationError
from strawberry.types import Info

from src.graph.context import RequestContext
from src.graph.types import NewRecipe, Recipe
from src.services.errors import CatalogError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _resolve(call: Callable[[], T]) -> T:
    """Run a service call, turning its typed failures into GraphQL errors with a code."""
    try:
        return call()
    except CatalogError as e:
        raise GraphQLError(str(e), extensions={"code": e.code, **e.fields}) from e


@strawberry.type
class Query:
    @strawberry.field(description="Recipe with the exact given name")
    def recipe_by_name(self, info: Info[RequestContext, None], name: str) -> Recipe | None:
        recipe = _resolve(lambda: info.context.recipes.get_by_name(name))
        return Recipe.from_response(recipe)

    @strawberry.field(description="Recipes that use the ingredient, with all their ingredients")
    def recipes_by_ingredient(self, info: Info[RequestContext, None], name: str) -> list[Recipe]:
        recipes = _resolve(lambda: info.context.recipes.get_by_ingredient_name(name))
        return [Recipe.from_response(recipe) for recipe in recipes]

    @strawberry.field(description="Recipes that use every one of the ingredients")
    def recipes_by_ingredients(
        self, info: Info[RequestContext, None], names: list[str]
    ) -> list[Recipe]:
        recipes = _resolve(lambda: info.context.recipes.get_by_ingredient_names(names))
        return [Recipe.from_response(recipe) for recipe in recipes]


@strawberry.type
class Mutation:
    @strawberry.mutation(description="Insert a recipe, or update it when the name exists")
    def insert_recipe(self, info: Info[RequestContext, None], recipe: NewRecipe) -> Recipe:
        try:
            new_recipe = recipe.to_create()
        except ValidationError as e:
            errors = e.errors(include_url=False, include_context=False)
            raise GraphQLError(
                "Invalid recipe input",
                extensions={"code": "BAD_USER_INPUT", "errors": errors},
            ) from e

        logger.debug(f"insertRecipe '{new_recipe.name}' by {info.context.username or 'anonymous'}")
        return Recipe.from_response(_resolve(lambda: info.context.recipes.upsert(new_recipe)))


schema = strawberry.Schema(query=Query, mutation=Mutation)
