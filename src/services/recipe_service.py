"""Recipe service: catalog lookups and the transactional recipe upsert."""

import functools
import logging
from collections import defaultdict

from sqlalchemy import func
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from src.database import transaction
from src.models.recipe import Ingredient, Recipe, RecipeIngredient
from src.schemas.recipe import RecipeCreate, RecipeResponse
from src.services.errors import (
    IngredientNotFoundError,
    PartialResolutionError,
    RecipeNotFoundError,
    StoreError,
)

logger = logging.getLogger(__name__)

IngredientPair = tuple[RecipeIngredient, Ingredient]


def _store_errors(method):
    """Surface any SQLAlchemy failure as a StoreError."""

    @functools.wraps(method)
    def wrapper(*args, **kwargs):
        try:
            return method(*args, **kwargs)
        except SQLAlchemyError as e:
            logger.error(f"{method.__name__} failed: {e}")
            raise StoreError() from e

    return wrapper


class RecipeService:
    """Service for recipe queries and writes against one database session."""

    def __init__(self, db: Session):
        self.db = db

    # --- Queries ---

    @_store_errors
    def get_by_name(self, name: str) -> RecipeResponse:
        """Get a recipe and all of its ingredients by exact recipe name."""
        recipe = self.db.query(Recipe).filter(Recipe.name == name).first()
        if recipe is None:
            logger.debug(f"Recipe lookup missed: '{name}'")
            raise RecipeNotFoundError(name)

        pairs = (
            self.db.query(RecipeIngredient, Ingredient)
            .join(Ingredient, RecipeIngredient.ingredient_id == Ingredient.id)
            .filter(RecipeIngredient.recipe_id == recipe.id)
            .order_by(RecipeIngredient.id)
            .all()
        )
        return RecipeResponse.from_persisted(recipe, pairs)

    @_store_errors
    def get_by_ingredient_name(self, name: str) -> list[RecipeResponse]:
        """Get every recipe using the ingredient, each with its full ingredient list."""
        ingredient = self.db.query(Ingredient).filter(Ingredient.name == name).first()
        if ingredient is None:
            logger.debug(f"Ingredient lookup missed: '{name}'")
            raise IngredientNotFoundError(name)

        recipes = self._recipes_using([ingredient.id])
        return self._with_ingredients(recipes)

    @_store_errors
    def get_by_ingredient_names(self, names: list[str]) -> list[RecipeResponse]:
        """
        Get every recipe that uses all of the named ingredients.

        A recipe may have more ingredients than were asked for and still match.
        Every name must resolve to a known ingredient, otherwise the whole
        lookup fails with PartialResolutionError. An empty list matches nothing.
        """
        wanted = list(dict.fromkeys(names))
        if not wanted:
            return []

        ingredients = self.db.query(Ingredient).filter(Ingredient.name.in_(wanted)).all()
        if len(ingredients) < len(wanted):
            found = [ingredient.name for ingredient in ingredients]
            logger.warning(f"Ingredient resolution incomplete: wanted {wanted}, found {found}")
            raise PartialResolutionError(requested=wanted, found=found)

        wanted_ids = {ingredient.id for ingredient in ingredients}
        candidates = self._recipes_using(list(wanted_ids))
        pairs_by_recipe = self._pairs_by_recipe([recipe.id for recipe in candidates])

        # Keep only recipes whose ingredient set contains every wanted ingredient
        return [
            RecipeResponse.from_persisted(recipe, pairs_by_recipe[recipe.id])
            for recipe in candidates
            if wanted_ids <= {ingredient.id for _, ingredient in pairs_by_recipe[recipe.id]}
        ]

    # --- Mutations ---

    @_store_errors
    def upsert(self, recipe: RecipeCreate) -> RecipeResponse:
        """
        Insert or update a recipe with its ingredients in a single transaction.

        Recipes and ingredients are matched by name, associations by
        (recipe, ingredient); an existing association gets the new quantity.
        Nothing is written if any step fails.

        Returns:
            The recipe with the ingredients named in the request, in request order.
        """
        entries = recipe.merged_ingredients()

        with transaction(self.db):
            # Step 1: Recipe, resolved to the existing row on a name clash
            stmt = self._insert(Recipe).values(recipe.recipe_row())
            stmt = stmt.on_conflict_do_update(
                index_elements=["name"],
                set_={"name": stmt.excluded.name, "updated_at": func.now()},
            )
            self.db.execute(stmt)
            db_recipe = (
                self.db.query(Recipe).filter(Recipe.name == recipe.name).populate_existing().one()
            )

            db_ingredients: list[Ingredient] = []
            associations: list[RecipeIngredient] = []
            if entries:
                # Step 2: Ingredients, aligned with the request order
                stmt = self._insert(Ingredient).values(recipe.ingredient_rows())
                stmt = stmt.on_conflict_do_update(
                    index_elements=["name"],
                    set_={"name": stmt.excluded.name, "updated_at": func.now()},
                )
                self.db.execute(stmt)
                by_name = {
                    ingredient.name: ingredient
                    for ingredient in self.db.query(Ingredient)
                    .filter(Ingredient.name.in_([entry.name for entry in entries]))
                    .populate_existing()
                }
                db_ingredients = [by_name[entry.name] for entry in entries]

                # Step 3: Associations, quantity overwritten on conflict
                stmt = self._insert(RecipeIngredient).values(
                    [
                        {
                            "recipe_id": db_recipe.id,
                            "ingredient_id": ingredient.id,
                            "quantity": entry.quantity,
                        }
                        for ingredient, entry in zip(db_ingredients, entries, strict=True)
                    ]
                )
                stmt = stmt.on_conflict_do_update(
                    index_elements=["recipe_id", "ingredient_id"],
                    set_={"quantity": stmt.excluded.quantity, "updated_at": func.now()},
                )
                self.db.execute(stmt)
                by_ingredient_id = {
                    association.ingredient_id: association
                    for association in self.db.query(RecipeIngredient)
                    .filter(
                        RecipeIngredient.recipe_id == db_recipe.id,
                        RecipeIngredient.ingredient_id.in_([i.id for i in db_ingredients]),
                    )
                    .populate_existing()
                }
                associations = [by_ingredient_id[ingredient.id] for ingredient in db_ingredients]

            # Step 4: Assemble before commit expires the loaded rows
            result = RecipeResponse.from_persisted(
                db_recipe, zip(associations, db_ingredients, strict=True)
            )

        logger.info(f"Upserted recipe '{result.name}' with {len(result.ingredients)} ingredients")
        return result

    # --- Helpers ---

    def _insert(self, model):
        """Dialect-specific INSERT supporting ON CONFLICT for the bound database."""
        if self.db.get_bind().dialect.name == "sqlite":
            return sqlite.insert(model)
        return postgresql.insert(model)

    def _recipes_using(self, ingredient_ids: list[int]) -> list[Recipe]:
        """Distinct recipes with at least one of the given ingredients."""
        return (
            self.db.query(Recipe)
            .join(RecipeIngredient, RecipeIngredient.recipe_id == Recipe.id)
            .filter(RecipeIngredient.ingredient_id.in_(ingredient_ids))
            .distinct()
            .order_by(Recipe.id)
            .all()
        )

    def _pairs_by_recipe(self, recipe_ids: list[int]) -> dict[int, list[IngredientPair]]:
        """Fetch the association/ingredient pairs of many recipes in one join, grouped by recipe."""
        grouped: dict[int, list[IngredientPair]] = defaultdict(list)
        if not recipe_ids:
            return grouped

        rows = (
            self.db.query(RecipeIngredient, Ingredient)
            .join(Ingredient, RecipeIngredient.ingredient_id == Ingredient.id)
            .filter(RecipeIngredient.recipe_id.in_(recipe_ids))
            .order_by(RecipeIngredient.id)
            .all()
        )
        for association, ingredient in rows:
            grouped[association.recipe_id].append((association, ingredient))
        return grouped

    def _with_ingredients(self, recipes: list[Recipe]) -> list[RecipeResponse]:
        pairs_by_recipe = self._pairs_by_recipe([recipe.id for recipe in recipes])
        return [
            RecipeResponse.from_persisted(recipe, pairs_by_recipe[recipe.id]) for recipe in recipes
        ]
