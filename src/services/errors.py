"""Typed failures raised by the recipe catalog services."""


class CatalogError(Exception):
    """Base class for every failure the services surface to the API boundary."""

    code = "CATALOG_ERROR"

    @property
    def fields(self) -> dict:
        """Structured payload attached to the error at the boundary."""
        return {}


class NotFoundError(CatalogError):
    """A looked-up entity does not exist."""

    code = "NOT_FOUND"
    kind = "entity"

    def __init__(self, key: str | list[str]):
        super().__init__(key)
        self.key = key

    @property
    def fields(self) -> dict:
        return {"kind": self.kind, "key": self.key}

    def __str__(self) -> str:
        return f"No {self.kind} with name {self.key}"


class RecipeNotFoundError(NotFoundError):
    kind = "recipe"


class IngredientNotFoundError(NotFoundError):
    kind = "ingredient"


class PartialResolutionError(NotFoundError):
    """Fewer ingredients were found than distinct names were requested."""

    code = "PARTIAL_RESOLUTION"
    kind = "ingredient"

    def __init__(self, requested: list[str], found: list[str]):
        # key holds the names that did not resolve
        super().__init__([name for name in requested if name not in found])
        self.requested = requested
        self.found = found

    @property
    def missing(self) -> list[str]:
        return self.key

    @property
    def fields(self) -> dict:
        return {
            **super().fields,
            "requested": self.requested,
            "found": self.found,
            "missing": self.missing,
        }

    def __str__(self) -> str:
        return f"Not all ingredients found. Wanted: {self.requested}. Found: {self.found}"


class StoreError(CatalogError):
    """The backing store failed. The original error is kept as ``__cause__``."""

    code = "STORE_ERROR"

    def __str__(self) -> str:
        cause = self.__cause__
        return f"Database error: {cause.__class__.__name__}" if cause else "Database error"


class UnauthorizedError(CatalogError):
    """Credential check failed: unknown user or wrong password."""

    code = "UNAUTHORIZED"

    def __init__(self, username: str):
        super().__init__(username)
        self.username = username

    @property
    def fields(self) -> dict:
        return {"username": self.username}

    def __str__(self) -> str:
        return "Incorrect username or password"
