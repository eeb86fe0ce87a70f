"""Pytest configuration and fixtures."""

import os

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from src.database import Base, get_db
from src.main import app
from src.schemas.recipe import IngredientEntry, RecipeCreate
from src.services.recipe_service import RecipeService

# Use test database - PostgreSQL in Docker, SQLite locally
if os.getenv("DATABASE_URL"):
    # Running in Docker - use PostgreSQL test database
    SQLALCHEMY_DATABASE_URL = os.getenv("DATABASE_URL").replace("/recipes", "/recipes_test")
else:
    # Running locally - use SQLite
    SQLALCHEMY_DATABASE_URL = "sqlite:///./test.db"

connect_args = {"check_same_thread": False} if "sqlite" in SQLALCHEMY_DATABASE_URL else {}
engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args=connect_args)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="session", autouse=True)
def setup_test_database():
    """Create test database schema once at the start of the test session."""
    if "postgresql" in SQLALCHEMY_DATABASE_URL:
        # For PostgreSQL, create the test database
        from sqlalchemy_utils import create_database, database_exists

        # Create test database if it doesn't exist
        if not database_exists(SQLALCHEMY_DATABASE_URL):
            create_database(SQLALCHEMY_DATABASE_URL)

    Base.metadata.create_all(bind=engine)
    yield
    # Don't drop database - just leave it for next run (each test cleans up after itself)


@pytest.fixture(scope="function", autouse=True)
def db():
    """Create a fresh database session for each test with cleanup."""
    session = TestingSessionLocal()

    yield session

    # Clean up all data after test
    session.rollback()
    for table in reversed(Base.metadata.sorted_tables):
        session.execute(table.delete())
    session.commit()
    session.close()


@pytest.fixture(scope="function")
def client(db):
    """Create a test client with database override."""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def service(db):
    """Recipe service bound to the test session."""
    return RecipeService(db)


def make_recipe(name: str, *ingredients: tuple[str, str]) -> RecipeCreate:
    """Build a recipe create request from (ingredient, quantity) pairs."""
    return RecipeCreate(
        name=name,
        ingredients=[
            IngredientEntry(name=ingredient, quantity=quantity)
            for ingredient, quantity in ingredients
        ],
    )


@pytest.fixture
def pancakes(service):
    """The Pancakes recipe: flour and egg."""
    return service.upsert(make_recipe("Pancakes", ("Flour", "2 cups"), ("Egg", "2")))


@pytest.fixture
def catalog(service, pancakes):
    """A small catalog of overlapping recipes."""
    service.upsert(make_recipe("Omelette", ("Egg", "3"), ("Butter", "1 tbsp")))
    service.upsert(
        make_recipe("Shortbread", ("Flour", "2 cups"), ("Butter", "1 cup"), ("Sugar", "1/2 cup"))
    )
    service.upsert(make_recipe("Toast", ("Bread", "2 slices")))
    return service


@pytest.fixture
def new_recipe():
    """Factory for recipe create requests."""
    return make_recipe
