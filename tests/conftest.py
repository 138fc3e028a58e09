import copy
import json

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from cookbook.main import app
from cookbook.db import Base, enable_sqlite_foreign_keys, get_db
from cookbook import models  # noqa: F401  (registers tables and the trigger)
from cookbook.schemas import IngestIngredient, IngestUnit, RecipeDocument, ReferencePreparation

# --- Test Database Setup ---

SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,  # one shared connection, so every session sees the same in-memory db
)
enable_sqlite_foreign_keys(engine)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(autouse=True)
def setup_database():
    """Create tables before each test, drop after."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client():
    """Test client with DB override."""
    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def db_session():
    """Direct database session for setup."""
    session = TestingSessionLocal()
    yield session
    session.close()


# --- Sample data ---

GRAM = {"id": "g", "name": "gram", "abbreviation": "g"}

RECIPE_PAYLOAD = {
    "id": "r1",
    "exposed_id": "bread-r1",
    "name": "Bread",
    "description": "A simple loaf",
    "prep_time": "PT10M",
    "cook_time": "PT30M",
    "total_time": "PT40M",
    "author": {"name": "Chef A", "image": "https://img.example/a.png", "url": "https://chef-a.example"},
    "serves": 4,
    "etag": "e1",
    "organization_id": "org-1",
    "locale": "en-GB",
    "created_at": "2024-01-01T10:00:00Z",
    "modified_at": "2024-01-02T10:00:00Z",
    "published_at": "2024-01-03T10:00:00Z",
    "created_by_id": "user-1",
    "steps": [
        {
            "text": "Mix the flour",
            "ingredients": [
                {"ingredient_idx": 0, "quantity": {"amount": 500, "reference_unit": GRAM, "text": "500 g"}}
            ],
            "capability": {
                "phase": {"id": "ph1", "name": "Mixing", "can_follow_phases": []},
                "reference_capability": {"id": "cap1", "name": "Mixer"},
                "settings": [
                    {
                        "reference_setting": {"id": "cckg:TimeSetting", "name": "Time"},
                        "value": {"type": "numeric", "text": "5 min", "value": 300},
                    },
                    {
                        "reference_setting": {"id": "kitchenos:Kenwood:KeepWarmSetting", "name": "Keep warm"},
                        "value": {"type": "boolean", "text": "on", "value": True},
                    },
                ],
            },
        }
    ],
    "ingredients": [
        {
            "quantity": {"amount": 500, "reference_unit": GRAM, "text": "500 g"},
            "reference_ingredient": {"id": "flour", "name": "Flour"},
            "reference_preparations": None,
        }
    ],
}

INGREDIENTS_PAYLOAD = [
    {"id": "flour", "name": "Flour", "allowed_units": [{"id": "g", "name": "gram"}]},
]

PREPARATIONS_PAYLOAD = [{"id": "sifted", "name": "Sifted"}]

UNITS_PAYLOAD = [
    {
        "id": "g",
        "name": "gram",
        "abbreviation": "g",
        "dimension": "mass",
        "measurement_system": {"id": "metric", "name": "Metric"},
    }
]


@pytest.fixture
def recipe_payload():
    """Factory for recipe JSON with overrides, e.g. recipe_payload(id="r2")."""
    def make(**overrides):
        data = copy.deepcopy(RECIPE_PAYLOAD)
        data.update(overrides)
        return data
    return make


@pytest.fixture
def make_recipe(recipe_payload):
    def make(**overrides):
        return RecipeDocument.model_validate(recipe_payload(**overrides))
    return make


@pytest.fixture
def reference_data():
    """(ingredients, preparations, units) for the flour/gram example."""
    return (
        [IngestIngredient.model_validate(i) for i in INGREDIENTS_PAYLOAD],
        [ReferencePreparation.model_validate(p) for p in PREPARATIONS_PAYLOAD],
        [IngestUnit.model_validate(u) for u in UNITS_PAYLOAD],
    )


@pytest.fixture
def payload_files(tmp_path, recipe_payload):
    """The four ingest inputs written as JSON files; returns name -> path."""
    files = {}
    for name, payload in (
        ("ingredients", INGREDIENTS_PAYLOAD),
        ("preparations", PREPARATIONS_PAYLOAD),
        ("units", UNITS_PAYLOAD),
        ("recipes", [recipe_payload()]),
    ):
        files[name] = tmp_path / f"{name}.json"
        files[name].write_text(json.dumps(payload))
    return files
