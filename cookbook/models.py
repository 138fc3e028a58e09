"""SQLAlchemy ORM models for Cookbook.

Tables:
- ingredient: Reference ingredients keyed by natural id
- unit: Reference measurement units
- ingredient_unit: Allowed units per ingredient (composite primary key)
- preparation: Reference preparations ("diced", "minced")
- author: Recipe authors, surrogate integer id
- recipe: Imported and custom recipes with JSON step/ingredient documents
- image: Recipe images keyed by recipe id
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import (
    String,
    DateTime,
    Integer,
    Boolean,
    ForeignKey,
    Index,
    LargeBinary,
    DDL,
    event,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.types import JSON

from .db import Base


# JSONB on PostgreSQL, plain JSON text elsewhere
JSONDocument = JSON().with_variant(JSONB(), "postgresql")


class Ingredient(Base):
    __tablename__ = "ingredient"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    name: Mapped[str] = mapped_column(String, nullable=False)

    units: Mapped[list["Unit"]] = relationship(
        "Unit", secondary="ingredient_unit", order_by="Unit.id", viewonly=True
    )


class Unit(Base):
    __tablename__ = "unit"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    abbreviation: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    dimension_id: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    measurement_system_id: Mapped[Optional[str]] = mapped_column(String, nullable=True)


class IngredientUnit(Base):
    """An allowed measurement unit for an ingredient."""
    __tablename__ = "ingredient_unit"

    ingredient_id: Mapped[str] = mapped_column(
        String,
        ForeignKey("ingredient.id", name="FK_ingredient_unit_ingredient_id"),
        primary_key=True,
    )
    unit_id: Mapped[str] = mapped_column(
        String,
        ForeignKey("unit.id", name="FK_ingredient_unit_unit_id"),
        primary_key=True,
    )


class Preparation(Base):
    __tablename__ = "preparation"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    name: Mapped[str] = mapped_column(String, nullable=False)


class Author(Base):
    __tablename__ = "author"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    image: Mapped[str] = mapped_column(String, nullable=False)
    url: Mapped[str] = mapped_column(String, nullable=False)

    recipes: Mapped[list["Recipe"]] = relationship("Recipe", back_populates="author")


class Recipe(Base):
    """A recipe.

    Durations are stored as ISO-8601 text (see services.durations).
    `steps` and `ingredients` are opaque JSON documents validated by
    schemas.RecipeStep / schemas.RecipeIngredient at the edges.
    `modified_at` is maintained by the recipe_modified_at trigger.
    """
    __tablename__ = "recipe"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    exposed_id: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str] = mapped_column(String, nullable=False)
    prep_time: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    cook_time: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    total_time: Mapped[str] = mapped_column(String, nullable=False)
    author_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("author.id", name="FK_recipe_author_id"), nullable=False
    )
    serves: Mapped[int] = mapped_column(Integer, nullable=False)
    e_tag: Mapped[str] = mapped_column(String, nullable=False)
    organisation_id: Mapped[str] = mapped_column(String, nullable=False)
    locale: Mapped[str] = mapped_column(String, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    modified_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    published_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    created_by_id: Mapped[str] = mapped_column(String, nullable=False)
    steps: Mapped[list] = mapped_column(JSONDocument, nullable=False)
    ingredients: Mapped[list] = mapped_column(JSONDocument, nullable=False)
    is_custom: Mapped[bool] = mapped_column(Boolean, nullable=False)

    author: Mapped["Author"] = relationship("Author", back_populates="recipes")

    __table_args__ = (
        Index("idx-recipe-exposed-id", "exposed_id"),
    )


class Image(Base):
    __tablename__ = "image"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    data: Mapped[bytes] = mapped_column(LargeBinary, nullable=False)


# --- modified_at trigger ---
# Mirrors alembic/versions/001_initial_schema.py so create_all() and the
# migrated schema behave the same.

SQLITE_MODIFIED_AT_TRIGGER = """
CREATE TRIGGER recipe_modified_at
AFTER UPDATE ON recipe
FOR EACH ROW
BEGIN
    UPDATE recipe
    SET modified_at = CURRENT_TIMESTAMP
    WHERE id = NEW.id;
END;
"""

POSTGRES_MODIFIED_AT_FUNCTION = """
CREATE OR REPLACE FUNCTION recipe_set_modified_at() RETURNS trigger AS $$
BEGIN
    NEW.modified_at = now();
    RETURN NEW;
END;
$$ LANGUAGE plpgsql;
"""

POSTGRES_MODIFIED_AT_TRIGGER = """
CREATE TRIGGER recipe_modified_at
BEFORE UPDATE ON recipe
FOR EACH ROW
EXECUTE FUNCTION recipe_set_modified_at();
"""

event.listen(
    Recipe.__table__,
    "after_create",
    DDL(SQLITE_MODIFIED_AT_TRIGGER).execute_if(dialect="sqlite"),
)
event.listen(
    Recipe.__table__,
    "after_create",
    DDL(POSTGRES_MODIFIED_AT_FUNCTION).execute_if(dialect="postgresql"),
)
event.listen(
    Recipe.__table__,
    "after_create",
    DDL(POSTGRES_MODIFIED_AT_TRIGGER).execute_if(dialect="postgresql"),
)
