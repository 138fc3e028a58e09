"""Bulk ingestion of reference data and recipes.

Stages run strictly in order, each one committing before the next starts:

    ingredients -> preparations -> units -> ingredient allowed units -> recipes

Reference rows (ingredient, unit, preparation, ingredient_unit) and recipes
use conflict-ignore inserts, so re-running an import never overwrites
existing rows. Every insert call is its own transaction: a failure in a
later batch leaves earlier batches committed, which is safe to resume.
"""

import logging
from datetime import datetime, timezone
from itertools import islice
from pathlib import Path
from typing import Iterable, Iterator, Sequence, Union

from sqlalchemy import insert, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..db import dialect_insert
from ..errors import (
    AuthorNotFoundError,
    CookbookError,
    IngestError,
    UnpublishedRecipeError,
)
from ..models import Author, Ingredient, IngredientUnit, Preparation, Recipe, Unit
from ..schemas import (
    IngestIngredient,
    IngestSummary,
    IngestUnit,
    IngredientsDocument,
    RecipeDocument,
    ReferencePreparation,
    StepsDocument,
)
from .durations import format_duration
from .loader import load

logger = logging.getLogger("cookbook.ingest")

# Bounds the size of a single INSERT; boundaries carry no meaning
BATCH_SIZE = 1000


def _chunks(rows: Iterable[dict], size: int = BATCH_SIZE) -> Iterator[list[dict]]:
    it = iter(rows)
    while True:
        chunk = list(islice(it, size))
        if not chunk:
            return
        yield chunk


def _insert_ignore(db: Session, model):
    """INSERT ... ON CONFLICT DO NOTHING."""
    return dialect_insert(db, model.__table__).on_conflict_do_nothing()


def _execute(db: Session, stmt, rows: list[dict]) -> None:
    if not rows:
        return
    try:
        db.execute(stmt, rows)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise


def _utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# --- Reference data ---

def insert_ingredients(db: Session, ingredients: Sequence[IngestIngredient]) -> int:
    rows = [{"id": i.id, "name": i.name} for i in ingredients]
    _execute(db, _insert_ignore(db, Ingredient), rows)
    return len(rows)


def insert_preparations(db: Session, preparations: Sequence[ReferencePreparation]) -> int:
    rows = [{"id": p.id, "name": p.name} for p in preparations]
    _execute(db, _insert_ignore(db, Preparation), rows)
    return len(rows)


def insert_units(db: Session, units: Sequence[IngestUnit]) -> int:
    rows = [
        {
            "id": u.id,
            "name": u.name,
            "abbreviation": u.abbreviation,
            "dimension_id": u.dimension,
            "measurement_system_id": u.measurement_system.id if u.measurement_system else None,
        }
        for u in units
    ]
    _execute(db, _insert_ignore(db, Unit), rows)
    return len(rows)


def insert_ingredient_units(db: Session, ingredients: Sequence[IngestIngredient]) -> int:
    """Insert (ingredient, allowed unit) pairs in batches of BATCH_SIZE."""
    pairs = (
        {"ingredient_id": i.id, "unit_id": u.id}
        for i in ingredients
        for u in i.allowed_units
    )
    stmt = _insert_ignore(db, IngredientUnit)
    total = 0
    for chunk in _chunks(pairs):
        _execute(db, stmt, chunk)
        total += len(chunk)
        logger.debug(f"Inserted {total} ingredient unit pair(s)")
    return total


# --- Authors and recipes ---

def distinct_authors(recipes: Sequence[RecipeDocument]) -> list:
    """Authors referenced by the batch, first occurrence per name."""
    seen = {}
    for r in recipes:
        seen.setdefault(r.author.name, r.author)
    return list(seen.values())


def author_id_map(db: Session) -> dict[str, int]:
    """name -> id for every stored author. The lowest id wins on duplicates."""
    rows = db.execute(select(Author.id, Author.name).order_by(Author.id.desc())).all()
    return {name: author_id for author_id, name in rows}


def insert_authors(db: Session, recipes: Sequence[RecipeDocument]) -> dict[str, int]:
    """Store the batch's authors and return the refreshed name -> id map.

    Names already present in the store are reused rather than inserted
    again, so repeated imports do not grow duplicate author rows.
    """
    existing = set(db.scalars(select(Author.name)).all())
    new_rows = [
        {"name": a.name, "image": a.image, "url": a.url}
        for a in distinct_authors(recipes)
        if a.name not in existing
    ]
    _execute(db, insert(Author.__table__), new_rows)
    logger.info(f"Inserted {len(new_rows)} new author(s)")
    return author_id_map(db)


def recipe_row(recipe: RecipeDocument, author_id: int, is_custom: bool) -> dict:
    """Column values for a recipe row."""
    return {
        "id": recipe.id,
        "exposed_id": recipe.exposed_id,
        "name": recipe.name,
        "description": recipe.description,
        "prep_time": format_duration(recipe.prep_time) if recipe.prep_time is not None else None,
        "cook_time": format_duration(recipe.cook_time) if recipe.cook_time is not None else None,
        "total_time": format_duration(recipe.total_time),
        "author_id": author_id,
        "serves": recipe.serves,
        "e_tag": recipe.etag,
        "organisation_id": recipe.organization_id,
        "locale": recipe.locale,
        "created_at": _utc(recipe.created_at),
        "modified_at": _utc(recipe.modified_at),
        "published_at": _utc(recipe.published_at) if recipe.published_at else None,
        "created_by_id": recipe.created_by_id,
        "steps": StepsDocument.dump_python(recipe.steps, mode="json"),
        "ingredients": IngredientsDocument.dump_python(recipe.ingredients, mode="json"),
        "is_custom": is_custom,
    }


def build_recipe_rows(
    recipes: Sequence[RecipeDocument], author_ids: dict[str, int]
) -> list[dict]:
    """Convert imported recipes to rows, enforcing the import invariants.

    Raises AuthorNotFoundError if an author is missing from `author_ids` and
    UnpublishedRecipeError if a recipe has no published_at.
    """
    rows = []
    for r in recipes:
        author_id = author_ids.get(r.author.name)
        if author_id is None:
            raise AuthorNotFoundError(r.id, r.author.name)
        if r.published_at is None:
            raise UnpublishedRecipeError(r.id)
        rows.append(recipe_row(r, author_id, is_custom=False))
    return rows


def insert_recipes(db: Session, recipes: Sequence[RecipeDocument]) -> tuple[int, int]:
    """Import recipes. Returns (distinct authors, recipes) processed."""
    authors = insert_authors(db, recipes)
    rows = build_recipe_rows(recipes, authors)

    stmt = _insert_ignore(db, Recipe)
    for chunk in _chunks(rows):
        _execute(db, stmt, chunk)
    return len(distinct_authors(recipes)), len(rows)


# --- Pipeline ---

def _run_stage(stage: str, fn, *args):
    logger.info(stage)
    try:
        return fn(*args)
    except (SQLAlchemyError, CookbookError, ValueError) as e:
        logger.error(f"{stage} failed: {e}")
        raise IngestError(stage, e) from e


def run_ingest(
    db: Session,
    ingredients: Sequence[IngestIngredient],
    preparations: Sequence[ReferencePreparation],
    units: Sequence[IngestUnit],
    recipes: Sequence[RecipeDocument],
) -> IngestSummary:
    """Run every stage in order. The first failure raises IngestError."""
    summary = IngestSummary()
    summary.ingredients = _run_stage("Ingesting ingredients", insert_ingredients, db, ingredients)
    summary.preparations = _run_stage("Ingesting preparations", insert_preparations, db, preparations)
    summary.units = _run_stage("Ingesting units", insert_units, db, units)
    summary.ingredient_units = _run_stage(
        "Ingesting ingredient allowed units", insert_ingredient_units, db, ingredients
    )
    summary.authors, summary.recipes = _run_stage("Ingesting recipes", insert_recipes, db, recipes)

    logger.info(
        f"Ingest complete: {summary.ingredients} ingredients, {summary.preparations} preparations, "
        f"{summary.units} units, {summary.ingredient_units} allowed units, "
        f"{summary.authors} authors, {summary.recipes} recipes"
    )
    return summary


def ingest_files(
    db: Session,
    ingredients_path: Union[str, Path],
    preparations_path: Union[str, Path],
    units_path: Union[str, Path],
    recipes_path: Union[str, Path],
) -> IngestSummary:
    """Load the four input files, then run the pipeline.

    All files are parsed before anything is written; a LoadError leaves the
    database untouched.
    """
    ingredients = load(ingredients_path, list[IngestIngredient])
    preparations = load(preparations_path, list[ReferencePreparation])
    units = load(units_path, list[IngestUnit])
    recipes = load(recipes_path, list[RecipeDocument])
    return run_ingest(db, ingredients, preparations, units, recipes)
