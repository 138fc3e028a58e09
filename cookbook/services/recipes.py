"""Recipe queries and custom recipe writes."""

import logging
from datetime import datetime, timezone
from typing import Optional

from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.orm import Session, joinedload

from ..errors import DocumentError, RecipeExistsError, RecipeNotFoundError
from ..models import Author, Recipe
from ..schemas import (
    Author as AuthorDoc,
    IngredientsDocument,
    RecipeDocument,
    RecipeItem,
    StepsDocument,
)
from .durations import parse_duration
from .ingestion import recipe_row
from .loader import describe_validation_error

logger = logging.getLogger("cookbook.recipes")


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite hands back naive timestamps; everything is stored in UTC
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _total_time(r: Recipe):
    try:
        return parse_duration(r.total_time)
    except ValueError as e:
        raise DocumentError(f"Parsing the total time of {r.id}: {e}") from e


def _optional_duration(text: Optional[str]):
    # Unreadable optional times are dropped rather than failing the listing
    if not text:
        return None
    try:
        return parse_duration(text)
    except ValueError:
        return None


def to_document(r: Recipe) -> RecipeDocument:
    """Rebuild the typed recipe from a stored row (author must be loaded)."""
    try:
        steps = StepsDocument.validate_python(r.steps)
    except ValidationError as e:
        raise DocumentError(f"Deserializing steps of {r.id}: {describe_validation_error(e)}") from e
    try:
        ingredients = IngredientsDocument.validate_python(r.ingredients)
    except ValidationError as e:
        raise DocumentError(
            f"Deserializing ingredients of {r.id}: {describe_validation_error(e)}"
        ) from e

    return RecipeDocument(
        id=r.id,
        exposed_id=r.exposed_id,
        name=r.name,
        description=r.description,
        prep_time=_optional_duration(r.prep_time),
        cook_time=_optional_duration(r.cook_time),
        total_time=_total_time(r),
        author=AuthorDoc(name=r.author.name, image=r.author.image, url=r.author.url),
        serves=r.serves,
        etag=r.e_tag,
        organization_id=r.organisation_id,
        locale=r.locale,
        created_at=_as_utc(r.created_at),
        modified_at=_as_utc(r.modified_at),
        published_at=_as_utc(r.published_at),
        created_by_id=r.created_by_id,
        steps=steps,
        ingredients=ingredients,
    )


def _recipes_query(offset: Optional[int], limit: Optional[int], all: bool):
    query = select(Recipe).options(joinedload(Recipe.author)).order_by(Recipe.id.asc())
    if not all:
        query = query.where(Recipe.is_custom.is_(True))
    if offset is not None:
        query = query.offset(offset)
    if limit is not None:
        query = query.limit(limit)
    return query


def list_recipes(
    db: Session,
    offset: Optional[int] = None,
    limit: Optional[int] = None,
    all: bool = True,
) -> list[RecipeDocument]:
    """Recipes ordered by id. `all=False` keeps only custom recipes."""
    recipes = db.scalars(_recipes_query(offset, limit, all)).all()
    return [to_document(r) for r in recipes]


def list_recipe_items(
    db: Session,
    offset: Optional[int] = None,
    limit: Optional[int] = None,
    all: bool = True,
) -> list[RecipeItem]:
    recipes = db.scalars(_recipes_query(offset, limit, all)).all()
    return [
        RecipeItem(id=r.id, name=r.name, author_name=r.author.name, total_time=_total_time(r))
        for r in recipes
    ]


def get_recipe(db: Session, recipe_id: str) -> RecipeDocument:
    recipe = db.scalars(
        select(Recipe).options(joinedload(Recipe.author)).where(Recipe.id == recipe_id)
    ).first()
    if recipe is None:
        raise RecipeNotFoundError(f"Recipe {recipe_id} not found")
    return to_document(recipe)


def _find_or_create_author(db: Session, author: AuthorDoc) -> Author:
    existing = db.scalars(
        select(Author).where(Author.name == author.name).order_by(Author.id)
    ).first()
    if existing:
        return existing

    created = Author(name=author.name, image=author.image, url=author.url)
    db.add(created)
    db.flush()
    logger.info(f"Created author {created.id} ({created.name})")
    return created


def set_recipe(db: Session, recipe: RecipeDocument, create: bool) -> RecipeDocument:
    """Create or update a user-authored recipe (is_custom = true).

    The author is looked up by name and created when missing. Updates leave
    modified_at to the database trigger.
    """
    existing = db.get(Recipe, recipe.id)
    if create and existing is not None:
        raise RecipeExistsError(f"Recipe {recipe.id} already exists")
    if not create and existing is None:
        raise RecipeNotFoundError(f"Recipe {recipe.id} not found")

    author = _find_or_create_author(db, recipe.author)
    row = recipe_row(recipe, author.id, is_custom=True)
    if row["published_at"] is None:
        row["published_at"] = datetime.now(timezone.utc)

    if create:
        db.add(Recipe(**row))
    else:
        row.pop("id")
        row.pop("modified_at")
        row.pop("created_at")
        for key, value in row.items():
            setattr(existing, key, value)

    db.commit()
    logger.info(f"{'Created' if create else 'Updated'} custom recipe {recipe.id}")
    return get_recipe(db, recipe.id)
