"""Reference data lookups: ingredients, preparations, allowed units."""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..errors import IngredientNotFoundError
from ..models import Ingredient, Preparation
from ..schemas import IngredientAllowedUnit, IngredientRef, ReferencePreparation


def _paged(query, offset: Optional[int], limit: Optional[int]):
    if offset is not None:
        query = query.offset(offset)
    if limit is not None:
        query = query.limit(limit)
    return query


def list_ingredients(
    db: Session, offset: Optional[int] = None, limit: Optional[int] = None
) -> list[IngredientRef]:
    rows = db.scalars(_paged(select(Ingredient).order_by(Ingredient.id.asc()), offset, limit)).all()
    return [IngredientRef.model_validate(r) for r in rows]


def list_preparations(
    db: Session, offset: Optional[int] = None, limit: Optional[int] = None
) -> list[ReferencePreparation]:
    rows = db.scalars(_paged(select(Preparation).order_by(Preparation.id.asc()), offset, limit)).all()
    return [ReferencePreparation.model_validate(r) for r in rows]


def list_ingredient_allowed(db: Session, ingredient_id: str) -> list[IngredientAllowedUnit]:
    """Units an ingredient may be measured in."""
    ingredient = db.get(Ingredient, ingredient_id)
    if ingredient is None:
        raise IngredientNotFoundError(f"Couldn't find ingredient {ingredient_id}")

    return [
        IngredientAllowedUnit(
            id=u.id,
            name=u.name,
            abbreviation=u.abbreviation,
            dimension=u.dimension_id,
        )
        for u in ingredient.units
    ]
