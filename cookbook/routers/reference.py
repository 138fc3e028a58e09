"""Reference data router: ingredients, their allowed units, preparations."""

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ..db import get_db
from ..errors import IngredientNotFoundError
from ..schemas import IngredientAllowedUnit, IngredientRef, ReferencePreparation
from ..services import reference

router = APIRouter()


@router.get("/ingredients", response_model=list[IngredientRef])
def list_ingredients(
    db: Session = Depends(get_db),
    offset: int = Query(0, ge=0),
    limit: int = Query(1000, ge=1, le=10000),
):
    return reference.list_ingredients(db, offset=offset, limit=limit)


@router.get("/ingredients/{ingredient_id}/units", response_model=list[IngredientAllowedUnit])
def list_ingredient_allowed(ingredient_id: str, db: Session = Depends(get_db)):
    """Units the ingredient may be measured in."""
    try:
        return reference.list_ingredient_allowed(db, ingredient_id)
    except IngredientNotFoundError:
        raise HTTPException(status_code=404, detail="Ingredient not found")


@router.get("/preparations", response_model=list[ReferencePreparation])
def list_preparations(
    db: Session = Depends(get_db),
    offset: int = Query(0, ge=0),
    limit: int = Query(1000, ge=1, le=10000),
):
    return reference.list_preparations(db, offset=offset, limit=limit)
