"""Recipes API router.

Endpoints:
- GET /api/recipes - Full recipes (all, or custom only with all=false)
- GET /api/recipes/items - Lightweight listing for the home page
- GET /api/recipes/{id} - One recipe
- POST /api/recipes - Create a custom recipe
- PUT /api/recipes/{id} - Update a custom recipe
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ..db import get_db
from ..errors import DocumentError, RecipeExistsError, RecipeNotFoundError
from ..schemas import RecipeDocument, RecipeItem
from ..services import recipes as recipe_service

router = APIRouter()
logger = logging.getLogger("cookbook.recipes")


@router.get("/recipes", response_model=list[RecipeDocument])
def list_recipes(
    db: Session = Depends(get_db),
    offset: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    all: bool = Query(True),
):
    """List recipes ordered by id."""
    try:
        return recipe_service.list_recipes(db, offset=offset, limit=limit, all=all)
    except DocumentError as e:
        logger.error(f"Loading recipes failed: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/recipes/items", response_model=list[RecipeItem])
def list_recipe_items(
    db: Session = Depends(get_db),
    offset: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    all: bool = Query(True),
):
    try:
        return recipe_service.list_recipe_items(db, offset=offset, limit=limit, all=all)
    except DocumentError as e:
        logger.error(f"Loading recipe items failed: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/recipes/{recipe_id}", response_model=RecipeDocument)
def get_recipe(recipe_id: str, db: Session = Depends(get_db)):
    try:
        return recipe_service.get_recipe(db, recipe_id)
    except RecipeNotFoundError:
        raise HTTPException(status_code=404, detail="Recipe not found")
    except DocumentError as e:
        logger.error(f"Loading recipe {recipe_id} failed: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/recipes", response_model=RecipeDocument, status_code=201)
def create_recipe(payload: RecipeDocument, db: Session = Depends(get_db)):
    """Create a user-authored recipe."""
    try:
        return recipe_service.set_recipe(db, payload, create=True)
    except RecipeExistsError:
        raise HTTPException(status_code=409, detail=f"Recipe {payload.id} already exists")


@router.put("/recipes/{recipe_id}", response_model=RecipeDocument)
def update_recipe(recipe_id: str, payload: RecipeDocument, db: Session = Depends(get_db)):
    """Replace a recipe's content. modified_at is refreshed by the database."""
    if payload.id != recipe_id:
        raise HTTPException(status_code=400, detail="Recipe id in path and body differ")
    try:
        return recipe_service.set_recipe(db, payload, create=False)
    except RecipeNotFoundError:
        raise HTTPException(status_code=404, detail="Recipe not found")
