"""Multipart upload of the four ingest files.

POST /api/ingest with form fields ingredients, preparations, units, recipes
(each a JSON file). Runs the same pipeline as `cookbook ingest-data`.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, HTTPException, Request, UploadFile
from slowapi import Limiter
from slowapi.util import get_remote_address
from sqlalchemy.orm import Session

from ..db import get_db
from ..errors import IngestError, LoadError
from ..schemas import (
    IngestIngredient,
    IngestSummary,
    IngestUnit,
    RecipeDocument,
    ReferencePreparation,
)
from ..services.ingestion import run_ingest
from ..services.loader import load_bytes
from ..settings import settings

router = APIRouter()
limiter = Limiter(key_func=get_remote_address)
logger = logging.getLogger("cookbook.ingest")


def _read(upload: UploadFile) -> bytes:
    data = upload.file.read(settings.max_upload_bytes + 1)
    if len(data) > settings.max_upload_bytes:
        raise HTTPException(status_code=413, detail=f"{upload.filename} is too large")
    return data


@router.post("/ingest", response_model=IngestSummary)
@limiter.limit(settings.ingest_rate_limit)
def upload_data(
    request: Request,
    ingredients: Optional[UploadFile] = File(None),
    preparations: Optional[UploadFile] = File(None),
    units: Optional[UploadFile] = File(None),
    recipes: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
):
    """Load all four files, then ingest them in order."""
    if not all((ingredients, preparations, units, recipes)):
        raise HTTPException(status_code=400, detail="Couldn't get form fields")

    try:
        ingredient_rows = load_bytes(_read(ingredients), list[IngestIngredient], "ingredients")
        preparation_rows = load_bytes(_read(preparations), list[ReferencePreparation], "preparations")
        unit_rows = load_bytes(_read(units), list[IngestUnit], "units")
        recipe_rows = load_bytes(_read(recipes), list[RecipeDocument], "recipes")
    except LoadError as e:
        logger.warning(f"Rejected upload: {e}")
        raise HTTPException(status_code=422, detail=str(e))

    try:
        return run_ingest(db, ingredient_rows, preparation_rows, unit_rows, recipe_rows)
    except IngestError as e:
        raise HTTPException(status_code=500, detail=str(e))
