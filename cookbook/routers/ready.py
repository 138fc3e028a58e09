import logging

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..db import get_db

router = APIRouter()
logger = logging.getLogger("cookbook.ready")


@router.get("/ready")
def ready(db: Session = Depends(get_db)):
    database_ok = False
    try:
        db.execute(text("SELECT 1"))
        database_ok = True
    except SQLAlchemyError as e:
        logger.warning(f"Database not ready: {e}")
    return {"ok": True, "database_ok": database_ok}
