import logging

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from sqlalchemy.orm import Session

from ..db import get_db
from ..errors import ImageNotFoundError
from ..services import images as image_service

logger = logging.getLogger("cookbook.images")

router = APIRouter()


@router.get("/images/{image_id}")
def get_image(image_id: str, db: Session = Depends(get_db)):
    """Image bytes by recipe id or exposed id."""
    try:
        data = image_service.get_image(db, image_id)
    except ImageNotFoundError:
        raise HTTPException(status_code=404, detail="Image not found")
    return Response(content=data, media_type="application/octet-stream")


@router.put("/images/{image_id}", status_code=204)
async def put_image(image_id: str, request: Request, db: Session = Depends(get_db)):
    data = await request.body()
    if not data:
        raise HTTPException(status_code=400, detail="Empty image body")
    image_service.set_image(db, image_id, data)
    return Response(status_code=204)
