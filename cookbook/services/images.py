"""Recipe image storage.

Images are keyed by recipe id; reads also accept the recipe's exposed id.
"""

import logging

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from ..db import dialect_insert
from ..errors import ImageNotFoundError
from ..models import Image, Recipe

logger = logging.getLogger("cookbook.images")


def get_image(db: Session, image_id: str) -> bytes:
    recipe_id = db.scalars(
        select(Recipe.id).where(or_(Recipe.id == image_id, Recipe.exposed_id == image_id))
    ).first()
    if recipe_id is None:
        raise ImageNotFoundError(f"Image {image_id} not found")

    image = db.get(Image, recipe_id)
    if image is None:
        raise ImageNotFoundError(f"Image {image_id} not found")
    return image.data


def set_image(db: Session, image_id: str, data: bytes) -> None:
    """Insert or replace the image stored under `image_id`."""
    stmt = dialect_insert(db, Image.__table__).values(id=image_id, data=data)
    stmt = stmt.on_conflict_do_update(index_elements=["id"], set_={"data": stmt.excluded.data})
    db.execute(stmt)
    db.commit()
    logger.info(f"Stored {len(data)} bytes for image {image_id}")
