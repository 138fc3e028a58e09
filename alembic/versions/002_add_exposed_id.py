"""Add recipe.exposed_id, the public-facing alias of a recipe id

Revision ID: 002_add_exposed_id
Revises: 001_initial_schema
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "002_add_exposed_id"
down_revision: Union[str, None] = "001_initial_schema"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.add_column("recipe", sa.Column("exposed_id", sa.String, nullable=True))
    op.create_index("idx-recipe-exposed-id", "recipe", ["exposed_id"])


def downgrade() -> None:
    op.drop_index("idx-recipe-exposed-id", table_name="recipe")
    with op.batch_alter_table("recipe") as batch_op:
        batch_op.drop_column("exposed_id")
