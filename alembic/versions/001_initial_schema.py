"""Initial schema: reference data, authors and recipes

Revision ID: 001_initial_schema
Revises: 
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "001_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

JSON_DOCUMENT = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")


def upgrade() -> None:
    op.create_table(
        "ingredient",
        sa.Column("id", sa.String, primary_key=True),
        sa.Column("name", sa.String, nullable=False),
    )

    op.create_table(
        "unit",
        sa.Column("id", sa.String, primary_key=True),
        sa.Column("name", sa.String, nullable=False),
        sa.Column("abbreviation", sa.String, nullable=True),
        sa.Column("dimension_id", sa.String, nullable=True),
        sa.Column("measurement_system_id", sa.String, nullable=True),
    )

    # Allowed units per ingredient
    op.create_table(
        "ingredient_unit",
        sa.Column("ingredient_id", sa.String, nullable=False),
        sa.Column("unit_id", sa.String, nullable=False),
        sa.ForeignKeyConstraint(["ingredient_id"], ["ingredient.id"], name="FK_ingredient_unit_ingredient_id"),
        sa.ForeignKeyConstraint(["unit_id"], ["unit.id"], name="FK_ingredient_unit_unit_id"),
        sa.PrimaryKeyConstraint("ingredient_id", "unit_id"),
    )

    op.create_table(
        "preparation",
        sa.Column("id", sa.String, primary_key=True),
        sa.Column("name", sa.String, nullable=False),
    )

    op.create_table(
        "author",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String, nullable=False),
        sa.Column("image", sa.String, nullable=False),
        sa.Column("url", sa.String, nullable=False),
    )

    op.create_table(
        "recipe",
        sa.Column("id", sa.String, primary_key=True),
        sa.Column("name", sa.String, nullable=False),
        sa.Column("description", sa.String, nullable=False),
        sa.Column("prep_time", sa.String, nullable=True),
        sa.Column("cook_time", sa.String, nullable=True),
        sa.Column("total_time", sa.String, nullable=False),
        sa.Column("author_id", sa.Integer, sa.ForeignKey("author.id", name="FK_recipe_author_id"), nullable=False),
        sa.Column("serves", sa.Integer, nullable=False),
        sa.Column("e_tag", sa.String, nullable=False),
        sa.Column("organisation_id", sa.String, nullable=False),
        sa.Column("locale", sa.String, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("modified_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("published_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("created_by_id", sa.String, nullable=False),
        sa.Column("steps", JSON_DOCUMENT, nullable=False),
        sa.Column("ingredients", JSON_DOCUMENT, nullable=False),
        sa.Column("is_custom", sa.Boolean, nullable=False),
    )

    # Keep modified_at current on every update
    bind = op.get_bind()
    if bind.dialect.name == "sqlite":
        op.execute("""
            CREATE TRIGGER recipe_modified_at
            AFTER UPDATE ON recipe
            FOR EACH ROW
            BEGIN
                UPDATE recipe
                SET modified_at = CURRENT_TIMESTAMP
                WHERE id = NEW.id;
            END;
        """)
    elif bind.dialect.name == "postgresql":
        op.execute("""
            CREATE OR REPLACE FUNCTION recipe_set_modified_at() RETURNS trigger AS $$
            BEGIN
                NEW.modified_at = now();
                RETURN NEW;
            END;
            $$ LANGUAGE plpgsql;
        """)
        op.execute("""
            CREATE TRIGGER recipe_modified_at
            BEFORE UPDATE ON recipe
            FOR EACH ROW
            EXECUTE FUNCTION recipe_set_modified_at();
        """)


def downgrade() -> None:
    bind = op.get_bind()
    if bind.dialect.name == "postgresql":
        op.execute("DROP TRIGGER IF EXISTS recipe_modified_at ON recipe")
        op.execute("DROP FUNCTION IF EXISTS recipe_set_modified_at()")
    else:
        op.execute("DROP TRIGGER IF EXISTS recipe_modified_at")

    op.drop_table("recipe")
    op.drop_table("author")
    op.drop_table("preparation")
    op.drop_table("ingredient_unit")
    op.drop_table("unit")
    op.drop_table("ingredient")
