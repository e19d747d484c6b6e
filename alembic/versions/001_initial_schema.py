"""Initial schema — recipes and meal plans

Revision ID: 001
Revises:
Create Date: 2025-01-01 00:00:00.000000
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID, JSONB

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # --- recipes ---
    op.create_table(
        "recipes",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("url", sa.String, nullable=False),
        sa.Column("url_hash", sa.String, unique=True, nullable=False),
        sa.Column("platform", sa.String, nullable=False),
        sa.Column("title", sa.String),
        sa.Column("thumbnail_url", sa.String),
        sa.Column("servings", sa.Integer, server_default="4"),
        sa.Column("ingredients", JSONB, nullable=False, server_default="[]"),
        sa.Column("steps", JSONB, nullable=False, server_default="[]"),
        sa.Column("nutrition", JSONB),
        sa.Column("raw_transcript", sa.Text),
        sa.Column("cook_time_minutes", sa.Integer),
        sa.Column("difficulty", sa.String),
        sa.Column("is_vegetarian", sa.Boolean, server_default="false"),
        sa.Column("is_vegan", sa.Boolean, server_default="false"),
        sa.Column("is_gluten_free", sa.Boolean, server_default="false"),
        sa.Column("category", sa.String, server_default="Main Course"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("idx_recipes_platform", "recipes", ["platform"])
    op.create_index("idx_recipes_cook_time", "recipes", ["cook_time_minutes"])

    # --- meal_plans ---
    op.create_table(
        "meal_plans",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String, nullable=False),
        sa.Column("description", sa.Text),
        sa.Column("duration", sa.Integer, nullable=False),
        sa.Column("days", JSONB, nullable=False, server_default="[]"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )


def downgrade() -> None:
    op.drop_table("meal_plans")
    op.drop_index("idx_recipes_cook_time", table_name="recipes")
    op.drop_index("idx_recipes_platform", table_name="recipes")
    op.drop_table("recipes")
