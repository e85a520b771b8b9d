"""Create users and food_items tables

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000+00:00

What:  Initial schema: accounts and their pantry items.
How:   Portable column types only, so the same revision runs on
       PostgreSQL and SQLite.

Rollback: downgrade() drops both tables (all data lost).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column(
            "email",
            sa.String(255),
            nullable=False,
            comment="Login identifier, stored lower-cased",
        ),
        sa.Column(
            "password",
            sa.String(255),
            nullable=False,
            comment="bcrypt password hash",
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id", name="pk_users"),
        sa.UniqueConstraint("email", name="uq_users_email"),
    )

    op.create_table(
        "food_items",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("expiry_date", sa.Date(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id", name="pk_food_items"),
        sa.ForeignKeyConstraint(
            ["user_id"],
            ["users.id"],
            name="fk_food_items_user_id_users",
            ondelete="CASCADE",
        ),
        sa.CheckConstraint("quantity >= 0", name="ck_food_items_quantity_non_negative"),
    )

    op.create_index("ix_food_items_user_id", "food_items", ["user_id"])
    # Serves the "soonest expiry first" pantry listing.
    op.create_index(
        "idx_food_items_user_expiry",
        "food_items",
        ["user_id", "expiry_date"],
    )


def downgrade() -> None:
    op.drop_index("idx_food_items_user_expiry", table_name="food_items")
    op.drop_index("ix_food_items_user_id", table_name="food_items")
    op.drop_table("food_items")
    op.drop_table("users")
