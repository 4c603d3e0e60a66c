"""Create delivery_dates table."""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "0001_delivery_dates"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    """Apply initial schema."""
    op.create_table(
        "delivery_dates",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("city_name", sa.String(length=255), nullable=False),
        sa.Column("delivery_date", sa.String(length=5), nullable=False),
        sa.Column("restrictions", sa.Text(), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_delivery_dates_city_name",
        "delivery_dates",
        ["city_name"],
        unique=True,
    )


def downgrade() -> None:
    """Revert initial schema."""
    op.drop_index("ix_delivery_dates_city_name", table_name="delivery_dates")
    op.drop_table("delivery_dates")
