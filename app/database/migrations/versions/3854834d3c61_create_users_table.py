"""create users table

Revision ID: 3854834d3c61
Revises:
Create Date: 2026-01-17 16:39:12.767217

"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy import func

# revision identifiers, used by Alembic.
revision: str = '3854834d3c61'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(128), primary_key=True, index=True),
        sa.Column("username", sa.String(50), nullable=True, unique=True, index=True),
        sa.Column("first_name", sa.String(100), nullable=True),
        sa.Column("last_name", sa.String(100), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=func.now()),
        sa.Column("is_active", sa.Boolean, server_default=sa.text("true")),
    )


def downgrade() -> None:
    op.drop_table("users")
