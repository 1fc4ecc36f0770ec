"""create friend graph tables

Revision ID: 392349af8917
Revises: 3854834d3c61
Create Date: 2026-01-17 16:46:54.687375

"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy import func

# revision identifiers, used by Alembic.
revision: str = '392349af8917'
down_revision: Union[str, Sequence[str], None] = '3854834d3c61'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

# table name -> name of the column holding the other user
COLLECTIONS = {
    "friends": ("friend_id", "chk_no_self_friend"),
    "incoming_requests": ("sender_id", "chk_no_self_incoming"),
    "outgoing_requests": ("recipient_id", "chk_no_self_outgoing"),
}


def upgrade() -> None:
    for table, (other_column, check_name) in COLLECTIONS.items():
        op.create_table(
            table,
            sa.Column("user_id", sa.String(128), sa.ForeignKey("users.id", ondelete="CASCADE"),
                      primary_key=True),
            sa.Column(other_column, sa.String(128), sa.ForeignKey("users.id", ondelete="CASCADE"),
                      primary_key=True),
            sa.Column("created_at", sa.DateTime(timezone=True), server_default=func.now()),
            sa.CheckConstraint(f"user_id != {other_column}", name=check_name),
        )

    op.create_table(
        "friend_pairs",
        sa.Column("user_low", sa.String(128), sa.ForeignKey("users.id", ondelete="CASCADE"),
                  primary_key=True),
        sa.Column("user_high", sa.String(128), sa.ForeignKey("users.id", ondelete="CASCADE"),
                  primary_key=True),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=func.now()),
        sa.CheckConstraint("user_low < user_high", name="chk_pair_ordered"),
    )


def downgrade() -> None:
    op.drop_table("friend_pairs")
    for table in reversed(list(COLLECTIONS)):
        op.drop_table(table)
