"""Add relationship edges table

Revision ID: 1b0c2f2c7f01
Revises: 0001_baseline
Create Date: 2026-10-19 09:30:00.000000
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "1b0c2f2c7f01"
down_revision: Union[str, Sequence[str], None] = "0001_baseline"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create directed relationship edges table."""
    op.create_table(
        "relationship_edges",
        sa.Column("from_user_id", sa.Integer(), nullable=False),
        sa.Column("to_user_id", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(length=16), nullable=False),
        sa.Column(
            "since",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.ForeignKeyConstraint(["from_user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["to_user_id"], ["users.id"], ondelete="CASCADE"),
        # One edge per ordered pair; racing inserts resolve on this key.
        sa.PrimaryKeyConstraint("from_user_id", "to_user_id"),
        sa.CheckConstraint("from_user_id <> to_user_id", name="ck_rel_no_self_edge"),
        sa.CheckConstraint("status IN ('Pending', 'Accepted')", name="ck_rel_status"),
    )
    op.create_index(
        "ix_rel_to_status",
        "relationship_edges",
        ["to_user_id", "status"],
        unique=False,
    )
    op.create_index(
        "ix_rel_from_status",
        "relationship_edges",
        ["from_user_id", "status"],
        unique=False,
    )


def downgrade() -> None:
    """Drop relationship edges table."""
    op.drop_index("ix_rel_from_status", table_name="relationship_edges")
    op.drop_index("ix_rel_to_status", table_name="relationship_edges")
    op.drop_table("relationship_edges")
