"""Directed relationship edge models."""

import enum
from datetime import datetime, timezone

from sqlalchemy import String, ForeignKey, DateTime, Index, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class EdgeStatus(str, enum.Enum):
    PENDING = "Pending"
    ACCEPTED = "Accepted"


class RelationshipEdge(Base):
    """
    One row per ordered (from, to) pair. The reverse pair is a separate row,
    so A following B says nothing about B following A.
    """

    __tablename__ = "relationship_edges"

    from_user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), primary_key=True
    )
    to_user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), primary_key=True
    )

    status: Mapped[str] = mapped_column(String(16), nullable=False)

    since: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )

    __table_args__ = (
        CheckConstraint("from_user_id <> to_user_id", name="ck_rel_no_self_edge"),
        CheckConstraint("status IN ('Pending', 'Accepted')", name="ck_rel_status"),
        Index("ix_rel_to_status", "to_user_id", "status"),
        Index("ix_rel_from_status", "from_user_id", "status"),
    )
