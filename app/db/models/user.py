"""User-related database models."""

import enum
from datetime import date, datetime, timezone
from typing import Optional

from sqlalchemy import Integer, String, Date, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class ProfileType(str, enum.Enum):
    PUBLIC = "Public"
    PRIVATE = "Private"


class User(Base):
    """User account model. `profile_type` gates follow approval and visibility."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    username: Mapped[str] = mapped_column(String, unique=True, nullable=False)
    email: Mapped[str] = mapped_column(String, unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String, nullable=False)
    gender: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    date_of_birth: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    profile_type: Mapped[str] = mapped_column(
        String(16), nullable=False, default=ProfileType.PUBLIC.value
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc)
    )
