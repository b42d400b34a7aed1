"""
SQLAlchemy database models.

- base: Base declarative class
- user: User accounts and their profile type
- relationship: Directed follow edges between users

Import any model from this module:
    from app.db.models import User, RelationshipEdge
"""

# Base class (must be imported first)
from .base import Base

# User models
from .user import User, ProfileType

# Relationship models
from .relationship import RelationshipEdge, EdgeStatus

__all__ = [
    "Base",
    "User",
    "ProfileType",
    "RelationshipEdge",
    "EdgeStatus",
]
