"""
Directed follow graph between users.

Each ordered pair (from, to) has at most one edge, Pending or Accepted. The
reverse pair is independent, so following is asymmetric.

Main entry point is `RelationshipEngine.execute` in engine.py; all writes go
through it. `VisibilityEvaluator` and `RelationshipQueryService` only read.
"""

from .errors import (
    RelationshipError,
    SelfActionError,
    NotFoundError,
    InvalidTransitionError,
    ConflictError,
)
from .types import DirectedEdge, DualStatus, EdgeWithUser, Outcome, UserSummary, Verb, Visibility
from .repo import RelationshipStore
from .engine import RelationshipEngine, parse_verb
from .visibility import VisibilityEvaluator
from .queries import RelationshipQueryService

__all__ = [
    # Errors
    "RelationshipError",
    "SelfActionError",
    "NotFoundError",
    "InvalidTransitionError",
    "ConflictError",

    # Types
    "DirectedEdge",
    "DualStatus",
    "EdgeWithUser",
    "Outcome",
    "UserSummary",
    "Verb",
    "Visibility",

    # Components
    "RelationshipStore",
    "RelationshipEngine",
    "parse_verb",
    "VisibilityEvaluator",
    "RelationshipQueryService",
]
