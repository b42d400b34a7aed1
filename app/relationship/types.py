from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

from app.db.models import EdgeStatus, ProfileType, RelationshipEdge, User


class Verb(str, Enum):
    SEND = "send"
    CANCEL = "cancel"
    ACCEPT = "accept"
    DECLINE = "decline"
    UNFOLLOW = "unfollow"
    UNFRIEND = "unfriend"


@dataclass(frozen=True)
class DirectedEdge:
    from_user_id: int
    to_user_id: int
    status: EdgeStatus
    since: datetime

    @classmethod
    def from_row(cls, row: RelationshipEdge) -> "DirectedEdge":
        return cls(
            from_user_id=row.from_user_id,
            to_user_id=row.to_user_id,
            status=EdgeStatus(row.status),
            since=row.since,
        )

    @property
    def is_pending(self) -> bool:
        return self.status is EdgeStatus.PENDING

    @property
    def is_accepted(self) -> bool:
        return self.status is EdgeStatus.ACCEPTED


@dataclass(frozen=True)
class Outcome:
    verb: Verb
    message: str
    edge: Optional[DirectedEdge] = None


@dataclass(frozen=True)
class DualStatus:
    your_status: Optional[EdgeStatus]
    their_status: Optional[EdgeStatus]


@dataclass(frozen=True)
class UserSummary:
    id: int
    name: str
    username: str
    profile_type: ProfileType

    @classmethod
    def from_user(cls, user: User) -> "UserSummary":
        return cls(
            id=user.id,
            name=user.name,
            username=user.username,
            profile_type=ProfileType(user.profile_type),
        )


@dataclass(frozen=True)
class EdgeWithUser:
    """An edge joined with the profile of the user on the other end."""
    edge: DirectedEdge
    user: UserSummary
    you_follow_them: bool = False


@dataclass(frozen=True)
class Visibility:
    can_view: bool
    reason: str
