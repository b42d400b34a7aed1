from datetime import datetime
from typing import Optional

from app.db.models import EdgeStatus, ProfileType
from app.relationship import DualStatus, EdgeWithUser, Visibility
from app.schemas.common import CamelModel


class ActionRequest(CamelModel):
    # Kept as a plain string: unknown verbs are a 400 from the engine, not a 422.
    action: str


class RelationshipStatusResponse(CamelModel):
    your_status: Optional[EdgeStatus] = None
    their_status: Optional[EdgeStatus] = None

    @classmethod
    def from_dual(cls, dual: DualStatus) -> "RelationshipStatusResponse":
        return cls(your_status=dual.your_status, their_status=dual.their_status)


class RelationshipEntry(CamelModel):
    user_id: int
    name: str
    username: str
    profile_type: ProfileType
    status: EdgeStatus
    since: datetime
    you_follow_them: bool = False

    @classmethod
    def from_edge(cls, item: EdgeWithUser) -> "RelationshipEntry":
        return cls(
            user_id=item.user.id,
            name=item.user.name,
            username=item.user.username,
            profile_type=item.user.profile_type,
            status=item.edge.status,
            since=item.edge.since,
            you_follow_them=item.you_follow_them,
        )


class CanViewResponse(CamelModel):
    can_view: bool
    reason: str

    @classmethod
    def from_visibility(cls, visibility: Visibility) -> "CanViewResponse":
        return cls(can_view=visibility.can_view, reason=visibility.reason)


class FollowerCountsResponse(CamelModel):
    followers: int
    following: int
