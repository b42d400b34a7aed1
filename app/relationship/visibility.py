from typing import TYPE_CHECKING

from app.db.models import EdgeStatus, ProfileType
from app.relationship.repo import RelationshipStore
from app.relationship.types import Visibility

if TYPE_CHECKING:
    from app.services.user_directory import UserDirectory


class VisibilityEvaluator:
    """
    Decides whether `actor` may see `target`'s protected content.

    Only the actor's own approved follow of the target counts. Whether the
    target follows the actor back is irrelevant.
    """

    def __init__(self, store: RelationshipStore, users: "UserDirectory"):
        self.store = store
        self.users = users

    async def explain(self, actor_id: int, target_id: int) -> Visibility:
        if actor_id == target_id:
            return Visibility(can_view=True, reason="own_profile")

        # Raises NotFoundError for an unknown target.
        if await self.users.get_profile_type(target_id) is ProfileType.PUBLIC:
            return Visibility(can_view=True, reason="public_profile")

        edge = await self.store.find_edge(actor_id, target_id)
        if edge is not None and edge.status is EdgeStatus.ACCEPTED:
            return Visibility(can_view=True, reason="follower")

        return Visibility(can_view=False, reason="private_profile")

    async def can_view(self, actor_id: int, target_id: int) -> bool:
        return (await self.explain(actor_id, target_id)).can_view
