from app.db.models import EdgeStatus
from app.relationship.repo import RelationshipStore
from app.relationship.types import DualStatus, EdgeWithUser


class RelationshipQueryService:
    """Read-only views over the edge store. Nothing here writes."""

    def __init__(self, store: RelationshipStore):
        self.store = store

    async def pending_incoming(self, user_id: int) -> list[EdgeWithUser]:
        """Requests waiting on `user_id`, oldest first."""
        rows = await self.store.incoming_with_users(user_id, EdgeStatus.PENDING)
        return [EdgeWithUser(edge=edge, user=user) for edge, user in rows]

    async def pending_outgoing(self, user_id: int) -> list[EdgeWithUser]:
        """Requests `user_id` has sent that are still waiting, oldest first."""
        rows = await self.store.outgoing_with_users(user_id, EdgeStatus.PENDING)
        return [EdgeWithUser(edge=edge, user=user) for edge, user in rows]

    async def dual_status(self, actor_id: int, target_id: int) -> DualStatus:
        yours = await self.store.find_edge(actor_id, target_id)
        theirs = await self.store.find_edge(target_id, actor_id)
        return DualStatus(
            your_status=yours.status if yours else None,
            their_status=theirs.status if theirs else None,
        )

    async def follower_count(self, user_id: int) -> int:
        return await self.store.count_edges_to(user_id, EdgeStatus.ACCEPTED)

    async def following_count(self, user_id: int) -> int:
        return await self.store.count_edges_from(user_id, EdgeStatus.ACCEPTED)

    async def following_ids(self, user_id: int) -> set[int]:
        return await self.store.targets_from(user_id, EdgeStatus.ACCEPTED)

    async def followers(self, user_id: int, viewer_id: int) -> list[EdgeWithUser]:
        rows = await self.store.incoming_with_users(
            user_id, EdgeStatus.ACCEPTED, newest_first=True
        )
        followed = await self.store.targets_from(
            viewer_id, EdgeStatus.ACCEPTED, among=[user.id for _, user in rows]
        )
        return [
            EdgeWithUser(edge=edge, user=user, you_follow_them=user.id in followed)
            for edge, user in rows
        ]

    async def following(self, user_id: int, viewer_id: int) -> list[EdgeWithUser]:
        rows = await self.store.outgoing_with_users(
            user_id, EdgeStatus.ACCEPTED, newest_first=True
        )
        followed = await self.store.targets_from(
            viewer_id, EdgeStatus.ACCEPTED, among=[user.id for _, user in rows]
        )
        return [
            EdgeWithUser(edge=edge, user=user, you_follow_them=user.id in followed)
            for edge, user in rows
        ]
