import logging
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Awaitable, Callable

from app.db.models import EdgeStatus, ProfileType
from app.relationship.errors import (
    ConflictError,
    InvalidTransitionError,
    NotFoundError,
    SelfActionError,
)
from app.relationship.repo import RelationshipStore
from app.relationship.types import DirectedEdge, Outcome, Verb

if TYPE_CHECKING:
    from app.services.user_directory import UserDirectory

log = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def parse_verb(raw: str | Verb) -> Verb:
    if isinstance(raw, Verb):
        return raw
    try:
        return Verb(str(raw).strip().lower())
    except ValueError:
        raise InvalidTransitionError("Invalid action.") from None


class RelationshipEngine:
    """
    Runs follow actions against the directed edge graph.

    send / cancel / unfollow act on the actor's own outbound edge
    (actor -> target). accept / decline act on the inbound edge
    (target -> actor), i.e. a request someone else aimed at the actor.

        verb       edge       must be      effect
        send       out        absent       create (Accepted if target is Public, else Pending)
        cancel     out        Pending      delete
        accept     in         Pending      set Accepted, refresh since
        decline    in         Pending      delete
        unfollow   out        Accepted     delete (reverse edge untouched)

    Every write passes the status it checked as `expected`, so a request that
    lost a race gets NotFoundError from the store instead of clobbering the
    winner's result.
    """

    def __init__(
        self,
        store: RelationshipStore,
        users: "UserDirectory",
        *,
        clock: Callable[[], datetime] = _now,
    ):
        self.store = store
        self.users = users
        self.clock = clock
        self._handlers: dict[Verb, Callable[[int, int], Awaitable[Outcome]]] = {
            Verb.SEND: self._send,
            Verb.CANCEL: self._cancel,
            Verb.ACCEPT: self._accept,
            Verb.DECLINE: self._decline,
            Verb.UNFOLLOW: self._unfollow,
            Verb.UNFRIEND: self._unfollow,
        }

    async def execute(self, actor_id: int, target_id: int, verb: str | Verb) -> Outcome:
        if actor_id == target_id:
            raise SelfActionError()
        if not await self.users.exists(target_id):
            raise NotFoundError("User not found.")

        verb = parse_verb(verb)
        handler = self._handlers[verb]

        try:
            outcome = await handler(actor_id, target_id)
        except ConflictError:
            log.warning(
                "Concurrent %s lost the race: actor=%s target=%s",
                verb.value, actor_id, target_id,
            )
            raise

        log.info(
            "Relationship %s: actor=%s target=%s status=%s",
            verb.value,
            actor_id,
            target_id,
            outcome.edge.status.value if outcome.edge else "deleted",
        )
        return Outcome(verb=verb, message=outcome.message, edge=outcome.edge)

    async def _outbound(self, actor_id: int, target_id: int) -> DirectedEdge | None:
        return await self.store.find_edge(actor_id, target_id)

    async def _inbound(self, actor_id: int, target_id: int) -> DirectedEdge | None:
        return await self.store.find_edge(target_id, actor_id)

    async def _send(self, actor_id: int, target_id: int) -> Outcome:
        if await self._outbound(actor_id, target_id) is not None:
            raise InvalidTransitionError("You already follow or requested.")

        profile_type = await self.users.get_profile_type(target_id)
        if profile_type is ProfileType.PUBLIC:
            status, message = EdgeStatus.ACCEPTED, "Followed successfully!"
        else:
            status, message = EdgeStatus.PENDING, "Follow request sent!"

        edge = await self.store.create_edge(actor_id, target_id, status, since=self.clock())
        return Outcome(verb=Verb.SEND, message=message, edge=edge)

    async def _cancel(self, actor_id: int, target_id: int) -> Outcome:
        edge = await self._outbound(actor_id, target_id)
        if edge is None or not edge.is_pending:
            raise InvalidTransitionError("No pending outgoing request to cancel.")

        await self.store.delete_edge(actor_id, target_id, expected=EdgeStatus.PENDING)
        return Outcome(verb=Verb.CANCEL, message="Request cancelled.")

    async def _accept(self, actor_id: int, target_id: int) -> Outcome:
        edge = await self._inbound(actor_id, target_id)
        if edge is None or not edge.is_pending:
            raise InvalidTransitionError("No incoming request to accept.")

        accepted = await self.store.update_status(
            target_id,
            actor_id,
            EdgeStatus.ACCEPTED,
            expected=EdgeStatus.PENDING,
            since=self.clock(),
        )
        return Outcome(verb=Verb.ACCEPT, message="Request accepted!", edge=accepted)

    async def _decline(self, actor_id: int, target_id: int) -> Outcome:
        edge = await self._inbound(actor_id, target_id)
        if edge is None or not edge.is_pending:
            raise InvalidTransitionError("No incoming request to decline.")

        await self.store.delete_edge(target_id, actor_id, expected=EdgeStatus.PENDING)
        return Outcome(verb=Verb.DECLINE, message="Request declined.")

    async def _unfollow(self, actor_id: int, target_id: int) -> Outcome:
        edge = await self._outbound(actor_id, target_id)
        if edge is None or not edge.is_accepted:
            raise InvalidTransitionError("You are not following this user.")

        await self.store.delete_edge(actor_id, target_id, expected=EdgeStatus.ACCEPTED)
        return Outcome(verb=Verb.UNFOLLOW, message="Unfollowed successfully.")
