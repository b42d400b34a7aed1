import logging
from datetime import datetime, timezone
from typing import Iterable, Optional

from sqlalchemy import delete, func, insert, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models import EdgeStatus, RelationshipEdge, User
from app.relationship.errors import (
    ConflictError,
    NotFoundError,
    RelationshipError,
    SelfActionError,
)
from app.relationship.types import DirectedEdge, UserSummary

log = logging.getLogger(__name__)


def _now():
    return datetime.now(timezone.utc)


class RelationshipStore:
    """
    Single-row persistence for directed edges.

    Each write is one statement followed by a commit. The composite primary
    key on (from_user_id, to_user_id) is what serializes racing creates, and
    the `expected` status filter on updates/deletes is what serializes racing
    accept/decline calls: whoever runs second matches zero rows.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_edge(
        self,
        from_user_id: int,
        to_user_id: int,
        status: EdgeStatus,
        *,
        since: Optional[datetime] = None,
    ) -> DirectedEdge:
        status = EdgeStatus(status)
        since = since or _now()
        try:
            await self.db.execute(
                insert(RelationshipEdge).values(
                    from_user_id=from_user_id,
                    to_user_id=to_user_id,
                    status=status.value,
                    since=since,
                )
            )
            await self.db.commit()
        except IntegrityError as exc:
            await self.db.rollback()
            raise await self._classify_integrity_error(from_user_id, to_user_id) from exc
        except Exception:
            await self.db.rollback()
            raise

        return DirectedEdge(
            from_user_id=from_user_id,
            to_user_id=to_user_id,
            status=status,
            since=since,
        )

    async def _classify_integrity_error(
        self, from_user_id: int, to_user_id: int
    ) -> RelationshipError:
        """
        Name the constraint a rejected insert hit. Only the primary key is a
        conflict; a self edge trips the CHECK, and a dangling id trips a
        foreign key when a user was deleted after the existence check.
        """
        if from_user_id == to_user_id:
            return SelfActionError()
        if await self.find_edge(from_user_id, to_user_id) is not None:
            log.warning(
                "Duplicate edge rejected: from=%s to=%s", from_user_id, to_user_id
            )
            return ConflictError("Relationship already exists.")
        log.warning(
            "Edge rejected for missing user: from=%s to=%s", from_user_id, to_user_id
        )
        return NotFoundError("User not found.")

    async def update_status(
        self,
        from_user_id: int,
        to_user_id: int,
        new_status: EdgeStatus,
        *,
        expected: Optional[EdgeStatus] = None,
        since: Optional[datetime] = None,
    ) -> DirectedEdge:
        new_status = EdgeStatus(new_status)
        since = since or _now()

        stmt = update(RelationshipEdge).where(
            RelationshipEdge.from_user_id == from_user_id,
            RelationshipEdge.to_user_id == to_user_id,
        )
        if expected is not None:
            stmt = stmt.where(RelationshipEdge.status == EdgeStatus(expected).value)
        stmt = stmt.values(status=new_status.value, since=since).execution_options(
            synchronize_session=False
        )

        try:
            result = await self.db.execute(stmt)
            if result.rowcount == 0:
                await self.db.rollback()
                raise NotFoundError("Relationship no longer exists.")
            await self.db.commit()
        except NotFoundError:
            raise
        except Exception:
            await self.db.rollback()
            raise

        return DirectedEdge(
            from_user_id=from_user_id,
            to_user_id=to_user_id,
            status=new_status,
            since=since,
        )

    async def delete_edge(
        self,
        from_user_id: int,
        to_user_id: int,
        *,
        expected: Optional[EdgeStatus] = None,
    ) -> None:
        stmt = delete(RelationshipEdge).where(
            RelationshipEdge.from_user_id == from_user_id,
            RelationshipEdge.to_user_id == to_user_id,
        )
        if expected is not None:
            stmt = stmt.where(RelationshipEdge.status == EdgeStatus(expected).value)
        stmt = stmt.execution_options(synchronize_session=False)

        try:
            result = await self.db.execute(stmt)
            if result.rowcount == 0:
                await self.db.rollback()
                raise NotFoundError("Relationship no longer exists.")
            await self.db.commit()
        except NotFoundError:
            raise
        except Exception:
            await self.db.rollback()
            raise

    async def find_edge(self, from_user_id: int, to_user_id: int) -> DirectedEdge | None:
        result = await self.db.execute(
            select(RelationshipEdge)
            .where(
                RelationshipEdge.from_user_id == from_user_id,
                RelationshipEdge.to_user_id == to_user_id,
            )
            .execution_options(populate_existing=True)
        )
        row = result.scalar_one_or_none()
        return DirectedEdge.from_row(row) if row else None

    async def find_edges_to(
        self, user_id: int, status: Optional[EdgeStatus] = None
    ) -> list[DirectedEdge]:
        stmt = select(RelationshipEdge).where(RelationshipEdge.to_user_id == user_id)
        if status is not None:
            stmt = stmt.where(RelationshipEdge.status == EdgeStatus(status).value)
        stmt = stmt.order_by(RelationshipEdge.since.asc(), RelationshipEdge.from_user_id)
        result = await self.db.execute(stmt.execution_options(populate_existing=True))
        return [DirectedEdge.from_row(r) for r in result.scalars().all()]

    async def find_edges_from(
        self, user_id: int, status: Optional[EdgeStatus] = None
    ) -> list[DirectedEdge]:
        stmt = select(RelationshipEdge).where(RelationshipEdge.from_user_id == user_id)
        if status is not None:
            stmt = stmt.where(RelationshipEdge.status == EdgeStatus(status).value)
        stmt = stmt.order_by(RelationshipEdge.since.asc(), RelationshipEdge.to_user_id)
        result = await self.db.execute(stmt.execution_options(populate_existing=True))
        return [DirectedEdge.from_row(r) for r in result.scalars().all()]

    async def count_edges_to(self, user_id: int, status: EdgeStatus) -> int:
        count = await self.db.scalar(
            select(func.count())
            .select_from(RelationshipEdge)
            .where(
                RelationshipEdge.to_user_id == user_id,
                RelationshipEdge.status == EdgeStatus(status).value,
            )
        )
        return int(count or 0)

    async def count_edges_from(self, user_id: int, status: EdgeStatus) -> int:
        count = await self.db.scalar(
            select(func.count())
            .select_from(RelationshipEdge)
            .where(
                RelationshipEdge.from_user_id == user_id,
                RelationshipEdge.status == EdgeStatus(status).value,
            )
        )
        return int(count or 0)

    async def incoming_with_users(
        self,
        user_id: int,
        status: EdgeStatus,
        *,
        newest_first: bool = False,
    ) -> list[tuple[DirectedEdge, UserSummary]]:
        """Edges aimed at `user_id`, joined with the sender's profile."""
        order = RelationshipEdge.since.desc() if newest_first else RelationshipEdge.since.asc()
        result = await self.db.execute(
            select(RelationshipEdge, User)
            .join(User, User.id == RelationshipEdge.from_user_id)
            .where(
                RelationshipEdge.to_user_id == user_id,
                RelationshipEdge.status == EdgeStatus(status).value,
            )
            .order_by(order, RelationshipEdge.from_user_id)
            .execution_options(populate_existing=True)
        )
        return [
            (DirectedEdge.from_row(edge), UserSummary.from_user(user))
            for edge, user in result.all()
        ]

    async def outgoing_with_users(
        self,
        user_id: int,
        status: EdgeStatus,
        *,
        newest_first: bool = False,
    ) -> list[tuple[DirectedEdge, UserSummary]]:
        """Edges leaving `user_id`, joined with the receiver's profile."""
        order = RelationshipEdge.since.desc() if newest_first else RelationshipEdge.since.asc()
        result = await self.db.execute(
            select(RelationshipEdge, User)
            .join(User, User.id == RelationshipEdge.to_user_id)
            .where(
                RelationshipEdge.from_user_id == user_id,
                RelationshipEdge.status == EdgeStatus(status).value,
            )
            .order_by(order, RelationshipEdge.to_user_id)
            .execution_options(populate_existing=True)
        )
        return [
            (DirectedEdge.from_row(edge), UserSummary.from_user(user))
            for edge, user in result.all()
        ]

    async def targets_from(
        self,
        user_id: int,
        status: EdgeStatus,
        among: Optional[Iterable[int]] = None,
    ) -> set[int]:
        """Ids `user_id` points at with `status`, optionally limited to `among`."""
        stmt = select(RelationshipEdge.to_user_id).where(
            RelationshipEdge.from_user_id == user_id,
            RelationshipEdge.status == EdgeStatus(status).value,
        )
        if among is not None:
            among = list(among)
            if not among:
                return set()
            stmt = stmt.where(RelationshipEdge.to_user_id.in_(among))
        result = await self.db.execute(stmt)
        return set(result.scalars().all())
