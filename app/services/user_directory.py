from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models import ProfileType, User
from app.relationship.errors import NotFoundError


class UserDirectory:
    """Read access to users for the relationship engine, plus profile-type updates."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, user_id: int) -> User | None:
        return await self.db.get(User, user_id)

    async def exists(self, user_id: int) -> bool:
        found = await self.db.scalar(select(User.id).where(User.id == user_id))
        return found is not None

    async def get_profile_type(self, user_id: int) -> ProfileType:
        profile_type = await self.db.scalar(
            select(User.profile_type).where(User.id == user_id)
        )
        if profile_type is None:
            raise NotFoundError("User not found.")
        return ProfileType(profile_type)

    async def set_profile_type(self, user_id: int, profile_type: ProfileType) -> User:
        """
        Switch a profile between Public and Private.

        Only future follow requests are affected; existing edges keep
        whatever status they already have.
        """
        user = await self.get(user_id)
        if user is None:
            raise NotFoundError("User not found.")
        user.profile_type = ProfileType(profile_type).value
        self.db.add(user)
        await self.db.commit()
        await self.db.refresh(user)
        return user
