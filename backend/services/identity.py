from typing import Optional, Set
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from models.shop import Shop
from models.user import User


class IdentityDirectory:
    """Lookups against identity-service accounts and shop ownership."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_user(self, user_id: UUID) -> Optional[User]:
        return await self.db.get(User, user_id)

    async def get_display_name(self, user_id: UUID) -> str:
        user = await self.get_user(user_id)
        return user.name if user else "Unknown user"

    async def get_owned_shop(self, owner_id: UUID) -> Optional[Shop]:
        result = await self.db.execute(
            select(Shop).where(Shop.owner_id == owner_id).order_by(Shop.created_at).limit(1)
        )
        return result.scalar_one_or_none()

    async def push_rooms_for(self, user: User) -> Set[str]:
        """Rooms a user may listen on: their own id, plus their shop's id for owners."""
        rooms = {str(user.id)}
        if user.is_shop_owner:
            shop = await self.get_owned_shop(user.id)
            if shop:
                rooms.add(str(shop.id))
        return rooms
