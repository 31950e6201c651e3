from dataclasses import dataclass
from typing import List, Optional
from uuid import UUID

from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from core.exceptions import ConflictException, DatabaseException
from core.utils.logging import structured_logger
from models.negotiation import Negotiation, NegotiationStatus, RESOLVED_STATUSES
from models.product import Product
from models.user import User


PENDING_CONFLICT_MESSAGE = (
    "You already have a pending negotiation for this product. Please wait for the outcome."
)


@dataclass
class ShopNegotiationView:
    """A negotiation joined with the product and user fields a shop owner reviews."""
    negotiation: Negotiation
    product: Optional[Product]
    user: Optional[User]


class NegotiationStore:
    """
    Persistence for negotiation records.

    Records are write-once: the store exposes create and reads, nothing that
    mutates an existing row.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    def _newest_first(self, query):
        return query.order_by(Negotiation.created_at.desc(), Negotiation.id.desc())

    async def get(self, negotiation_id: UUID) -> Optional[Negotiation]:
        result = await self.db.execute(
            select(Negotiation).where(Negotiation.id == negotiation_id)
        )
        return result.scalar_one_or_none()

    async def find_pending(self, product_id: UUID, user_id: UUID) -> Optional[Negotiation]:
        result = await self.db.execute(
            select(Negotiation).where(
                Negotiation.product_id == product_id,
                Negotiation.user_id == user_id,
                Negotiation.status == NegotiationStatus.PENDING,
            )
        )
        return result.scalar_one_or_none()

    async def count_resolved(self, product_id: UUID, user_id: UUID) -> int:
        result = await self.db.execute(
            select(func.count(Negotiation.id)).where(
                Negotiation.product_id == product_id,
                Negotiation.user_id == user_id,
                Negotiation.status.in_(RESOLVED_STATUSES),
            )
        )
        return result.scalar_one()

    async def create(self, negotiation: Negotiation) -> Negotiation:
        """
        Insert a new record and commit it. The commit is the last database call.

        Raises ConflictException when the pair already has a pending record or
        when another request claimed the same attempt slot first.
        """
        if negotiation.status == NegotiationStatus.PENDING:
            if await self.find_pending(negotiation.product_id, negotiation.user_id):
                raise ConflictException(message=PENDING_CONFLICT_MESSAGE)

        self.db.add(negotiation)
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            structured_logger.warning(
                message="Negotiation write rejected by uniqueness constraint",
                user_id=negotiation.user_id,
                metadata={
                    "product_id": str(negotiation.product_id),
                    "attempt_index": negotiation.attempt_index,
                },
                exception=e,
            )
            if negotiation.status == NegotiationStatus.PENDING:
                raise ConflictException(message=PENDING_CONFLICT_MESSAGE)
            raise ConflictException(
                message="Another negotiation for this product was just submitted. Please refresh and try again."
            )
        except SQLAlchemyError as e:
            await self.db.rollback()
            structured_logger.error(
                message="Failed to persist negotiation",
                user_id=negotiation.user_id,
                metadata={"product_id": str(negotiation.product_id)},
                exception=e,
            )
            raise DatabaseException(message="Failed to save negotiation")

        return negotiation

    async def list_by_user_and_product(self, user_id: UUID, product_id: UUID) -> List[Negotiation]:
        query = select(Negotiation).where(
            Negotiation.user_id == user_id,
            Negotiation.product_id == product_id,
        )
        result = await self.db.execute(self._newest_first(query))
        return list(result.scalars().all())

    async def list_by_shop(self, shop_id: UUID) -> List[ShopNegotiationView]:
        # Outer joins: products and users are owned elsewhere and may be gone.
        query = (
            select(Negotiation, Product, User)
            .outerjoin(Product, Product.id == Negotiation.product_id)
            .outerjoin(User, User.id == Negotiation.user_id)
            .where(Negotiation.shop_id == shop_id)
        )
        result = await self.db.execute(self._newest_first(query))
        return [
            ShopNegotiationView(negotiation=negotiation, product=product, user=user)
            for negotiation, product, user in result.all()
        ]
