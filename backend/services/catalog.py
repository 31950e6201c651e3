from dataclasses import dataclass
from decimal import Decimal
from typing import Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from models.product import Product


@dataclass(frozen=True)
class ProductSnapshot:
    """What negotiation needs to know about a catalog product."""
    id: UUID
    name: str
    selling_price: Decimal
    floor_price: Decimal
    shop_id: UUID


class CatalogService:
    """Read-only lookup against the catalog's product table."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_product(self, product_id: UUID) -> Optional[ProductSnapshot]:
        product = await self.db.get(Product, product_id)
        if product is None:
            return None
        return ProductSnapshot(
            id=product.id,
            name=product.name,
            selling_price=Decimal(product.selling_price),
            floor_price=Decimal(product.min_negotiable_price),
            shop_id=product.shop_id,
        )
