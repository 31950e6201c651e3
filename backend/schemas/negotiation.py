from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from decimal import Decimal
from uuid import UUID

from models.negotiation import NegotiationStatus


class NegotiationRequest(BaseModel):
    """Body of a buyer's proposal. Accepts camelCase or snake_case keys."""
    product_id: UUID = Field(..., alias="productId")
    proposed_price: Decimal = Field(
        ..., alias="proposedPrice", ge=0, max_digits=12, decimal_places=2,
        description="Number or numeric string; finite, non-negative, at most two decimals.",
    )

    class Config:
        populate_by_name = True


class NegotiationResponse(BaseModel):
    id: UUID
    product_id: UUID = Field(..., alias="productId")
    user_id: UUID = Field(..., alias="userId")
    shop_id: UUID = Field(..., alias="shopId")
    proposed_price: Decimal = Field(..., alias="proposedPrice")
    status: NegotiationStatus
    attempts_left: int = Field(..., alias="attemptsLeft")
    expires_at: datetime = Field(..., alias="expiresAt")
    created_at: datetime = Field(..., alias="createdAt")
    updated_at: datetime = Field(..., alias="updatedAt")

    class Config:
        from_attributes = True
        populate_by_name = True


class NegotiationOutcomeResponse(BaseModel):
    negotiation: NegotiationResponse
    attempts_left: int = Field(..., alias="attemptsLeft")

    class Config:
        populate_by_name = True


class NegotiatedProductSummary(BaseModel):
    id: UUID
    name: str
    selling_price: Decimal = Field(..., alias="sellingPrice")
    min_negotiable_price: Decimal = Field(..., alias="minNegotiablePrice")

    class Config:
        from_attributes = True
        populate_by_name = True


class NegotiatingUserSummary(BaseModel):
    id: UUID
    name: str
    email: str

    class Config:
        from_attributes = True


class ShopNegotiationResponse(NegotiationResponse):
    # None when the product or user no longer exists upstream.
    product: Optional[NegotiatedProductSummary] = None
    user: Optional[NegotiatingUserSummary] = None


class NegotiationPolicyResponse(BaseModel):
    max_attempts: int = Field(..., alias="maxAttempts")
    expiry_hours: int = Field(..., alias="expiryHours")

    class Config:
        populate_by_name = True
