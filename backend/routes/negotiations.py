import asyncio
from typing import Awaitable, List, TypeVar
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from core.database import get_db
from core.dependencies import get_negotiation_resolver, require_consumer, require_shop_owner
from core.exceptions import APIException
from core.utils.logging import structured_logger
from core.utils.response import Response
from schemas.response import APIResponse
from models.shop import Shop
from models.user import User
from schemas.negotiation import (
    NegotiatedProductSummary,
    NegotiatingUserSummary,
    NegotiationOutcomeResponse,
    NegotiationPolicyResponse,
    NegotiationRequest,
    NegotiationResponse,
    ShopNegotiationResponse,
)
from services.attempts import MAX_ATTEMPTS
from services.negotiation import NEGOTIATION_TTL, NegotiationResolver
from services.negotiation_store import NegotiationStore

router = APIRouter(prefix="/negotiations", tags=["Negotiations"])

T = TypeVar("T")


def retrieve_resolution_outcome(task: asyncio.Task) -> None:
    """Read a finished resolution's exception, whether or not a client still awaits it."""
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None and not isinstance(exc, APIException):
        structured_logger.error(message="Negotiation resolution failed", exception=exc)


def shielded(coro: Awaitable[T]) -> Awaitable[T]:
    """Run a resolution to completion even if the awaiting request is cancelled."""
    task = asyncio.ensure_future(coro)
    task.add_done_callback(retrieve_resolution_outcome)
    return asyncio.shield(task)


@router.post(
    "/request",
    status_code=status.HTTP_201_CREATED,
    response_model=APIResponse[NegotiationOutcomeResponse],
)
async def request_negotiation(
    negotiation_data: NegotiationRequest,
    current_user: User = Depends(require_consumer),
    resolver: NegotiationResolver = Depends(get_negotiation_resolver),
):
    """Submit a price proposal for a product and get the outcome immediately."""
    # A dropped client must not abort a resolution between commit and notify.
    result = await shielded(
        resolver.request_negotiation(negotiation_data.product_id, current_user.id, negotiation_data.proposed_price)
    )
    return Response.success(
        data=NegotiationOutcomeResponse(
            negotiation=NegotiationResponse.model_validate(result.record),
            attempts_left=result.attempts_left,
        ),
        message=result.message,
        status_code=status.HTTP_201_CREATED,
    )


@router.get("/product/{product_id}/user", response_model=APIResponse[List[NegotiationResponse]])
async def get_user_negotiations_for_product(
    product_id: UUID,
    current_user: User = Depends(require_consumer),
    db: AsyncSession = Depends(get_db),
):
    """The caller's negotiation history for one product, newest first."""
    negotiations = await NegotiationStore(db).list_by_user_and_product(current_user.id, product_id)
    return Response.success(
        data=[NegotiationResponse.model_validate(n) for n in negotiations],
        message="Negotiations retrieved successfully",
    )


@router.get("/shop/history", response_model=APIResponse[List[ShopNegotiationResponse]])
async def get_shop_negotiations(
    shop: Shop = Depends(require_shop_owner),
    db: AsyncSession = Depends(get_db),
):
    """Every negotiation against the caller's shop, newest first."""
    views = await NegotiationStore(db).list_by_shop(shop.id)
    data = []
    for view in views:
        item = ShopNegotiationResponse.model_validate(view.negotiation)
        if view.product is not None:
            item.product = NegotiatedProductSummary.model_validate(view.product)
        if view.user is not None:
            item.user = NegotiatingUserSummary.model_validate(view.user)
        data.append(item)
    return Response.success(data=data, message="Shop negotiations retrieved successfully")


@router.get("/policy", response_model=APIResponse[NegotiationPolicyResponse])
async def get_negotiation_policy():
    return Response.success(
        data=NegotiationPolicyResponse(
            max_attempts=MAX_ATTEMPTS,
            expiry_hours=int(NEGOTIATION_TTL.total_seconds() // 3600),
        )
    )
