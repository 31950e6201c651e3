"""
Negotiation resolver.

Current policy: every request is resolved synchronously against the product's
floor price, so records are created directly as accepted or rejected. The
pending state and the pending check stay in place for a future
owner-approval flow.
"""
from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal, InvalidOperation
from typing import Callable, Union
from uuid import UUID

from sqlalchemy.ext.asyncio import async_sessionmaker

from core.database import utcnow
from core.exceptions import (
    AttemptsExhaustedException,
    ConflictException,
    NotFoundException,
    ValidationException,
)
from core.utils.logging import structured_logger
from models.negotiation import Negotiation, NegotiationStatus
from services.attempts import AttemptLedger, MAX_ATTEMPTS
from services.catalog import CatalogService, ProductSnapshot
from services.fanout import NegotiationOutcome, NotificationFanout
from services.identity import IdentityDirectory
from services.negotiation_store import NegotiationStore, PENDING_CONFLICT_MESSAGE
from services.pricing import evaluate_proposal

NEGOTIATION_TTL = timedelta(hours=24)
# Largest amount a Numeric(12, 2) column holds.
MAX_PRICE = Decimal("9999999999.99")

PriceInput = Union[str, int, float, Decimal]


@dataclass
class NegotiationResult:
    status: NegotiationStatus
    message: str
    record: Negotiation
    attempts_left: int


def parse_proposed_price(value: PriceInput) -> Decimal:
    """Parse a buyer's proposal into a finite, non-negative amount in cents."""
    if value is None or isinstance(value, bool):
        raise ValidationException(
            message="Proposed price is required",
            errors={"proposedPrice": "required"},
        )
    try:
        price = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise ValidationException(
            message="Proposed price must be a number",
            errors={"proposedPrice": "not a number"},
        )
    if not price.is_finite():
        raise ValidationException(
            message="Proposed price must be a finite number",
            errors={"proposedPrice": "not finite"},
        )
    if price < 0:
        raise ValidationException(
            message="Proposed price cannot be negative",
            errors={"proposedPrice": "negative"},
        )
    if price > MAX_PRICE:
        raise ValidationException(
            message="Proposed price is too large",
            errors={"proposedPrice": "too large"},
        )
    if price != price.quantize(Decimal("0.01")):
        raise ValidationException(
            message="Proposed price cannot have more than two decimal places",
            errors={"proposedPrice": "too precise"},
        )
    return price.quantize(Decimal("0.01"))


def parse_identifier(value: Union[str, UUID], field: str) -> UUID:
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except (ValueError, TypeError, AttributeError):
        raise ValidationException(
            message=f"{field} is not a valid identifier",
            errors={field: "invalid identifier"},
        )


def compose_message(product: ProductSnapshot, price: Decimal, status: NegotiationStatus,
                    attempts_left: int) -> str:
    if status == NegotiationStatus.ACCEPTED:
        return f"Your negotiation for {product.name} at ${price:.2f} was ACCEPTED!"
    return (
        f"Your negotiation for {product.name} at ${price:.2f} was REJECTED. "
        f"Proposed price is too low. You have {AttemptLedger.for_display(attempts_left)} attempts left."
    )


class NegotiationResolver:
    """
    Resolves one buyer proposal per call.

    Each call opens its own session, so nothing computed for one request is
    reused by another, and a resolution keeps running if the caller goes away.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker,
        fanout: NotificationFanout,
        clock: Callable[[], datetime] = utcnow,
        max_attempts: int = MAX_ATTEMPTS,
    ):
        self.session_factory = session_factory
        self.fanout = fanout
        self.clock = clock
        self.max_attempts = max_attempts

    async def request_negotiation(
        self,
        product_id: Union[str, UUID],
        user_id: Union[str, UUID],
        proposed_price: PriceInput,
    ) -> NegotiationResult:
        product_id = parse_identifier(product_id, "productId")
        user_id = parse_identifier(user_id, "userId")
        price = parse_proposed_price(proposed_price)

        async with self.session_factory() as db:
            store = NegotiationStore(db)
            ledger = AttemptLedger(store, self.max_attempts)

            product = await CatalogService(db).get_product(product_id)
            if product is None:
                raise NotFoundException(message="Product not found", resource="product")

            if await store.find_pending(product_id, user_id):
                raise ConflictException(message=PENDING_CONFLICT_MESSAGE)

            consumed = await ledger.consumed_attempts(product_id, user_id)
            if ledger.is_exhausted(consumed):
                raise AttemptsExhaustedException(
                    message=f"You have exhausted your {self.max_attempts} negotiation attempts for this product.",
                    attempts_left=0,
                )

            # Everything the notifications need is read before the commit below.
            user_name = await IdentityDirectory(db).get_display_name(user_id)

            status = evaluate_proposal(price, product.floor_price)
            attempts_left = ledger.attempts_left_after(status, consumed)

            record = await store.create(Negotiation(
                product_id=product_id,
                user_id=user_id,
                shop_id=product.shop_id,
                proposed_price=price,
                status=status,
                attempts_left=AttemptLedger.for_display(attempts_left),
                attempt_index=consumed + 1,
                expires_at=self.clock() + NEGOTIATION_TTL,
            ))

        message = compose_message(product, price, status, attempts_left)

        structured_logger.info(
            message="Negotiation resolved",
            user_id=user_id,
            metadata={
                "negotiation_id": str(record.id),
                "product_id": str(product_id),
                "status": status.value,
                "attempts_left": attempts_left,
            },
        )

        # Only after the commit above, so history already shows the record.
        self.fanout.dispatch(NegotiationOutcome(
            negotiation_id=record.id,
            product_id=product_id,
            product_name=product.name,
            shop_id=product.shop_id,
            user_id=user_id,
            user_name=user_name,
            proposed_price=price,
            status=status,
            message=message,
            attempts_left=AttemptLedger.for_display(attempts_left),
        ))

        return NegotiationResult(
            status=status,
            message=message,
            record=record,
            attempts_left=AttemptLedger.for_display(attempts_left),
        )
