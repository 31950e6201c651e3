"""
Notification fanout for resolved negotiations.

Each outcome produces two messages: the authoritative one to the buyer's
room and an informational copy to the shop's room. Delivery runs in the
background, at most once, and never fails the negotiation request: the HTTP
response and the history endpoints already carry the outcome.
"""
import asyncio
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Optional, Set
from uuid import UUID

from core.utils.logging import structured_logger
from models.negotiation import NegotiationStatus
from services.websockets import MessageType, WebSocketMessage


@dataclass(frozen=True)
class NegotiationOutcome:
    negotiation_id: UUID
    product_id: UUID
    product_name: str
    shop_id: UUID
    user_id: UUID
    user_name: str
    proposed_price: Decimal
    status: NegotiationStatus
    message: str
    attempts_left: int


def _money(value: Decimal) -> str:
    return f"{value:.2f}"


def user_payload(outcome: NegotiationOutcome) -> Dict[str, Any]:
    accepted = outcome.status == NegotiationStatus.ACCEPTED
    return {
        "negotiationId": str(outcome.negotiation_id),
        "productId": str(outcome.product_id),
        "status": outcome.status.value,
        "acceptedPrice": _money(outcome.proposed_price) if accepted else None,
        "message": outcome.message,
        "attemptsLeft": outcome.attempts_left,
    }


def shop_payload(outcome: NegotiationOutcome) -> Dict[str, Any]:
    return {
        "negotiationId": str(outcome.negotiation_id),
        "productId": str(outcome.product_id),
        "productName": outcome.product_name,
        "proposedPrice": _money(outcome.proposed_price),
        "userName": outcome.user_name,
        "userId": str(outcome.user_id),
        "status": outcome.status.value,
        "message": (
            f"User {outcome.user_name} proposed ${_money(outcome.proposed_price)} "
            f"for {outcome.product_name}. Status: {outcome.status.value}."
        ),
    }


class NotificationFanout:
    def __init__(self, channel):
        if channel is None:
            raise RuntimeError("Push channel must be initialized before the notification fanout")
        self.channel = channel
        self._in_flight: Set[asyncio.Task] = set()

    def dispatch(self, outcome: NegotiationOutcome) -> asyncio.Task:
        """Schedule delivery and return without waiting for it."""
        task = asyncio.create_task(self.deliver(outcome))
        self._in_flight.add(task)
        task.add_done_callback(self._in_flight.discard)
        return task

    async def deliver(self, outcome: NegotiationOutcome) -> None:
        await self._send(
            str(outcome.user_id),
            WebSocketMessage(type=MessageType.NEGOTIATION_OUTCOME, data=user_payload(outcome)),
            outcome,
        )
        await self._send(
            str(outcome.shop_id),
            WebSocketMessage(type=MessageType.NEGOTIATION_INFO, data=shop_payload(outcome)),
            outcome,
        )

    async def _send(self, room: str, message: WebSocketMessage, outcome: NegotiationOutcome) -> Optional[int]:
        try:
            return await self.channel.send_to_room(room, message)
        except Exception as e:
            structured_logger.warning(
                message="Negotiation notification not delivered",
                user_id=outcome.user_id,
                metadata={
                    "negotiation_id": str(outcome.negotiation_id),
                    "room": room,
                    "event": message.type.value,
                },
                exception=e,
            )
            return None

    async def drain(self) -> None:
        """Wait for every delivery scheduled so far."""
        while self._in_flight:
            await asyncio.gather(*list(self._in_flight), return_exceptions=True)
