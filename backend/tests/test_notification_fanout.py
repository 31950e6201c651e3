"""
Tests for negotiation notification payloads and their delivery
"""
import asyncio
import json
import pytest
from decimal import Decimal
from uuid import uuid4

from models.negotiation import NegotiationStatus
from services.fanout import NegotiationOutcome, NotificationFanout, shop_payload, user_payload
from services.websockets import MessageType
from conftest import RecordingChannel


def make_outcome(status=NegotiationStatus.ACCEPTED, price="90.00", attempts_left=3):
    return NegotiationOutcome(
        negotiation_id=uuid4(),
        product_id=uuid4(),
        product_name="Walnut Desk",
        shop_id=uuid4(),
        user_id=uuid4(),
        user_name="Ada Buyer",
        proposed_price=Decimal(price),
        status=status,
        message="Your negotiation for Walnut Desk at $90.00 was ACCEPTED!",
        attempts_left=attempts_left,
    )


class SlowChannel(RecordingChannel):
    def __init__(self):
        super().__init__()
        self.release = asyncio.Event()

    async def send_to_room(self, room, message):
        await self.release.wait()
        return await super().send_to_room(room, message)


class TestPayloads:
    def test_user_payload_carries_accepted_price(self):
        outcome = make_outcome()

        payload = user_payload(outcome)

        assert payload == {
            "negotiationId": str(outcome.negotiation_id),
            "productId": str(outcome.product_id),
            "status": "accepted",
            "acceptedPrice": "90.00",
            "message": outcome.message,
            "attemptsLeft": 3,
        }

    def test_user_payload_has_no_price_when_rejected(self):
        payload = user_payload(make_outcome(NegotiationStatus.REJECTED, price="70.00", attempts_left=2))

        assert payload["status"] == "rejected"
        assert payload["acceptedPrice"] is None
        assert payload["attemptsLeft"] == 2

    def test_shop_payload_summarizes_the_proposal(self):
        outcome = make_outcome(NegotiationStatus.REJECTED, price="70.5")

        payload = shop_payload(outcome)

        assert payload["productName"] == "Walnut Desk"
        assert payload["proposedPrice"] == "70.50"
        assert payload["userName"] == "Ada Buyer"
        assert payload["userId"] == str(outcome.user_id)
        assert payload["message"] == "User Ada Buyer proposed $70.50 for Walnut Desk. Status: rejected."
        assert "attemptsLeft" not in payload


class TestNotificationFanout:
    def test_requires_a_push_channel(self):
        with pytest.raises(RuntimeError):
            NotificationFanout(None)

    @pytest.mark.asyncio
    async def test_user_then_shop_room(self):
        channel = RecordingChannel()
        fanout = NotificationFanout(channel)
        outcome = make_outcome()

        fanout.dispatch(outcome)
        await fanout.drain()

        assert [room for room, _ in channel.sent] == [str(outcome.user_id), str(outcome.shop_id)]
        assert channel.sent[0][1].type == MessageType.NEGOTIATION_OUTCOME
        assert channel.sent[1][1].type == MessageType.NEGOTIATION_INFO

    @pytest.mark.asyncio
    async def test_dispatch_does_not_wait_for_delivery(self):
        channel = SlowChannel()
        fanout = NotificationFanout(channel)

        task = fanout.dispatch(make_outcome())

        assert not task.done()
        assert channel.sent == []
        channel.release.set()
        await fanout.drain()
        assert len(channel.sent) == 2

    @pytest.mark.asyncio
    async def test_failed_user_delivery_still_notifies_shop(self):
        outcome = make_outcome()
        channel = RecordingChannel(fail_rooms={str(outcome.user_id)})
        fanout = NotificationFanout(channel)

        await fanout.deliver(outcome)

        assert [room for room, _ in channel.sent] == [str(outcome.shop_id)]

    @pytest.mark.asyncio
    async def test_envelope_serializes_with_event_name(self):
        channel = RecordingChannel()
        outcome = make_outcome()

        await NotificationFanout(channel).deliver(outcome)

        envelope = json.loads(channel.sent[0][1].to_json())
        assert envelope["type"] == "negotiationOutcome"
        assert envelope["data"]["negotiationId"] == str(outcome.negotiation_id)
        assert envelope["message_id"]
