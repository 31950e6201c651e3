"""
Unit tests for the pricing rule, the attempt ledger and the status lifecycle
"""
import pytest
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from unittest.mock import AsyncMock
from uuid import uuid4

from models.negotiation import Negotiation, NegotiationStatus
from services.attempts import AttemptLedger, MAX_ATTEMPTS
from services.pricing import evaluate_proposal


class TestPricingRule:
    def test_above_floor_is_accepted(self):
        assert evaluate_proposal(Decimal("90.00"), Decimal("80.00")) == NegotiationStatus.ACCEPTED

    def test_exact_floor_is_accepted(self):
        assert evaluate_proposal(Decimal("80.00"), Decimal("80.00")) == NegotiationStatus.ACCEPTED

    def test_one_cent_below_floor_is_rejected(self):
        assert evaluate_proposal(Decimal("79.99"), Decimal("80.00")) == NegotiationStatus.REJECTED

    def test_zero_proposal_against_zero_floor(self):
        assert evaluate_proposal(Decimal("0.00"), Decimal("0")) == NegotiationStatus.ACCEPTED

    def test_proposal_above_selling_price_is_still_accepted(self):
        assert evaluate_proposal(Decimal("150.00"), Decimal("80.00")) == NegotiationStatus.ACCEPTED


class TestAttemptLedger:
    def test_cap_is_three(self):
        assert MAX_ATTEMPTS == 3

    @pytest.mark.parametrize("consumed,expected", [(0, 3), (1, 2), (2, 1)])
    def test_accept_leaves_consumed_count_untouched(self, consumed, expected):
        assert AttemptLedger(store=None).attempts_left_if_accept(consumed) == expected

    @pytest.mark.parametrize("consumed,expected", [(0, 2), (1, 1), (2, 0)])
    def test_reject_consumes_one_more(self, consumed, expected):
        assert AttemptLedger(store=None).attempts_left_if_reject(consumed) == expected

    def test_attempts_left_after_dispatches_on_outcome(self):
        ledger = AttemptLedger(store=None)
        assert ledger.attempts_left_after(NegotiationStatus.ACCEPTED, 1) == 2
        assert ledger.attempts_left_after(NegotiationStatus.REJECTED, 1) == 1

    def test_exhausted_at_cap(self):
        ledger = AttemptLedger(store=None)
        assert not ledger.is_exhausted(2)
        assert ledger.is_exhausted(3)
        assert ledger.is_exhausted(4)

    def test_display_value_never_negative(self):
        assert AttemptLedger.for_display(-1) == 0
        assert AttemptLedger.for_display(2) == 2

    async def test_consumed_attempts_come_from_store(self):
        store = AsyncMock()
        store.count_resolved.return_value = 2
        product_id, user_id = uuid4(), uuid4()

        consumed = await AttemptLedger(store).consumed_attempts(product_id, user_id)

        assert consumed == 2
        store.count_resolved.assert_awaited_once_with(product_id, user_id)


class TestNegotiationStatus:
    def test_only_pending_has_outgoing_transitions(self):
        assert NegotiationStatus.PENDING.can_transition_to(NegotiationStatus.ACCEPTED)
        assert NegotiationStatus.PENDING.can_transition_to(NegotiationStatus.REJECTED)
        assert NegotiationStatus.PENDING.can_transition_to(NegotiationStatus.EXPIRED)
        for terminal in (NegotiationStatus.ACCEPTED, NegotiationStatus.REJECTED, NegotiationStatus.EXPIRED):
            assert terminal.is_terminal
            for target in NegotiationStatus:
                assert not terminal.can_transition_to(target)

    def test_pending_is_not_terminal(self):
        assert not NegotiationStatus.PENDING.is_terminal

    def test_only_resolved_outcomes_count_as_attempts(self):
        assert NegotiationStatus.ACCEPTED.counts_as_attempt
        assert NegotiationStatus.REJECTED.counts_as_attempt
        assert not NegotiationStatus.PENDING.counts_as_attempt
        assert not NegotiationStatus.EXPIRED.counts_as_attempt

    def test_is_expired_compares_against_expiry(self):
        now = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)
        negotiation = Negotiation(expires_at=now + timedelta(hours=24))

        assert not negotiation.is_expired(now)
        assert negotiation.is_expired(now + timedelta(hours=24))

    def test_is_expired_accepts_naive_stored_timestamps(self):
        now = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)
        negotiation = Negotiation(expires_at=datetime(2024, 1, 1, 11, 0))

        assert negotiation.is_expired(now)
