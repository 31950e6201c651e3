"""
Property-based tests for the negotiation rules
Properties: pricing monotonicity, attempt accounting, proposal normalization
"""
from decimal import Decimal
from hypothesis import given, strategies as st, settings

from models.negotiation import NegotiationStatus
from services.attempts import AttemptLedger, MAX_ATTEMPTS
from services.catalog import ProductSnapshot
from services.negotiation import compose_message, parse_proposed_price
from services.pricing import evaluate_proposal
from uuid import uuid4

cents = st.decimals(min_value=Decimal("0"), max_value=Decimal("100000"), places=2,
                    allow_nan=False, allow_infinity=False)


@given(proposed=cents, floor=cents)
@settings(max_examples=200)
def test_outcome_depends_only_on_floor_comparison(proposed, floor):
    expected = NegotiationStatus.ACCEPTED if proposed >= floor else NegotiationStatus.REJECTED
    assert evaluate_proposal(proposed, floor) == expected


@given(floor=cents, proposed=cents, bump=cents)
def test_raising_an_accepted_offer_stays_accepted(floor, proposed, bump):
    if evaluate_proposal(proposed, floor) == NegotiationStatus.ACCEPTED:
        assert evaluate_proposal(proposed + bump, floor) == NegotiationStatus.ACCEPTED


@given(outcomes=st.lists(st.sampled_from([NegotiationStatus.ACCEPTED, NegotiationStatus.REJECTED]),
                         min_size=0, max_size=MAX_ATTEMPTS))
def test_attempts_left_stays_within_bounds(outcomes):
    ledger = AttemptLedger(store=None)
    for consumed, outcome in enumerate(outcomes):
        assert not ledger.is_exhausted(consumed)
        left = AttemptLedger.for_display(ledger.attempts_left_after(outcome, consumed))
        assert 0 <= left <= MAX_ATTEMPTS
        if outcome == NegotiationStatus.ACCEPTED:
            assert left == MAX_ATTEMPTS - consumed
        else:
            assert left == MAX_ATTEMPTS - consumed - 1
    assert ledger.is_exhausted(len(outcomes)) == (len(outcomes) == MAX_ATTEMPTS)


@given(price=cents)
def test_valid_proposals_round_trip_at_two_places(price):
    parsed = parse_proposed_price(str(price))
    assert parsed == price
    assert parsed.as_tuple().exponent == -2


@given(price=cents, attempts_left=st.integers(min_value=-1, max_value=MAX_ATTEMPTS))
def test_rejection_message_never_shows_negative_attempts(price, attempts_left):
    product = ProductSnapshot(id=uuid4(), name="Walnut Desk", selling_price=Decimal("100.00"),
                              floor_price=Decimal("80.00"), shop_id=uuid4())

    message = compose_message(product, price, NegotiationStatus.REJECTED, attempts_left)

    assert f"${price:.2f}" in message
    assert f"You have {max(0, attempts_left)} attempts left." in message
