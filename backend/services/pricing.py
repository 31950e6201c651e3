"""
Pricing rule for buyer proposals.

A proposal is accepted when it reaches the product's floor price (ties go to
the buyer) and rejected otherwise. Callers validate the proposal first; the
rule itself never fails.
"""
from decimal import Decimal

from models.negotiation import NegotiationStatus


def evaluate_proposal(proposed_price: Decimal, floor_price: Decimal) -> NegotiationStatus:
    if proposed_price >= floor_price:
        return NegotiationStatus.ACCEPTED
    return NegotiationStatus.REJECTED
