"""
Attempt ledger: how many negotiation attempts a user has left on a product.

Attempts are derived from history on every call, never cached, so two
requests always see the store's current state.
"""
from uuid import UUID

from models.negotiation import NegotiationStatus

# Policy constant, intentionally not configurable per user or tenant.
MAX_ATTEMPTS = 3


class AttemptLedger:
    def __init__(self, store, max_attempts: int = MAX_ATTEMPTS):
        self.store = store
        self.max_attempts = max_attempts

    async def consumed_attempts(self, product_id: UUID, user_id: UUID) -> int:
        """Accepted and rejected records for the pair; other statuses are free."""
        return await self.store.count_resolved(product_id, user_id)

    def is_exhausted(self, consumed: int) -> bool:
        return consumed >= self.max_attempts

    def attempts_left_if_accept(self, consumed: int) -> int:
        # Acceptance does not consume an attempt.
        return self.max_attempts - consumed

    def attempts_left_if_reject(self, consumed: int) -> int:
        # May go negative internally; use for_display() before showing it.
        return self.max_attempts - (consumed + 1)

    def attempts_left_after(self, outcome: NegotiationStatus, consumed: int) -> int:
        if outcome == NegotiationStatus.ACCEPTED:
            return self.attempts_left_if_accept(consumed)
        return self.attempts_left_if_reject(consumed)

    @staticmethod
    def for_display(attempts_left: int) -> int:
        return max(0, attempts_left)
