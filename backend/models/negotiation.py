from sqlalchemy import Column, DateTime, Integer, Numeric, Enum, Index, UniqueConstraint, text
from datetime import datetime
import enum

from core.database import BaseModel, GUID


class NegotiationStatus(enum.Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    EXPIRED = "expired"

    @property
    def is_terminal(self) -> bool:
        return not _TRANSITIONS[self]

    @property
    def counts_as_attempt(self) -> bool:
        """Only resolved outcomes are charged against the attempt cap."""
        return self in RESOLVED_STATUSES

    def can_transition_to(self, target: "NegotiationStatus") -> bool:
        return target in _TRANSITIONS[self]


# pending is the only state with outgoing edges; the current policy creates
# records directly in a terminal state.
_TRANSITIONS = {
    NegotiationStatus.PENDING: frozenset({
        NegotiationStatus.ACCEPTED,
        NegotiationStatus.REJECTED,
        NegotiationStatus.EXPIRED,
    }),
    NegotiationStatus.ACCEPTED: frozenset(),
    NegotiationStatus.REJECTED: frozenset(),
    NegotiationStatus.EXPIRED: frozenset(),
}

RESOLVED_STATUSES = (NegotiationStatus.ACCEPTED, NegotiationStatus.REJECTED)


class Negotiation(BaseModel):
    """
    One price proposal by one user on one product. Written once, never updated.

    product_id, user_id and shop_id are plain references owned by other
    services. shop_id is a snapshot of the product's owner at creation time.
    """
    __tablename__ = "negotiations"
    __table_args__ = (
        # At most one pending negotiation per (product, user).
        Index(
            "uq_negotiations_pending_pair",
            "product_id",
            "user_id",
            unique=True,
            postgresql_where=text("status = 'pending'"),
            sqlite_where=text("status = 'pending'"),
        ),
        # Conditional write for resolved records: two requests that read the
        # same consumed count cannot both claim the same attempt slot.
        UniqueConstraint("product_id", "user_id", "attempt_index",
                         name="uq_negotiations_attempt_slot"),
        Index("ix_negotiations_shop_created", "shop_id", "created_at"),
        {'extend_existing': True},
    )

    product_id = Column(GUID(), nullable=False, index=True)
    user_id = Column(GUID(), nullable=False, index=True)
    shop_id = Column(GUID(), nullable=False)

    proposed_price = Column(Numeric(12, 2), nullable=False)
    status = Column(
        Enum(
            NegotiationStatus,
            name="negotiation_status_enum",
            values_callable=lambda statuses: [s.value for s in statuses],
        ),
        default=NegotiationStatus.PENDING,
        nullable=False,
    )
    attempts_left = Column(Integer, nullable=False)
    # 1-based slot within the attempt cap; NULL while pending.
    attempt_index = Column(Integer, nullable=True)
    expires_at = Column(DateTime(timezone=True), nullable=False)

    def is_expired(self, now: datetime) -> bool:
        """Advisory only, nothing reaps expired records."""
        expires_at = self.expires_at
        if expires_at.tzinfo is None and now.tzinfo is not None:
            now = now.replace(tzinfo=None)
        return now >= expires_at
