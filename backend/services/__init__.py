# Services package - Consolidated imports only

from .attempts import AttemptLedger, MAX_ATTEMPTS
from .catalog import CatalogService, ProductSnapshot
from .fanout import NegotiationOutcome, NotificationFanout
from .identity import IdentityDirectory
from .negotiation import NegotiationResolver, NegotiationResult
from .negotiation_store import NegotiationStore, ShopNegotiationView
from .pricing import evaluate_proposal
from .websockets import ConnectionManager

__all__ = [
    "AttemptLedger",
    "MAX_ATTEMPTS",
    "CatalogService",
    "ProductSnapshot",
    "NegotiationOutcome",
    "NotificationFanout",
    "IdentityDirectory",
    "NegotiationResolver",
    "NegotiationResult",
    "NegotiationStore",
    "ShopNegotiationView",
    "evaluate_proposal",
    "ConnectionManager",
]
