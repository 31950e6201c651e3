# Models package - Consolidated imports only
from .user import User
from .shop import Shop
from .product import Product
from .negotiation import Negotiation, NegotiationStatus

__all__ = [
    "User",
    "Shop",
    "Product",
    "Negotiation",
    "NegotiationStatus",
]
