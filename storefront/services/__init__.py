"""
Business logic services.
Pure calculators (pricing, loyalty, lifecycle, cart) plus the database-backed services built on them.
"""

from .loyalty_service import LoyaltyService
from .menu_service import MenuService
from .order_service import OrderService
from .social_service import FavoriteService, ReviewService

__all__ = [
    "FavoriteService",
    "LoyaltyService",
    "MenuService",
    "OrderService",
    "ReviewService",
]
