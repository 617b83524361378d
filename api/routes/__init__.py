"""API routes package"""

from . import auth, food_items, health, locations, receipts, views

__all__ = ["auth", "food_items", "health", "locations", "receipts", "views"]
