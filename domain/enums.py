"""
Domain enums for FreshTrack.
Contains all enumeration types used across the domain models.
"""

import enum


class LocationType(str, enum.Enum):
    """Kinds of storage location"""

    HOME = "home"
    OFFICE = "office"
    STORAGE = "storage"
    OTHER = "other"


class Unit(str, enum.Enum):
    """Units a food item quantity can be counted in"""

    PIECES = "pieces"
    GRAMS = "g"
    KILOGRAMS = "kg"
    MILLILITRES = "ml"
    LITRES = "l"


class FreshnessTier(str, enum.Enum):
    """Freshness tier derived from days until expiry"""

    EXPIRED = "expired"
    CRITICAL = "critical"
    WARNING = "warning"
    GOOD = "good"
