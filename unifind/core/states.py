"""
Status and Enum Definitions

Defines the item and claim lifecycles plus the small enums shared by the
models, the stores and the API.
"""
from enum import Enum


class ItemStatus(str, Enum):
    """
    Enum representing the possible states of a lost-and-found item.

    Standard Flow: FOUND -> CLAIMED -> ARCHIVED
    Lost reports: LOST -> ARCHIVED
    """
    LOST = "LOST"
    FOUND = "FOUND"
    CLAIMED = "CLAIMED"
    ARCHIVED = "ARCHIVED"


class ClaimStatus(str, Enum):
    """Claim lifecycle: PENDING -> APPROVED | REJECTED."""
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class ItemCategory(str, Enum):
    ID_CARD = "ID_CARD"
    KEYS = "KEYS"
    LAPTOP = "LAPTOP"
    HEADPHONES = "HEADPHONES"
    BOOK = "BOOK"
    BAG = "BAG"
    PHONE = "PHONE"
    OTHER = "OTHER"


class Role(str, Enum):
    STUDENT = "STUDENT"
    ADMIN = "ADMIN"
