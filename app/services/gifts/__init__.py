"""
Gift Service Package
"""

from app.services.gifts.service import (
    add_gift,
    activate_gift,
    list_gifts,
    Gift,
    GiftActivationResult,
)
from app.services.gifts.exceptions import (
    GiftServiceError,
    GiftNotFoundError,
    SelfGiftError,
)

__all__ = [
    "add_gift",
    "activate_gift",
    "list_gifts",
    "Gift",
    "GiftActivationResult",
    "GiftServiceError",
    "GiftNotFoundError",
    "SelfGiftError",
]
