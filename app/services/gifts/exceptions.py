"""
Gift service domain exceptions.
"""


class GiftServiceError(Exception):
    """Base exception for gift service errors"""
    pass


class GiftNotFoundError(GiftServiceError):
    """Raised when a gift index is outside the user's current gift list"""

    def __init__(self, tg_id: str, gift_index: int):
        self.tg_id = tg_id
        self.gift_index = gift_index
        super().__init__(f"GIFT_NOT_FOUND tg_id={tg_id} index={gift_index}")


class SelfGiftError(GiftServiceError):
    """Raised when a user tries to gift a subscription to themselves"""
    pass
