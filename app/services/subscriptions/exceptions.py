"""
Subscription service domain exceptions.
"""


class SubscriptionServiceError(Exception):
    """Base exception for subscription service errors"""
    pass


class PlanNotFoundError(SubscriptionServiceError):
    """Raised when no price row exists for the requested duration"""
    pass


class InsufficientBalanceError(SubscriptionServiceError):
    """Raised when the referral balance does not cover a prolongation"""

    def __init__(self, tg_id: str, required, available=None):
        self.tg_id = tg_id
        self.required = required
        self.available = available
        super().__init__(
            f"INSUFFICIENT_REFERRAL_BALANCE tg_id={tg_id} required={required} available={available}"
        )
