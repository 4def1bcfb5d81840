from .pre_checkout import handle_pre_checkout
from .successful_payment import handle_successful_payment

__all__ = ["handle_pre_checkout", "handle_successful_payment"]
