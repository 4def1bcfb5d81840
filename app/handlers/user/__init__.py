from .commands import handle_clear, handle_start_or_menu
from .gifts import handle_promo_reply, handle_users_shared, is_promo_reply

__all__ = [
    "handle_clear",
    "handle_start_or_menu",
    "handle_users_shared",
    "handle_promo_reply",
    "is_promo_reply",
]
