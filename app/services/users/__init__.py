"""
User Ledger Package
"""

from app.services.users.service import (
    get_user,
    get_user_by_nickname,
    ensure_user,
    normalize_nickname,
    row_to_user,
    TelegramUser,
    EnsureUserResult,
    ReferrerLink,
)
from app.services.users.exceptions import (
    UserServiceError,
    UserNotFoundError,
)

__all__ = [
    "get_user",
    "get_user_by_nickname",
    "ensure_user",
    "normalize_nickname",
    "row_to_user",
    "TelegramUser",
    "EnsureUserResult",
    "ReferrerLink",
    "UserServiceError",
    "UserNotFoundError",
]
