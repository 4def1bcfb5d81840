"""
Subscription Service Package
"""

from app.services.subscriptions.service import (
    list_subscription_prices,
    get_subscription_price_by_months,
    calculate_new_expiry,
    map_user_to_menu_status,
    has_access_to_servers,
    is_subscription_missing,
    activate_subscription,
    activate_subscription_from_balance,
    SubscriptionPrice,
    MENU_STATUSES,
)
from app.services.subscriptions.exceptions import (
    SubscriptionServiceError,
    PlanNotFoundError,
    InsufficientBalanceError,
)

__all__ = [
    "list_subscription_prices",
    "get_subscription_price_by_months",
    "calculate_new_expiry",
    "map_user_to_menu_status",
    "has_access_to_servers",
    "is_subscription_missing",
    "activate_subscription",
    "activate_subscription_from_balance",
    "SubscriptionPrice",
    "MENU_STATUSES",
    "SubscriptionServiceError",
    "PlanNotFoundError",
    "InsufficientBalanceError",
]
