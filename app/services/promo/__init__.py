"""
Promo Service Package
"""

from app.services.promo.service import (
    get_blogger_promo_by_code,
    parse_promo_referrer_state,
    BloggerPromo,
    PromoReferrerState,
)

__all__ = [
    "get_blogger_promo_by_code",
    "parse_promo_referrer_state",
    "BloggerPromo",
    "PromoReferrerState",
]
