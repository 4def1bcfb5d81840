"""
Referral Service Layer

Immutable referrer links, per-referrer purchase counters, payment-safe rewards.
"""

from app.services.referrals.service import (
    apply_referral_reward,
    add_referral_entry,
    upsert_referral_entry,
    new_referral_entry,
    reward_percent,
    build_referral_link,
    ReferralRewardResult,
    ReferrerLink,
)

__all__ = [
    "apply_referral_reward",
    "add_referral_entry",
    "upsert_referral_entry",
    "new_referral_entry",
    "reward_percent",
    "build_referral_link",
    "ReferralRewardResult",
    "ReferrerLink",
]
