"""
Referral Service - referral list and reward accounting

Rules:
- referred_by is IMMUTABLE (set once at user creation, never self)
- The referrer keeps one entry per invited identity in users.referals
- Reward: 20% of the validated catalog price for the invited user's first
  purchase, 10% for every later one (keyed on the entry's purchase counter)
- A processed payment pays at most one reward (telegram_payments.referral_rewarded)

All functions are pure business logic - no aiogram imports, no Telegram calls.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

import config
import database
from app.utils.money import MoneyLike, percent_of, to_money

logger = logging.getLogger(__name__)


@dataclass
class ReferrerLink:
    """Backlink to the identity that invited the user (users.referred_by)."""
    tg_id: str
    tg_nickname: Optional[str]
    refer_date: str

    def to_json(self) -> Dict[str, Any]:
        return {
            "tg_id": self.tg_id,
            "tg_nickname": self.tg_nickname,
            "refer_date": self.refer_date,
        }

    @classmethod
    def from_json(cls, raw: Any) -> Optional["ReferrerLink"]:
        if not isinstance(raw, dict):
            return None
        tg_id = raw.get("tg_id") or raw.get("tgId")
        if not tg_id:
            return None
        return cls(
            tg_id=str(tg_id),
            tg_nickname=raw.get("tg_nickname") or raw.get("tgNickname"),
            refer_date=str(raw.get("refer_date") or raw.get("referDate") or ""),
        )


@dataclass
class ReferralRewardResult:
    applied: bool
    referrer_tg_id: Optional[str] = None
    reward_amount: Decimal = Decimal("0.00")
    reward_percent: int = 0
    purchase_count: int = 0
    reason: Optional[str] = None


def reward_percent(previous_purchases: int) -> int:
    """20% за первую оплату приглашённого, 10% за каждую следующую"""
    if previous_purchases <= 0:
        return config.REFERRAL_FIRST_PURCHASE_PERCENT
    return config.REFERRAL_REPEAT_PURCHASE_PERCENT


def build_referral_link(tg_id: str, bot_username: Optional[str] = None) -> Optional[str]:
    username = (bot_username if bot_username is not None else config.BOT_USERNAME).lstrip("@")
    if not username:
        return None
    return f"https://t.me/{username}?start=ref_{tg_id}"


def new_referral_entry(tg_id: str, nickname: Optional[str]) -> Dict[str, Any]:
    return {
        "tg_id": str(tg_id),
        "login": nickname,
        "nickname": nickname,
        "purchases": 0,
    }


def upsert_referral_entry(
    entries: List[Dict[str, Any]],
    payer_tg_id: str,
    payer_nickname: Optional[str],
) -> Tuple[List[Dict[str, Any]], int]:
    """
    Increment the payer's purchase counter in a referral list.

    The entry is matched by identity (exact string) and created when missing;
    display fields are refreshed when a nickname is known.

    Returns:
        (new list, purchase count BEFORE this purchase)
    """
    payer_tg_id = str(payer_tg_id)
    updated = []
    previous = None
    for entry in entries:
        if previous is None and isinstance(entry, dict) and str(entry.get("tg_id")) == payer_tg_id:
            previous = int(entry.get("purchases") or 0)
            entry = dict(entry)
            entry["purchases"] = previous + 1
            if payer_nickname:
                entry["login"] = payer_nickname
                entry["nickname"] = payer_nickname
        updated.append(entry)

    if previous is None:
        previous = 0
        entry = new_referral_entry(payer_tg_id, payer_nickname)
        entry["purchases"] = 1
        updated.append(entry)

    return updated, previous


async def add_referral_entry(
    conn: Any,
    referrer_tg_id: str,
    referred_tg_id: str,
    referred_nickname: Optional[str],
) -> bool:
    """
    Append a freshly created identity to its referrer's list.

    Conditional on the identity not being listed yet, so the counter and the
    list never diverge.

    Returns:
        True if the entry was appended
    """
    row = await conn.fetchrow(
        """UPDATE users
           SET referals = referals || $2::jsonb,
               number_of_referals = number_of_referals + 1,
               updated_at = NOW()
           WHERE tg_id = $1 AND NOT (referals @> $3::jsonb)
           RETURNING tg_id""",
        str(referrer_tg_id),
        [new_referral_entry(referred_tg_id, referred_nickname)],
        [{"tg_id": str(referred_tg_id)}],
    )
    if row is not None:
        logger.info(f"REFERRAL_REGISTERED [referrer={referrer_tg_id}, referred={referred_tg_id}]")
    return row is not None


async def apply_referral_reward(
    payer_tg_id: str,
    payer_nickname: Optional[str],
    purchase_amount: MoneyLike,
    charge_id: Optional[str] = None,
    conn: Optional[Any] = None,
) -> ReferralRewardResult:
    """
    Credit the payer's referrer for one validated purchase.

    No-op without a referrer or for a self link. When charge_id is given the
    reward is claimed on the processed-payment row first, so a redelivered
    payment never pays twice.
    """
    payer_tg_id = str(payer_tg_id)
    amount = to_money(purchase_amount)
    if amount < 0:
        raise ValueError("purchase_amount must be non-negative")

    async with database.connection(conn) as c:
        async with c.transaction():
            payer = await c.fetchrow("SELECT tg_id, referred_by FROM users WHERE tg_id = $1", payer_tg_id)
            if payer is None:
                return ReferralRewardResult(applied=False, reason="payer_not_found")

            link = ReferrerLink.from_json(database.decode_jsonb(payer["referred_by"], None))
            if link is None:
                return ReferralRewardResult(applied=False, reason="no_referrer")
            if link.tg_id == payer_tg_id:
                logger.warning(f"REFERRAL_SELF_LINK_IGNORED [tg_id={payer_tg_id}]")
                return ReferralRewardResult(applied=False, reason="self_referral")

            referrer = await c.fetchrow(
                "SELECT tg_id, referals FROM users WHERE tg_id = $1 FOR UPDATE",
                link.tg_id,
            )
            if referrer is None:
                logger.warning(f"REFERRAL_REFERRER_NOT_FOUND [payer={payer_tg_id}, referrer={link.tg_id}]")
                return ReferralRewardResult(
                    applied=False, referrer_tg_id=link.tg_id, reason="referrer_not_found"
                )

            if charge_id is not None and not await database.claim_payment_referral_reward(c, charge_id):
                logger.info(f"REFERRAL_REWARD_ALREADY_CLAIMED [charge_id={charge_id}]")
                return ReferralRewardResult(
                    applied=False, referrer_tg_id=link.tg_id, reason="already_rewarded"
                )

            entries, previous = upsert_referral_entry(
                list(database.decode_jsonb(referrer["referals"], [])),
                payer_tg_id,
                payer_nickname,
            )
            percent = reward_percent(previous)
            reward = percent_of(amount, percent)

            await c.execute(
                """UPDATE users
                   SET earned_money = earned_money + $2,
                       referals = $3::jsonb,
                       updated_at = NOW()
                   WHERE tg_id = $1""",
                link.tg_id,
                reward,
                entries,
            )

    logger.info(
        f"REFERRAL_REWARD_APPLIED [referrer={link.tg_id}, payer={payer_tg_id}, "
        f"amount={amount}, percent={percent}, reward={reward}, purchases={previous + 1}]"
    )
    return ReferralRewardResult(
        applied=True,
        referrer_tg_id=link.tg_id,
        reward_amount=reward,
        reward_percent=percent,
        purchase_count=previous + 1,
    )
