"""
Subscription Service Layer

Pricing catalog (subscription_prices) and subscription lifetime:
- expiry is extended from max(today, current expiry) by calendar months
- paid activation sets status "live", active=True
- prolongation from referral balance debits and extends in ONE conditional
  UPDATE (earned_money >= amount), so two concurrent prolongations can never
  both pass a stale balance check

All functions are pure business logic - no aiogram imports or Telegram-specific types.
"""

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, List, Optional

import database
from app.services.subscriptions.exceptions import InsufficientBalanceError
from app.services.users.service import TelegramUser, ensure_user, row_to_user
from app.utils.date_utils import add_months, format_date, today_utc
from app.utils.money import MoneyLike, to_money

logger = logging.getLogger(__name__)

STATUS_LIVE = "live"
STATUS_ENDING = "ending"

# Статус для меню
MENU_STATUS_ACTIVE = "active"
MENU_STATUS_TRIAL = "trial"
MENU_STATUS_EXPIRED = "expired"
MENU_STATUS_UNKNOWN = "unknown"
MENU_STATUSES = (MENU_STATUS_ACTIVE, MENU_STATUS_TRIAL, MENU_STATUS_EXPIRED, MENU_STATUS_UNKNOWN)


# ====================================================================================
# Pricing Catalog
# ====================================================================================

@dataclass(frozen=True)
class SubscriptionPrice:
    months: int
    stars: int
    usdt: Decimal
    rubles: int


def _row_to_price(row: Any) -> SubscriptionPrice:
    usdt = to_money(row["usdt"])
    if usdt < 0:
        raise ValueError(f"Invalid usdt value in subscription_prices row (months={row['months']})")
    return SubscriptionPrice(
        months=int(row["months"]),
        stars=int(row["stars"]),
        usdt=usdt,
        rubles=int(row["rubles"]),
    )


async def list_subscription_prices(conn: Optional[Any] = None) -> List[SubscriptionPrice]:
    """All plans, ascending by duration."""
    async with database.connection(conn) as c:
        rows = await c.fetch(
            "SELECT months, stars, usdt, rubles FROM subscription_prices ORDER BY months ASC"
        )
    return [_row_to_price(row) for row in rows]


async def get_subscription_price_by_months(months: int, conn: Optional[Any] = None) -> Optional[SubscriptionPrice]:
    async with database.connection(conn) as c:
        row = await c.fetchrow(
            "SELECT months, stars, usdt, rubles FROM subscription_prices WHERE months = $1",
            int(months),
        )
    return _row_to_price(row) if row else None


# ====================================================================================
# Expiry arithmetic / status
# ====================================================================================

def calculate_new_expiry(current_until: Optional[date], months: int, today: Optional[date] = None) -> date:
    """
    New expiry = max(today, current_until) + months calendar months.

    A past expiry never carries over: renewing after a lapse starts from today.
    """
    if months <= 0:
        raise ValueError("months must be positive")
    today = today or today_utc()
    base = current_until if current_until is not None and current_until > today else today
    return add_months(base, months)


def map_user_to_menu_status(user: Optional[TelegramUser]) -> str:
    """live -> active, ending -> trial, flag only -> active, otherwise expired"""
    if user is None:
        return MENU_STATUS_UNKNOWN
    if user.subscription_status == STATUS_LIVE:
        return MENU_STATUS_ACTIVE
    if user.subscription_status == STATUS_ENDING:
        return MENU_STATUS_TRIAL
    if user.subscription_active:
        return MENU_STATUS_ACTIVE
    return MENU_STATUS_EXPIRED


def has_access_to_servers(user: Optional[TelegramUser], today: Optional[date] = None) -> bool:
    """
    Active flag or a live/ending phase, and the expiry (when set) not in the past.
    """
    if user is None:
        return False
    if not (user.subscription_active or user.subscription_status in (STATUS_LIVE, STATUS_ENDING)):
        return False
    if user.subscription_untill is not None and user.subscription_untill < (today or today_utc()):
        return False
    return True


def is_subscription_missing(user: Optional[TelegramUser]) -> bool:
    return user is None or (user.subscription_status is None and not user.subscription_active)


# ====================================================================================
# Activation
# ====================================================================================

async def activate_subscription(
    tg_id: str,
    nickname: Optional[str],
    months: int,
    conn: Optional[Any] = None,
) -> TelegramUser:
    """
    Paid activation: ensure the user, then extend under a row lock.
    """
    tg_id = str(tg_id)
    async with database.connection(conn) as c:
        async with c.transaction():
            await ensure_user(tg_id, nickname, conn=c)
            current = await c.fetchrow(
                "SELECT subscription_untill FROM users WHERE tg_id = $1 FOR UPDATE",
                tg_id,
            )
            new_until = calculate_new_expiry(current["subscription_untill"], months)
            row = await c.fetchrow(
                """UPDATE users
                   SET subscription_active = TRUE,
                       subscription_status = 'live',
                       subscription_untill = $2,
                       updated_at = NOW()
                   WHERE tg_id = $1
                   RETURNING *""",
                tg_id,
                new_until,
            )

    logger.info(f"SUBSCRIPTION_ACTIVATED [tg_id={tg_id}, months={months}, until={format_date(new_until)}]")
    return row_to_user(row)


async def activate_subscription_from_balance(
    tg_id: str,
    nickname: Optional[str],
    months: int,
    amount_usd: MoneyLike,
    conn: Optional[Any] = None,
) -> TelegramUser:
    """
    Prolong from referral balance.

    Either the balance drops by amount_usd and the expiry moves, or
    InsufficientBalanceError is raised and nothing changes.
    """
    tg_id = str(tg_id)
    amount = to_money(amount_usd)
    if amount < 0:
        raise ValueError("amount_usd must be non-negative")

    async with database.connection(conn) as c:
        async with c.transaction():
            await ensure_user(tg_id, nickname, conn=c)
            current = await c.fetchrow(
                "SELECT subscription_untill, earned_money FROM users WHERE tg_id = $1 FOR UPDATE",
                tg_id,
            )
            new_until = calculate_new_expiry(current["subscription_untill"], months)
            row = await c.fetchrow(
                """UPDATE users
                   SET earned_money = earned_money - $2,
                       subscription_active = TRUE,
                       subscription_status = 'live',
                       subscription_untill = $3,
                       updated_at = NOW()
                   WHERE tg_id = $1 AND earned_money >= $2
                   RETURNING *""",
                tg_id,
                amount,
                new_until,
            )
            if row is None:
                raise InsufficientBalanceError(tg_id, amount, to_money(current["earned_money"]))

    user = row_to_user(row)
    logger.info(
        f"SUBSCRIPTION_PROLONGED_FROM_BALANCE [tg_id={tg_id}, months={months}, "
        f"debited={amount}, balance={user.earned_money}, until={format_date(new_until)}]"
    )
    return user
