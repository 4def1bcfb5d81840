"""
User Ledger - identity records

One row per Telegram identity. Creation grants the trial and fixes the
referrer link forever; later calls only refresh the nickname.

All functions are pure business logic - no aiogram imports, no Telegram calls.
Every function accepts an optional conn so callers can share one transaction.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional

import config
import database
from app.services.referrals.service import ReferrerLink, add_referral_entry
from app.services.users.exceptions import UserNotFoundError
from app.utils.date_utils import add_days, format_date, parse_date, today_utc
from app.utils.money import to_money

logger = logging.getLogger(__name__)


@dataclass
class TelegramUser:
    internal_uuid: str
    tg_id: str
    tg_nickname: Optional[str]
    subscription_active: bool
    subscription_status: Optional[str]  # None | "live" | "ending"
    subscription_untill: Optional[date]
    earned_money: Decimal
    number_of_referals: int = 0
    referals: List[Dict[str, Any]] = field(default_factory=list)
    referred_by: Optional[ReferrerLink] = None
    gifts: List[Dict[str, Any]] = field(default_factory=list)
    traffic_consumed_mb: float = 0.0
    number_of_connections: int = 0
    number_of_connections_last_month: int = 0


@dataclass
class EnsureUserResult:
    user: TelegramUser
    created: bool


def row_to_user(row: Any) -> TelegramUser:
    data = dict(row)
    return TelegramUser(
        internal_uuid=str(data.get("internal_uuid")),
        tg_id=str(data["tg_id"]),
        tg_nickname=data.get("tg_nickname"),
        subscription_active=bool(data.get("subscription_active")),
        subscription_status=data.get("subscription_status"),
        subscription_untill=parse_date(data.get("subscription_untill")),
        earned_money=to_money(data.get("earned_money") or 0),
        number_of_referals=int(data.get("number_of_referals") or 0),
        referals=list(database.decode_jsonb(data.get("referals"), [])),
        referred_by=ReferrerLink.from_json(database.decode_jsonb(data.get("referred_by"), None)),
        gifts=list(database.decode_jsonb(data.get("gifts"), [])),
        traffic_consumed_mb=float(data.get("traffic_consumed_mb") or 0),
        number_of_connections=int(data.get("number_of_connections") or 0),
        number_of_connections_last_month=int(data.get("number_of_connections_last_month") or 0),
    )


def normalize_nickname(nickname: Optional[str]) -> Optional[str]:
    if nickname is None:
        return None
    normalized = nickname.strip().lstrip("@").strip()
    return normalized or None


async def get_user(tg_id: str, conn: Optional[Any] = None) -> Optional[TelegramUser]:
    async with database.connection(conn) as c:
        row = await c.fetchrow("SELECT * FROM users WHERE tg_id = $1", str(tg_id))
    return row_to_user(row) if row else None


async def get_user_by_nickname(nickname: Optional[str], conn: Optional[Any] = None) -> Optional[TelegramUser]:
    """Case-insensitive lookup, leading "@" stripped."""
    normalized = normalize_nickname(nickname)
    if normalized is None:
        return None
    async with database.connection(conn) as c:
        row = await c.fetchrow(
            "SELECT * FROM users WHERE LOWER(tg_nickname) = LOWER($1) ORDER BY created_at LIMIT 1",
            normalized,
        )
    return row_to_user(row) if row else None


async def ensure_user(
    tg_id: str,
    nickname: Optional[str],
    referred_by: Optional[ReferrerLink] = None,
    conn: Optional[Any] = None,
) -> EnsureUserResult:
    """
    Idempotent get-or-create.

    On create: 3-day trial ("ending"), referred_by stored (never a self link)
    and the new identity appended to the referrer's list.
    On conflict (concurrent create) the row is re-read, created=False.
    On an existing user the nickname is refreshed when it changed;
    referred_by is never applied retroactively.
    """
    tg_id = str(tg_id)
    nickname = normalize_nickname(nickname)

    if referred_by is not None and referred_by.tg_id == tg_id:
        logger.warning(f"REFERRAL_SELF_ATTEMPT [tg_id={tg_id}]")
        referred_by = None

    async with database.connection(conn) as c:
        async with c.transaction():
            trial_until = add_days(today_utc(), config.TRIAL_DAYS)
            row = await c.fetchrow(
                """INSERT INTO users
                       (tg_id, tg_nickname, subscription_active, subscription_status,
                        subscription_untill, referred_by)
                   VALUES ($1, $2, TRUE, 'ending', $3, $4::jsonb)
                   ON CONFLICT (tg_id) DO NOTHING
                   RETURNING *""",
                tg_id,
                nickname,
                trial_until,
                referred_by.to_json() if referred_by else None,
            )

            if row is not None:
                if referred_by is not None:
                    await add_referral_entry(c, referred_by.tg_id, tg_id, nickname)
                logger.info(
                    f"USER_CREATED [tg_id={tg_id}, trial_until={format_date(trial_until)}, "
                    f"referrer={referred_by.tg_id if referred_by else None}]"
                )
                return EnsureUserResult(user=row_to_user(row), created=True)

            existing = await c.fetchrow("SELECT * FROM users WHERE tg_id = $1", tg_id)
            if existing is None:
                raise UserNotFoundError(f"User {tg_id} disappeared after insert conflict")

            if nickname is not None and nickname != existing["tg_nickname"]:
                existing = await c.fetchrow(
                    """UPDATE users SET tg_nickname = $2, updated_at = NOW()
                       WHERE tg_id = $1
                       RETURNING *""",
                    tg_id,
                    nickname,
                )
                logger.debug(f"USER_NICKNAME_REFRESHED [tg_id={tg_id}]")

            return EnsureUserResult(user=row_to_user(existing), created=False)
