"""
Gift Service - pending gifted subscriptions

users.gifts is an ordered jsonb list addressed by position. Activating a gift
removes its index, so every later gift shifts down by one: callers must re-read
the list before reusing an index.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import database
from app.services.gifts.exceptions import GiftNotFoundError, SelfGiftError
from app.services.referrals.service import ReferrerLink
from app.services.subscriptions.service import calculate_new_expiry
from app.services.users.service import TelegramUser, ensure_user, row_to_user
from app.utils.date_utils import format_date, today_utc

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Gift:
    giver_tg_id: str
    giver_name: Optional[str]
    months: int
    granted_at: Optional[str]

    def to_json(self) -> Dict[str, Any]:
        return {
            "giver_tg_id": self.giver_tg_id,
            "giver_name": self.giver_name,
            "months": self.months,
            "granted_at": self.granted_at,
        }

    @classmethod
    def from_json(cls, raw: Dict[str, Any]) -> "Gift":
        return cls(
            giver_tg_id=str(raw.get("giver_tg_id") or raw.get("giverTgId") or ""),
            giver_name=raw.get("giver_name") or raw.get("giverName"),
            months=int(raw.get("months") or 0),
            granted_at=raw.get("granted_at") or raw.get("grantedAt"),
        )


@dataclass
class GiftActivationResult:
    gift: Gift
    user: TelegramUser


def list_gifts(user: Optional[TelegramUser]) -> List[Gift]:
    if user is None:
        return []
    return [Gift.from_json(raw) for raw in user.gifts if isinstance(raw, dict)]


async def add_gift(
    recipient_tg_id: str,
    recipient_nickname: Optional[str],
    giver_tg_id: str,
    giver_name: Optional[str],
    months: int,
    referred_by_on_create: Optional[ReferrerLink] = None,
    conn: Optional[Any] = None,
) -> TelegramUser:
    """
    Append a gift to the recipient's list, creating the recipient if needed.

    referred_by_on_create only applies when the recipient row is created here.
    """
    recipient_tg_id = str(recipient_tg_id)
    giver_tg_id = str(giver_tg_id)
    if months <= 0:
        raise ValueError("months must be positive")
    if recipient_tg_id == giver_tg_id:
        raise SelfGiftError(f"GIFT_TO_SELF tg_id={giver_tg_id}")

    gift = Gift(
        giver_tg_id=giver_tg_id,
        giver_name=giver_name,
        months=months,
        granted_at=format_date(today_utc()),
    )

    async with database.connection(conn) as c:
        async with c.transaction():
            await ensure_user(recipient_tg_id, recipient_nickname, referred_by=referred_by_on_create, conn=c)
            row = await c.fetchrow(
                """UPDATE users
                   SET gifts = gifts || $2::jsonb,
                       updated_at = NOW()
                   WHERE tg_id = $1
                   RETURNING *""",
                recipient_tg_id,
                [gift.to_json()],
            )

    logger.info(f"GIFT_ADDED [recipient={recipient_tg_id}, giver={giver_tg_id}, months={months}]")
    return row_to_user(row)


async def activate_gift(
    tg_id: str,
    nickname: Optional[str],
    gift_index: int,
    conn: Optional[Any] = None,
) -> GiftActivationResult:
    """
    Activate gifts[gift_index]: extend the subscription and drop the index
    in the same UPDATE, under the row lock.

    Raises:
        GiftNotFoundError: index outside the CURRENT list
    """
    tg_id = str(tg_id)

    async with database.connection(conn) as c:
        async with c.transaction():
            current = await c.fetchrow(
                "SELECT gifts, subscription_untill FROM users WHERE tg_id = $1 FOR UPDATE",
                tg_id,
            )
            if current is None:
                raise GiftNotFoundError(tg_id, gift_index)

            gifts = list(database.decode_jsonb(current["gifts"], []))
            if gift_index < 0 or gift_index >= len(gifts):
                raise GiftNotFoundError(tg_id, gift_index)

            gift = Gift.from_json(gifts[gift_index])
            if gift.months <= 0:
                raise GiftNotFoundError(tg_id, gift_index)

            remaining = gifts[:gift_index] + gifts[gift_index + 1:]
            new_until = calculate_new_expiry(current["subscription_untill"], gift.months)
            row = await c.fetchrow(
                """UPDATE users
                   SET gifts = $2::jsonb,
                       subscription_active = TRUE,
                       subscription_status = 'live',
                       subscription_untill = $3,
                       tg_nickname = COALESCE($4, tg_nickname),
                       updated_at = NOW()
                   WHERE tg_id = $1
                   RETURNING *""",
                tg_id,
                remaining,
                new_until,
                nickname,
            )

    logger.info(
        f"GIFT_ACTIVATED [tg_id={tg_id}, index={gift_index}, months={gift.months}, "
        f"until={format_date(new_until)}]"
    )
    return GiftActivationResult(gift=gift, user=row_to_user(row))
