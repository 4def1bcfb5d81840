"""
Blogger promo lookup (blogers_promo). Read-only.
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional

import database
from app.utils.security import MAX_PROMO_CODE_LENGTH

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PromoReferrerState:
    tg_id: str
    tg_nickname: Optional[str]


@dataclass(frozen=True)
class BloggerPromo:
    promocode: str
    bloger_name: str
    amount_of_discount: int
    state_for_reffered_by: Optional[PromoReferrerState] = None


def parse_promo_referrer_state(raw: Any) -> Optional[PromoReferrerState]:
    """{tgId, tgNickname} -> PromoReferrerState; anything else -> None"""
    raw = database.decode_jsonb(raw, None)
    if not isinstance(raw, dict):
        return None
    tg_id = raw.get("tgId")
    if not isinstance(tg_id, str) or not tg_id:
        return None
    nickname = raw.get("tgNickname")
    return PromoReferrerState(tg_id=tg_id, tg_nickname=nickname if isinstance(nickname, str) else None)


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


async def get_blogger_promo_by_code(code: Optional[str], conn: Optional[Any] = None) -> Optional[BloggerPromo]:
    """Case-insensitive exact match on the trimmed code; empty -> None."""
    normalized = (code or "").strip()
    if not normalized or len(normalized) > MAX_PROMO_CODE_LENGTH:
        return None

    async with database.connection(conn) as c:
        row = await c.fetchrow(
            """SELECT promocode, bloger_name, amount_of_discount, state_for_reffered_by
               FROM blogers_promo
               WHERE promocode ILIKE $1
               LIMIT 1""",
            _escape_like(normalized),
        )
    if row is None:
        return None

    return BloggerPromo(
        promocode=row["promocode"],
        bloger_name=row["bloger_name"],
        amount_of_discount=int(row["amount_of_discount"]),
        state_for_reffered_by=parse_promo_referrer_state(row["state_for_reffered_by"]),
    )
