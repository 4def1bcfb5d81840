"""
/start, /menu, /clear
"""
import asyncio
import logging
from typing import Dict, List, Optional

import config
from app.handlers.common.context import UpdateContext, not_processed, processed
from app.handlers.common.keyboards import get_main_menu_rows
from app.i18n import get_text as i18n_get_text
from app.services.referrals.service import ReferrerLink
from app.services.subscriptions.service import map_user_to_menu_status
from app.services.users.service import ensure_user, get_user
from app.utils.date_utils import format_date, today_utc
from app.utils.security import ParsedCommand, log_security_warning

logger = logging.getLogger(__name__)

# параллельных deleteMessage при /clear
CLEAR_DELETE_CONCURRENCY = 10


def _clear_candidates(owned_ids: List[int], command_message_id: Optional[int], window: int) -> List[int]:
    """
    Tracked outbound ids plus a sweep of `window` ids at and below the
    /clear message itself. Newest first, no duplicates.
    """
    candidates = set(owned_ids)
    if command_message_id is not None:
        lowest = max(1, command_message_id - window)
        candidates.update(range(lowest, command_message_id + 1))
    return sorted(candidates, reverse=True)


async def handle_clear(ctx: UpdateContext) -> Dict:
    owned = ctx.registry.pop_all(ctx.chat_id)
    candidates = _clear_candidates(owned, ctx.message_id, config.CLEAR_SWEEP_WINDOW)

    semaphore = asyncio.Semaphore(CLEAR_DELETE_CONCURRENCY)

    async def _delete(message_id: int) -> bool:
        async with semaphore:
            result = await ctx.transport.delete_message(ctx.chat_id, message_id)
            return result.ok

    outcomes = await asyncio.gather(*(_delete(message_id) for message_id in candidates))
    deleted = sum(1 for ok in outcomes if ok)
    logger.info(
        f"CHAT_HISTORY_CLEARED [chat_id={ctx.chat_id}, tracked={len(owned)}, "
        f"attempted={len(candidates)}, deleted={deleted}]"
    )
    return processed(
        command="/clear",
        history_cleared=True,
        attempted_count=len(candidates),
        deleted_count=deleted,
        failed_count=len(candidates) - deleted,
    )


async def _resolve_referrer(ctx: UpdateContext, referrer_tg_id: Optional[str]) -> Optional[ReferrerLink]:
    if referrer_tg_id is None:
        return None
    if referrer_tg_id == ctx.tg_id:
        log_security_warning("REFERRAL_SELF_LINK", telegram_id=ctx.tg_id)
        return None
    try:
        referrer = await get_user(referrer_tg_id)
    except Exception as e:
        logger.error(f"REFERRER_LOOKUP_FAILED [tg_id={ctx.tg_id}, referrer={referrer_tg_id}, error={type(e).__name__}]")
        return None
    if referrer is None:
        logger.info(f"REFERRER_NOT_FOUND [tg_id={ctx.tg_id}, referrer={referrer_tg_id}]")
        return None
    return ReferrerLink(
        tg_id=referrer.tg_id,
        tg_nickname=referrer.tg_nickname,
        refer_date=format_date(today_utc()),
    )


async def handle_start_or_menu(ctx: UpdateContext, command: ParsedCommand) -> Dict:
    referrer = None
    if command.command == "/start":
        referrer = await _resolve_referrer(ctx, command.referrer_tg_id)

    try:
        ensured = await ensure_user(ctx.tg_id, ctx.nickname, referred_by=referrer)
    except Exception as e:
        logger.exception(f"USER_SYNC_FAILED [tg_id={ctx.tg_id}, error={type(e).__name__}]")
        return not_processed("Failed to sync user profile.")

    if command.command == "/menu":
        text = i18n_get_text(ctx.language, "menu.title")
    elif ensured.created:
        text = i18n_get_text(ctx.language, "start.welcome_new", days=config.TRIAL_DAYS)
    else:
        text = i18n_get_text(ctx.language, "start.welcome_back")

    rows = get_main_menu_rows(map_user_to_menu_status(ensured.user), ctx.language)
    result = await ctx.transport.send_inline_keyboard(ctx.chat_id, text, rows)
    return processed(command=command.command, sent=result.ok)
