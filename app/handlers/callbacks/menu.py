"""
Main menu sections.

Sections with their own flow are delegated to the domain modules; the rest
edit the menu message in place.
"""
import logging
from typing import Dict

from app.handlers.callbacks.countries import open_countries
from app.handlers.callbacks.faq import open_faq
from app.handlers.callbacks.gifts import open_gifts_menu
from app.handlers.callbacks.howto import open_platforms
from app.handlers.callbacks.referrals import open_referrals
from app.handlers.common.context import UpdateContext, callback_result
from app.handlers.common.keyboards import get_main_menu_rows, get_subscription_status_rows
from app.handlers.common.screens import subscription_status_text
from app.i18n import get_text as i18n_get_text
from app.services.subscriptions.service import (
    MENU_STATUS_UNKNOWN,
    is_subscription_missing,
    map_user_to_menu_status,
)
from app.services.users.service import get_user
from app.utils.callback_data import MenuAction

logger = logging.getLogger(__name__)


async def open_subscription_status(ctx: UpdateContext) -> Dict:
    try:
        user = await get_user(ctx.tg_id)
    except Exception as e:
        logger.exception(f"SUBSCRIPTION_STATUS_FAILED [tg_id={ctx.tg_id}, error={type(e).__name__}]")
        return callback_result(sent=False)

    missing = is_subscription_missing(user)
    text = i18n_get_text(ctx.language, "status.missing") if missing else subscription_status_text(user, ctx.language)
    result = await ctx.transport.send_inline_keyboard(
        ctx.chat_id, text, get_subscription_status_rows(missing, ctx.language)
    )
    return callback_result(sent=result.ok)


async def _edit_section(ctx: UpdateContext, key: str) -> Dict:
    if ctx.message_id is None:
        return callback_result(handled=False)

    try:
        status = map_user_to_menu_status(await get_user(ctx.tg_id))
    except Exception as e:
        logger.warning(f"MENU_STATUS_LOOKUP_FAILED [tg_id={ctx.tg_id}, error={type(e).__name__}]")
        status = MENU_STATUS_UNKNOWN

    result = await ctx.transport.edit_message_text(
        ctx.chat_id,
        ctx.message_id,
        i18n_get_text(ctx.language, f"menu.section.{key}"),
        rows=get_main_menu_rows(status, ctx.language),
    )
    return callback_result(edited=result.ok)


_SECTION_OPENERS = {
    "subscription_status": open_subscription_status,
    "how_to_use": open_platforms,
    "faq": open_faq,
    "referals": open_referrals,
    "gifts": open_gifts_menu,
    "countries": open_countries,
}


async def handle_menu(ctx: UpdateContext, action: MenuAction) -> Dict:
    opener = _SECTION_OPENERS.get(action.key)
    if opener is not None:
        return await opener(ctx)
    return await _edit_section(ctx, action.key)
