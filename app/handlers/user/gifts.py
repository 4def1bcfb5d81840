"""
Gift flow steps that arrive as plain messages: the recipient chosen with the
user picker (users_shared) and a reply to the promo code prompt.
"""
import logging
from typing import Dict, Optional

from aiogram.types import Message, UsersShared

from app.handlers.callbacks.gifts import GIFT_RECIPIENT_REQUEST_ID, send_gift_methods
from app.handlers.common.context import UpdateContext, not_processed, processed
from app.i18n import LANGUAGES
from app.i18n import get_text as i18n_get_text
from app.services.promo.service import get_blogger_promo_by_code
from app.utils.security import is_valid_tg_id

logger = logging.getLogger(__name__)

PROMO_PROMPT_KEY = "gift.promo_prompt"


def shared_user_id(users_shared: UsersShared) -> Optional[str]:
    """First shared user id; older Bot API payloads carry only user_ids."""
    users = getattr(users_shared, "users", None) or []
    if users:
        return str(users[0].user_id)
    user_ids = getattr(users_shared, "user_ids", None) or []
    if user_ids:
        return str(user_ids[0])
    return None


def is_promo_reply(message: Message) -> bool:
    reply_to = message.reply_to_message
    if reply_to is None or not reply_to.text or not message.text:
        return False
    return any(reply_to.text == strings.get(PROMO_PROMPT_KEY) for strings in LANGUAGES.values())


async def handle_users_shared(ctx: UpdateContext, users_shared: UsersShared) -> Dict:
    if users_shared.request_id != GIFT_RECIPIENT_REQUEST_ID:
        return not_processed("Unknown users_shared request.")

    recipient_tg_id = shared_user_id(users_shared)
    if recipient_tg_id is None or not is_valid_tg_id(recipient_tg_id):
        return not_processed("Shared user is missing.")

    if recipient_tg_id == ctx.tg_id:
        result = await ctx.transport.send_text(
            ctx.chat_id, i18n_get_text(ctx.language, "gift.recipient_self"), remove_keyboard=True
        )
        return processed(gift_recipient_selected=False, sent=result.ok)

    shared = users_shared.users[0] if getattr(users_shared, "users", None) else None
    label = f"@{shared.username}" if shared is not None and shared.username else None

    # убрать reply-клавиатуру выбора получателя
    await ctx.transport.send_text(
        ctx.chat_id,
        i18n_get_text(ctx.language, "gift.recipient_selected"),
        remove_keyboard=True,
    )
    sent = await send_gift_methods(ctx, recipient_tg_id, recipient_label=label)
    logger.info(f"GIFT_RECIPIENT_SELECTED [tg_id={ctx.tg_id}, recipient={recipient_tg_id}]")
    return processed(gift_recipient_selected=True, sent=sent)


async def handle_promo_reply(ctx: UpdateContext, code: str) -> Dict:
    try:
        promo = await get_blogger_promo_by_code(code)
    except Exception as e:
        logger.exception(f"PROMO_LOOKUP_FAILED [tg_id={ctx.tg_id}, error={type(e).__name__}]")
        result = await ctx.transport.send_text(ctx.chat_id, i18n_get_text(ctx.language, "gift.promo_failed"))
        return processed(promo_found=False, sent=result.ok)

    if promo is None:
        result = await ctx.transport.send_text(ctx.chat_id, i18n_get_text(ctx.language, "gift.promo_not_found"))
        return processed(promo_found=False, sent=result.ok)

    logger.info(f"PROMO_FOUND [tg_id={ctx.tg_id}, promocode={promo.promocode}]")
    result = await ctx.transport.send_text(
        ctx.chat_id,
        i18n_get_text(
            ctx.language,
            "gift.promo_found",
            code=promo.promocode,
            bloger=promo.bloger_name,
            discount=promo.amount_of_discount,
        ),
    )
    return processed(promo_found=True, sent=result.ok)
