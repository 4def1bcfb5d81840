"""
Gifts and promo codes.

Receiving side: list -> view -> activate (index based, re-read every time).
Giving side: pick a recipient (users_shared) -> method -> plan -> gift invoice.
The users_shared answer and the promo reply arrive as messages and are
handled in app/handlers/user/gifts.py.
"""
import logging
from typing import Dict, Optional

from app.handlers.callbacks.purchase import load_prices
from app.handlers.common.context import UpdateContext, callback_result
from app.handlers.common.keyboards import (
    get_gift_list_rows,
    get_gift_methods_rows,
    get_gift_plans_rows,
    get_gift_view_rows,
    get_gifts_menu_rows,
)
from app.handlers.common.screens import invoice_texts
from app.i18n import get_text as i18n_get_text
from app.i18n import months_word
from app.services.gifts.exceptions import GiftNotFoundError
from app.services.gifts.service import activate_gift, list_gifts
from app.services.payments.service import build_gift_invoice_payload
from app.services.subscriptions.service import get_subscription_price_by_months
from app.services.users.service import get_user
from app.utils.callback_data import GiftAction
from app.utils.date_utils import format_date

logger = logging.getLogger(__name__)

# request_id кнопки выбора получателя (KeyboardButtonRequestUsers)
GIFT_RECIPIENT_REQUEST_ID = 1


async def open_gifts_menu(ctx: UpdateContext) -> Dict:
    result = await ctx.transport.send_inline_keyboard(
        ctx.chat_id,
        i18n_get_text(ctx.language, "gift.menu_title"),
        get_gifts_menu_rows(ctx.language),
    )
    return callback_result(sent=result.ok)


async def _send_gift_list(ctx: UpdateContext) -> Dict:
    try:
        gifts = list_gifts(await get_user(ctx.tg_id))
    except Exception as e:
        logger.exception(f"GIFTS_LOAD_FAILED [tg_id={ctx.tg_id}, error={type(e).__name__}]")
        return callback_result(sent=False)

    if not gifts:
        result = await ctx.transport.send_text(ctx.chat_id, i18n_get_text(ctx.language, "gift.list_empty"))
    else:
        result = await ctx.transport.send_inline_keyboard(
            ctx.chat_id,
            i18n_get_text(ctx.language, "gift.list_title"),
            get_gift_list_rows(gifts, ctx.language),
        )
    return callback_result(sent=result.ok)


async def _send_gift_view(ctx: UpdateContext, gift_index: int) -> Dict:
    try:
        gifts = list_gifts(await get_user(ctx.tg_id))
    except Exception as e:
        logger.exception(f"GIFTS_LOAD_FAILED [tg_id={ctx.tg_id}, error={type(e).__name__}]")
        return callback_result(sent=False)

    if gift_index >= len(gifts):
        result = await ctx.transport.send_text(ctx.chat_id, i18n_get_text(ctx.language, "gift.not_found"))
        return callback_result(sent=result.ok)

    gift = gifts[gift_index]
    text = i18n_get_text(
        ctx.language,
        "gift.view",
        giver=gift.giver_name or i18n_get_text(ctx.language, "common.someone"),
        months=gift.months,
        months_word=months_word(ctx.language, gift.months),
        date=gift.granted_at or "-",
    )
    result = await ctx.transport.send_inline_keyboard(ctx.chat_id, text, get_gift_view_rows(gift_index, ctx.language))
    return callback_result(sent=result.ok)


async def _activate(ctx: UpdateContext, gift_index: int) -> Dict:
    try:
        activation = await activate_gift(ctx.tg_id, ctx.nickname, gift_index)
    except GiftNotFoundError:
        logger.info(f"GIFT_ACTIVATION_NOT_FOUND [tg_id={ctx.tg_id}, index={gift_index}]")
        result = await ctx.transport.send_text(ctx.chat_id, i18n_get_text(ctx.language, "gift.not_found"))
        return callback_result(sent=result.ok, gift_activated=False)
    except Exception as e:
        logger.exception(f"GIFT_ACTIVATION_FAILED [tg_id={ctx.tg_id}, index={gift_index}, error={type(e).__name__}]")
        result = await ctx.transport.send_text(ctx.chat_id, i18n_get_text(ctx.language, "gift.activate_failed"))
        return callback_result(sent=result.ok, gift_activated=False)

    result = await ctx.transport.send_text(
        ctx.chat_id,
        i18n_get_text(ctx.language, "gift.activated", date=format_date(activation.user.subscription_untill)),
    )
    return callback_result(sent=result.ok, gift_activated=True)


async def _send_recipient_picker(ctx: UpdateContext) -> Dict:
    result = await ctx.transport.send_user_picker(
        ctx.chat_id,
        i18n_get_text(ctx.language, "gift.pick_recipient"),
        i18n_get_text(ctx.language, "gift.pick_recipient_button"),
        GIFT_RECIPIENT_REQUEST_ID,
    )
    return callback_result(sent=result.ok)


async def _send_promo_prompt(ctx: UpdateContext) -> Dict:
    result = await ctx.transport.send_force_reply(ctx.chat_id, i18n_get_text(ctx.language, "gift.promo_prompt"))
    return callback_result(sent=result.ok)


async def _recipient_label(recipient_tg_id: str) -> str:
    try:
        recipient = await get_user(recipient_tg_id)
    except Exception:
        logger.warning(f"GIFT_RECIPIENT_LOOKUP_FAILED [recipient={recipient_tg_id}]")
        return recipient_tg_id
    if recipient is not None and recipient.tg_nickname:
        return f"@{recipient.tg_nickname}"
    return recipient_tg_id


async def send_gift_methods(ctx: UpdateContext, recipient_tg_id: str, recipient_label: Optional[str] = None) -> bool:
    result = await ctx.transport.send_inline_keyboard(
        ctx.chat_id,
        i18n_get_text(ctx.language, "gift.choose_method", recipient=recipient_label or recipient_tg_id),
        get_gift_methods_rows(recipient_tg_id, ctx.language),
    )
    return result.ok


async def _send_gift_plans(ctx: UpdateContext, recipient_tg_id: str) -> Dict:
    prices = await load_prices(ctx)
    if prices is None:
        result = await ctx.transport.send_text(ctx.chat_id, i18n_get_text(ctx.language, "buy.plans_load_failed"))
    elif not prices:
        result = await ctx.transport.send_text(ctx.chat_id, i18n_get_text(ctx.language, "buy.plans_unavailable"))
    else:
        result = await ctx.transport.send_inline_keyboard(
            ctx.chat_id,
            i18n_get_text(ctx.language, "gift.choose_plan"),
            get_gift_plans_rows(prices, recipient_tg_id, ctx.language),
        )
    return callback_result(sent=result.ok)


async def _send_gift_invoice(ctx: UpdateContext, months: int, recipient_tg_id: str) -> Dict:
    try:
        price = await get_subscription_price_by_months(months)
    except Exception as e:
        logger.exception(f"PLAN_LOAD_FAILED [tg_id={ctx.tg_id}, months={months}, error={type(e).__name__}]")
        await ctx.transport.send_text(ctx.chat_id, i18n_get_text(ctx.language, "buy.plan_load_failed"))
        return callback_result(invoice_sent=False)

    if price is None:
        await ctx.transport.send_text(ctx.chat_id, i18n_get_text(ctx.language, "buy.plan_unavailable"))
        return callback_result(invoice_sent=False)

    title, description = invoice_texts(months, ctx.language, recipient=await _recipient_label(recipient_tg_id))
    result = await ctx.transport.send_invoice(
        ctx.chat_id,
        title=title,
        description=description,
        payload=build_gift_invoice_payload(ctx.tg_id, recipient_tg_id, months),
        stars=price.stars,
    )
    if result.ok:
        logger.info(f"GIFT_INVOICE_SENT [tg_id={ctx.tg_id}, recipient={recipient_tg_id}, months={months}]")
    return callback_result(invoice_sent=result.ok)


async def handle_gift(ctx: UpdateContext, action: GiftAction) -> Dict:
    if action.kind == "my":
        return await _send_gift_list(ctx)
    if action.kind == "view":
        return await _send_gift_view(ctx, action.gift_index)
    if action.kind == "activate":
        return await _activate(ctx, action.gift_index)
    if action.kind == "give":
        return await _send_recipient_picker(ctx)
    if action.kind == "promo":
        return await _send_promo_prompt(ctx)

    # method / plan: получатель приходит из callback_data
    if action.recipient_tg_id == ctx.tg_id:
        result = await ctx.transport.send_text(ctx.chat_id, i18n_get_text(ctx.language, "gift.recipient_self"))
        return callback_result(sent=result.ok)

    if action.kind == "method":
        if action.method != "tg_stars":
            result = await ctx.transport.send_text(
                ctx.chat_id, i18n_get_text(ctx.language, "buy.method_not_implemented")
            )
            return callback_result(sent=result.ok)
        return await _send_gift_plans(ctx, action.recipient_tg_id)

    return await _send_gift_invoice(ctx, action.months, action.recipient_tg_id)
