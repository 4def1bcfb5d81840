"""
Purchase flow: open -> method -> Stars plan list -> invoice.
"""
import logging
from typing import Dict, List, Optional

from app.handlers.common.context import UpdateContext, callback_result
from app.handlers.common.keyboards import get_payment_methods_rows, get_stars_plans_rows
from app.handlers.common.screens import invoice_texts
from app.i18n import get_text as i18n_get_text
from app.services.payments.service import build_subscription_invoice_payload
from app.services.subscriptions.service import (
    SubscriptionPrice,
    get_subscription_price_by_months,
    list_subscription_prices,
)
from app.utils.callback_data import PurchaseAction

logger = logging.getLogger(__name__)


async def load_prices(ctx: UpdateContext) -> Optional[List[SubscriptionPrice]]:
    """Catalog read; on failure the user is told and None is returned."""
    try:
        return await list_subscription_prices()
    except Exception as e:
        logger.exception(f"PRICES_LOAD_FAILED [tg_id={ctx.tg_id}, error={type(e).__name__}]")
        return None


async def send_payment_methods(ctx: UpdateContext, text_key: str = "buy.choose_method") -> bool:
    result = await ctx.transport.send_inline_keyboard(
        ctx.chat_id,
        i18n_get_text(ctx.language, text_key),
        get_payment_methods_rows(ctx.language),
    )
    return result.ok


async def send_stars_plans(ctx: UpdateContext) -> bool:
    prices = await load_prices(ctx)
    if prices is None:
        result = await ctx.transport.send_text(ctx.chat_id, i18n_get_text(ctx.language, "buy.plans_load_failed"))
    elif not prices:
        result = await ctx.transport.send_text(ctx.chat_id, i18n_get_text(ctx.language, "buy.plans_unavailable"))
    else:
        result = await ctx.transport.send_inline_keyboard(
            ctx.chat_id,
            i18n_get_text(ctx.language, "buy.choose_stars_plan"),
            get_stars_plans_rows(prices, ctx.language),
        )
    return result.ok


async def send_subscription_invoice(ctx: UpdateContext, months: int) -> bool:
    try:
        price = await get_subscription_price_by_months(months)
    except Exception as e:
        logger.exception(f"PLAN_LOAD_FAILED [tg_id={ctx.tg_id}, months={months}, error={type(e).__name__}]")
        await ctx.transport.send_text(ctx.chat_id, i18n_get_text(ctx.language, "buy.plan_load_failed"))
        return False

    if price is None:
        await ctx.transport.send_text(ctx.chat_id, i18n_get_text(ctx.language, "buy.plan_unavailable"))
        return False

    title, description = invoice_texts(months, ctx.language)
    result = await ctx.transport.send_invoice(
        ctx.chat_id,
        title=title,
        description=description,
        payload=build_subscription_invoice_payload(ctx.tg_id, months),
        stars=price.stars,
    )
    if result.ok:
        logger.info(f"INVOICE_SENT [tg_id={ctx.tg_id}, months={months}, stars={price.stars}]")
    return result.ok


async def handle_purchase(ctx: UpdateContext, action: PurchaseAction) -> Dict:
    if action.kind == "open":
        return callback_result(sent=await send_payment_methods(ctx))

    if action.kind == "method":
        if action.method == "tg_stars":
            return callback_result(sent=await send_stars_plans(ctx))
        result = await ctx.transport.send_text(ctx.chat_id, i18n_get_text(ctx.language, "buy.method_not_implemented"))
        return callback_result(sent=result.ok)

    return callback_result(invoice_sent=await send_subscription_invoice(ctx, action.months))
