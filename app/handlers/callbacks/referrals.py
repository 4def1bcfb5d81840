"""
Referral program: view -> choose a plan payable from the balance -> prolong.

Prolongation from balance is NOT a paid purchase: no referral reward here.
"""
import logging
from typing import Dict

from app.handlers.common.context import UpdateContext, callback_result
from app.handlers.common.keyboards import get_balance_plans_rows, get_referral_rows
from app.handlers.common.screens import prolongation_success_text, referral_program_text
from app.i18n import get_text as i18n_get_text
from app.services.subscriptions.exceptions import InsufficientBalanceError
from app.services.subscriptions.service import (
    activate_subscription_from_balance,
    get_subscription_price_by_months,
    list_subscription_prices,
)
from app.services.users.service import get_user
from app.utils.callback_data import ReferralAction
from app.utils.money import format_money

logger = logging.getLogger(__name__)


async def open_referrals(ctx: UpdateContext) -> Dict:
    try:
        user = await get_user(ctx.tg_id)
    except Exception as e:
        logger.exception(f"REFERRALS_VIEW_FAILED [tg_id={ctx.tg_id}, error={type(e).__name__}]")
        return callback_result(sent=False)

    if user is None:
        result = await ctx.transport.send_text(ctx.chat_id, i18n_get_text(ctx.language, "referral.profile_missing"))
        return callback_result(sent=result.ok)

    result = await ctx.transport.send_inline_keyboard(
        ctx.chat_id,
        referral_program_text(user, ctx.language, ctx.bot_username),
        get_referral_rows(ctx.language),
    )
    return callback_result(sent=result.ok)


async def _open_prolong_choices(ctx: UpdateContext) -> Dict:
    try:
        user = await get_user(ctx.tg_id)
        if user is None:
            result = await ctx.transport.send_text(ctx.chat_id, i18n_get_text(ctx.language, "referral.profile_missing"))
            return callback_result(sent=result.ok)
        prices = await list_subscription_prices()
    except Exception as e:
        logger.exception(f"REFERRALS_PROLONG_MENU_FAILED [tg_id={ctx.tg_id}, error={type(e).__name__}]")
        return callback_result(sent=False)

    affordable = [price for price in prices if price.usdt <= user.earned_money]
    if not affordable:
        result = await ctx.transport.send_text(ctx.chat_id, i18n_get_text(ctx.language, "referral.insufficient"))
        return callback_result(sent=result.ok)

    result = await ctx.transport.send_inline_keyboard(
        ctx.chat_id,
        i18n_get_text(ctx.language, "referral.choose_period", balance=format_money(user.earned_money)),
        get_balance_plans_rows(affordable, ctx.language),
    )
    return callback_result(sent=result.ok)


async def _prolong_from_balance(ctx: UpdateContext, months: int) -> Dict:
    try:
        price = await get_subscription_price_by_months(months)
        if price is None:
            result = await ctx.transport.send_text(ctx.chat_id, i18n_get_text(ctx.language, "referral.plan_unavailable"))
            return callback_result(sent=result.ok)

        user = await activate_subscription_from_balance(ctx.tg_id, ctx.nickname, months, price.usdt)
    except InsufficientBalanceError as e:
        logger.info(f"REFERRAL_PROLONG_REJECTED [tg_id={ctx.tg_id}, months={months}, reason={e}]")
        result = await ctx.transport.send_text(ctx.chat_id, i18n_get_text(ctx.language, "referral.insufficient"))
        return callback_result(sent=result.ok, prolonged=False)
    except Exception as e:
        logger.exception(f"REFERRAL_PROLONG_FAILED [tg_id={ctx.tg_id}, months={months}, error={type(e).__name__}]")
        result = await ctx.transport.send_text(ctx.chat_id, i18n_get_text(ctx.language, "referral.prolong_failed"))
        return callback_result(sent=result.ok, prolonged=False)

    result = await ctx.transport.send_text(ctx.chat_id, prolongation_success_text(user, price, ctx.language))
    return callback_result(sent=result.ok, prolonged=True)


async def handle_referral(ctx: UpdateContext, action: ReferralAction) -> Dict:
    if action.kind == "prolong":
        return await _open_prolong_choices(ctx)
    return await _prolong_from_balance(ctx, action.months)
