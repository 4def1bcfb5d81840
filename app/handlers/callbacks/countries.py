"""
Countries browser: countries -> servers -> protected config messages.
Every step is gated by active access.
"""
import logging
from typing import Dict

from app.handlers.common.context import UpdateContext, callback_result
from app.handlers.common.keyboards import get_countries_rows, get_payment_methods_rows, get_servers_rows
from app.handlers.common.screens import protected_config_text
from app.i18n import get_text as i18n_get_text
from app.services.subscriptions.service import has_access_to_servers
from app.services.users.service import get_user
from app.services.vpn.service import get_vps_config, list_unique_vps_countries, list_vps_by_country
from app.utils.callback_data import CountriesAction

logger = logging.getLogger(__name__)


async def _has_access(ctx: UpdateContext) -> bool:
    user = await get_user(ctx.tg_id)
    return has_access_to_servers(user)


async def _send_subscription_required(ctx: UpdateContext) -> Dict:
    logger.info(f"SERVERS_ACCESS_DENIED [tg_id={ctx.tg_id}]")
    result = await ctx.transport.send_inline_keyboard(
        ctx.chat_id,
        i18n_get_text(ctx.language, "countries.subscription_required"),
        get_payment_methods_rows(ctx.language),
    )
    return callback_result(sent=result.ok)


async def open_countries(ctx: UpdateContext) -> Dict:
    try:
        if not await _has_access(ctx):
            return await _send_subscription_required(ctx)
        countries = await list_unique_vps_countries()
    except Exception as e:
        logger.exception(f"COUNTRIES_LOAD_FAILED [tg_id={ctx.tg_id}, error={type(e).__name__}]")
        return callback_result(sent=False)

    rows = get_countries_rows(countries)
    if not rows:
        result = await ctx.transport.send_text(ctx.chat_id, i18n_get_text(ctx.language, "countries.empty"))
    else:
        result = await ctx.transport.send_inline_keyboard(
            ctx.chat_id,
            i18n_get_text(ctx.language, "countries.title"),
            rows,
        )
    return callback_result(sent=result.ok)


async def _send_servers(ctx: UpdateContext, country: str) -> Dict:
    try:
        servers = await list_vps_by_country(country)
    except Exception as e:
        logger.exception(f"VPS_LIST_FAILED [tg_id={ctx.tg_id}, error={type(e).__name__}]")
        return callback_result(sent=False)

    if not servers:
        result = await ctx.transport.send_text(
            ctx.chat_id, i18n_get_text(ctx.language, "countries.no_servers", country=country)
        )
    else:
        result = await ctx.transport.send_inline_keyboard(
            ctx.chat_id,
            i18n_get_text(ctx.language, "countries.servers_title", country=country),
            get_servers_rows(servers),
        )
    return callback_result(sent=result.ok)


async def _send_configs(ctx: UpdateContext, internal_uuid: str) -> Dict:
    try:
        vps_config = await get_vps_config(internal_uuid)
    except Exception as e:
        logger.exception(f"VPS_CONFIG_LOAD_FAILED [tg_id={ctx.tg_id}, error={type(e).__name__}]")
        return callback_result(sent=False)

    if vps_config is None:
        result = await ctx.transport.send_text(ctx.chat_id, i18n_get_text(ctx.language, "countries.config_not_found"))
        return callback_result(sent=result.ok)
    if not vps_config.config_list:
        result = await ctx.transport.send_text(ctx.chat_id, i18n_get_text(ctx.language, "countries.config_empty"))
        return callback_result(sent=result.ok)

    sent = True
    intro = await ctx.transport.send_text(
        ctx.chat_id, i18n_get_text(ctx.language, "countries.config_intro"), protect_content=True
    )
    sent = sent and intro.ok
    for config_url in vps_config.config_list:
        result = await ctx.transport.send_text(
            ctx.chat_id,
            protected_config_text(config_url),
            parse_mode="HTML",
            protect_content=True,
        )
        sent = sent and result.ok

    # сами конфиги не логируем
    logger.info(f"VPS_CONFIGS_SENT [tg_id={ctx.tg_id}, count={len(vps_config.config_list)}, ok={sent}]")
    return callback_result(sent=sent)


async def handle_countries(ctx: UpdateContext, action: CountriesAction) -> Dict:
    try:
        if not await _has_access(ctx):
            return await _send_subscription_required(ctx)
    except Exception as e:
        logger.exception(f"SERVERS_ACCESS_CHECK_FAILED [tg_id={ctx.tg_id}, error={type(e).__name__}]")
        return callback_result(sent=False)

    if action.kind == "country":
        return await _send_servers(ctx, action.country)
    return await _send_configs(ctx, action.internal_uuid)
