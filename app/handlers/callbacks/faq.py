"""FAQ menu and answers."""
from typing import Dict

import config
from app.handlers.common.context import UpdateContext, callback_result
from app.handlers.common.keyboards import get_faq_rows
from app.i18n import get_text as i18n_get_text
from app.utils.callback_data import FaqAction


async def open_faq(ctx: UpdateContext) -> Dict:
    result = await ctx.transport.send_inline_keyboard(
        ctx.chat_id,
        i18n_get_text(ctx.language, "faq.choose"),
        get_faq_rows(ctx.language),
    )
    return callback_result(sent=result.ok)


async def handle_faq(ctx: UpdateContext, action: FaqAction) -> Dict:
    if action.kind == "email":
        text = i18n_get_text(ctx.language, "faq.email", email=config.SUPPORT_EMAIL)
    else:
        text = i18n_get_text(ctx.language, "faq.rules")
    result = await ctx.transport.send_text(ctx.chat_id, text)
    return callback_result(sent=result.ok)
