"""
How-to guides: platform picker and per-platform guides.

A guide is a photo with a caption; when the photo can not be sent the image
URL and caption go out as plain text instead. Android TV is a sequence of
photo steps sent one by one.
"""
import logging
from typing import Dict, List, Tuple

from app.handlers.common.context import UpdateContext, callback_result
from app.handlers.common.keyboards import get_howto_rows
from app.i18n import get_text as i18n_get_text
from app.utils.callback_data import HowToAction

logger = logging.getLogger(__name__)

GUIDE_IMAGES = {
    "ios": "https://ibb.co/LXrq7Z0w",
    "windows": "https://ibb.co/TxDvSjvw",
    "macos": "https://ibb.co/67qgyc9L",
    "android": "https://ibb.co/TDF1rD6F",
}

ANDROID_TV_STEP_IMAGES = (
    "https://ibb.co/8ndc1NBL",
    "https://ibb.co/27HGxF5B",
    "https://ibb.co/v43g1zGW",
    "https://ibb.co/qLRpJ50w",
    "https://ibb.co/cKHBCzxJ",
    "https://ibb.co/KpnwQSMc",
    "https://ibb.co/ybVfbZ3",
)


def guide_steps(platform: str, language: str) -> List[Tuple[str, str]]:
    """[(image_url, caption), ...] for a platform"""
    if platform == "android_tv":
        return [
            (image_url, i18n_get_text(language, f"howto.android_tv.{number}"))
            for number, image_url in enumerate(ANDROID_TV_STEP_IMAGES, start=1)
        ]
    return [(GUIDE_IMAGES[platform], i18n_get_text(language, f"howto.{platform}"))]


async def send_photo_with_fallback(ctx: UpdateContext, image_url: str, caption: str) -> bool:
    result = await ctx.transport.send_photo(ctx.chat_id, image_url, caption=caption)
    if result.ok:
        return True

    logger.warning(f"HOWTO_PHOTO_FALLBACK [chat_id={ctx.chat_id}, status={result.status_code}]")
    fallback = await ctx.transport.send_text(ctx.chat_id, f"{image_url}\n\n{caption}")
    return fallback.ok


async def open_platforms(ctx: UpdateContext) -> Dict:
    result = await ctx.transport.send_inline_keyboard(
        ctx.chat_id,
        i18n_get_text(ctx.language, "howto.choose_device"),
        get_howto_rows(),
    )
    return callback_result(sent=result.ok)


async def handle_howto(ctx: UpdateContext, action: HowToAction) -> Dict:
    all_sent = True
    for image_url, caption in guide_steps(action.platform, ctx.language):
        step_sent = await send_photo_with_fallback(ctx, image_url, caption)
        all_sent = all_sent and step_sent
    return callback_result(sent=all_sent)
