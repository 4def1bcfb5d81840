"""
Telegram webhook endpoint.

POST receives updates from Telegram and feeds them to WebhookDispatcher;
GET returns the main menu payload for a subscription status.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request

from app.api.dependencies import ApiError, require_telegram_secret
from app.handlers.common.keyboards import build_telegram_menu
from app.i18n import resolve_language
from app.services.subscriptions.service import MENU_STATUS_UNKNOWN, MENU_STATUSES

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/telegram", dependencies=[Depends(require_telegram_secret)])


@router.get("/menu")
async def get_telegram_menu(status: Optional[str] = None, lang: Optional[str] = None):
    subscription_status = status if status is not None else MENU_STATUS_UNKNOWN
    if subscription_status not in MENU_STATUSES:
        raise ApiError(
            400,
            "Invalid query parameters.",
            errors={"status": f"Expected one of: {', '.join(MENU_STATUSES)}"},
        )
    return {"ok": True, "data": build_telegram_menu(subscription_status, resolve_language(lang))}


@router.post("/menu")
async def telegram_menu_webhook(request: Request):
    try:
        body = await request.json()
    except ValueError:
        return {"ok": True, "processed": False, "reason": "Invalid Telegram update payload."}

    try:
        return await request.app.state.dispatcher.process_update(body)
    except Exception as e:
        # 200 anyway: Telegram would otherwise redeliver the same update
        logger.exception(f"WEBHOOK_PROCESSING_ERROR [error={type(e).__name__}]")
        return {"ok": True, "processed": False, "reason": "Internal processing error."}
