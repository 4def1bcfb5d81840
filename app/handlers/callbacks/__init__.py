"""
Callback query routing: one handler per decoded action type.
"""
from typing import Dict, Optional

from app.handlers.common.context import UpdateContext
from app.utils.callback_data import (
    CallbackAction,
    CountriesAction,
    FaqAction,
    GiftAction,
    HowToAction,
    MenuAction,
    PurchaseAction,
    ReferralAction,
)

from .countries import handle_countries
from .faq import handle_faq
from .gifts import handle_gift
from .howto import handle_howto
from .menu import handle_menu
from .purchase import handle_purchase
from .referrals import handle_referral

_HANDLERS = {
    MenuAction: handle_menu,
    PurchaseAction: handle_purchase,
    FaqAction: handle_faq,
    ReferralAction: handle_referral,
    GiftAction: handle_gift,
    CountriesAction: handle_countries,
    HowToAction: handle_howto,
}

_MENU_ANSWER_KEYS = {
    "subscription_status": "callback.fetching_status",
    "countries": "callback.loading_countries",
    "faq": "callback.opening_faq",
    "how_to_use": "callback.opening_platforms",
    "gifts": "callback.opening_gifts",
}


def callback_answer_key(action: Optional[CallbackAction]) -> str:
    """i18n key of the transient text shown while the button is processed."""
    if isinstance(action, PurchaseAction):
        return "callback.opening_payment" if action.kind == "plan" else "callback.opening_section"
    if isinstance(action, FaqAction):
        return "callback.opening_answer"
    if isinstance(action, ReferralAction):
        return "callback.processing_prolongation" if action.kind == "balance_plan" else "callback.opening_referrals"
    if isinstance(action, CountriesAction):
        return "callback.loading_vps" if action.kind == "country" else "callback.sending_configs"
    if isinstance(action, HowToAction):
        return "callback.opening_guide"
    if isinstance(action, GiftAction):
        if action.kind == "activate":
            return "callback.activating_gift"
        if action.kind == "plan":
            return "callback.opening_payment"
        return "callback.opening_gifts"
    if isinstance(action, MenuAction):
        return _MENU_ANSWER_KEYS.get(action.key, "callback.opening_section")
    return "callback.unknown"


async def route_callback(ctx: UpdateContext, action: CallbackAction) -> Dict:
    return await _HANDLERS[type(action)](ctx, action)


__all__ = ["callback_answer_key", "route_callback"]
