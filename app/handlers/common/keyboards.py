"""
Inline keyboard builders. Shared across all handler domains.

Builders return rows of InlineButton; TelegramTransport turns them into
aiogram markup, the GET menu endpoint turns them into JSON.
"""
import logging
from typing import Any, Dict, List, Sequence

import config
from app.i18n import get_text as i18n_get_text
from app.i18n import months_word
from app.services.gifts.service import Gift
from app.services.subscriptions.service import (
    MENU_STATUS_ACTIVE,
    MENU_STATUS_EXPIRED,
    MENU_STATUS_TRIAL,
    MENU_STATUS_UNKNOWN,
    SubscriptionPrice,
)
from app.services.vpn.service import VpsCountry, VpsServer
from app.utils.callback_data import country_callback_data
from app.utils.money import format_money
from app.utils.telegram_safe import InlineButton

logger = logging.getLogger(__name__)

SUBSCRIPTION_STATUS_EMOJI = {
    MENU_STATUS_ACTIVE: "🟢",
    MENU_STATUS_TRIAL: "🟡",
    MENU_STATUS_EXPIRED: "🔴",
    MENU_STATUS_UNKNOWN: "⚪",
}

# (key, size_fr) по строкам главного меню
MAIN_MENU_LAYOUT = (
    (("subscription_status", 1),),
    (("how_to_use", 0.5), ("faq", 0.5)),
    (("referals", 0.5), ("gifts", 0.5)),
    (("countries", 1),),
    (("settings", 1),),
)

HOWTO_BUTTONS = (
    ("🍎 iOS", "ios"),
    ("🤖 Android", "android"),
    ("💻 macOS", "macos"),
    ("🪟 Windows", "windows"),
    ("📺 Android TV", "android_tv"),
)


def build_telegram_menu(subscription_status: str, language: str) -> Dict[str, Any]:
    """
    Main menu payload: flat item list, layout rows and inline rows.

    Used by /start, /menu, the settings section and GET /api/telegram/menu.
    """
    emoji = SUBSCRIPTION_STATUS_EMOJI.get(subscription_status, SUBSCRIPTION_STATUS_EMOJI[MENU_STATUS_UNKNOWN])

    keyboard_rows = []
    for row in MAIN_MENU_LAYOUT:
        items = []
        for key, size_fr in row:
            items.append({
                "key": key,
                "label": i18n_get_text(language, f"menu.{key}", emoji=emoji),
                "size_fr": size_fr,
                "callback_data": f"menu:{key}",
            })
        keyboard_rows.append(items)

    return {
        "subscription_status": subscription_status,
        "menu": [item for row in keyboard_rows for item in row],
        "keyboard_rows": keyboard_rows,
        "inline_keyboard_rows": [
            [{"text": item["label"], "callback_data": item["callback_data"]} for item in row]
            for row in keyboard_rows
        ],
    }


def get_main_menu_rows(subscription_status: str, language: str) -> List[List[InlineButton]]:
    payload = build_telegram_menu(subscription_status, language)
    return [
        [InlineButton(text=item["text"], callback_data=item["callback_data"]) for item in row]
        for row in payload["inline_keyboard_rows"]
    ]


def get_payment_methods_rows(language: str) -> List[List[InlineButton]]:
    return [
        [InlineButton(text=i18n_get_text(language, "buy.method_stars"), callback_data="buy:method:tg_stars")],
        [InlineButton(text=i18n_get_text(language, "buy.method_tbd"), callback_data="buy:method:tbd_1")],
        [InlineButton(text=i18n_get_text(language, "buy.method_tbd"), callback_data="buy:method:tbd_2")],
    ]


def get_stars_plans_rows(prices: Sequence[SubscriptionPrice], language: str) -> List[List[InlineButton]]:
    return [
        [InlineButton(
            text=i18n_get_text(
                language,
                "buy.plan_button",
                months=price.months,
                months_word=months_word(language, price.months),
                stars=price.stars,
            ),
            callback_data=f"buy:plan:{price.months}",
        )]
        for price in prices
    ]


def get_subscription_status_rows(missing: bool, language: str) -> List[List[InlineButton]]:
    key = "status.button_buy" if missing else "status.button_renew"
    return [[InlineButton(text=i18n_get_text(language, key), callback_data="buy:open")]]


def get_faq_rows(language: str) -> List[List[InlineButton]]:
    return [
        [
            InlineButton(text=i18n_get_text(language, "faq.button_email"), callback_data="faq:email"),
            InlineButton(text=i18n_get_text(language, "faq.button_chat"), url=config.COMMUNITY_URL),
        ],
        [
            InlineButton(text=i18n_get_text(language, "faq.button_support"), url=config.SUPPORT_URL),
            InlineButton(text=i18n_get_text(language, "faq.button_rules"), callback_data="faq:rules"),
        ],
        [InlineButton(text=i18n_get_text(language, "faq.button_offer"), url=config.OFFER_URL)],
    ]


def get_referral_rows(language: str) -> List[List[InlineButton]]:
    return [
        [InlineButton(text=i18n_get_text(language, "referral.button_prolong"), callback_data="referals:prolong")],
        [InlineButton(text=i18n_get_text(language, "referral.button_withdraw"), url=config.SUPPORT_URL)],
    ]


def get_balance_plans_rows(prices: Sequence[SubscriptionPrice], language: str) -> List[List[InlineButton]]:
    return [
        [InlineButton(
            text=i18n_get_text(
                language,
                "referral.plan_button",
                months=price.months,
                months_word=months_word(language, price.months),
                usdt=format_money(price.usdt),
            ),
            callback_data=f"referals:balance_plan:{price.months}",
        )]
        for price in prices
    ]


def get_howto_rows() -> List[List[InlineButton]]:
    return [[InlineButton(text=text, callback_data=f"howto:{platform}")] for text, platform in HOWTO_BUTTONS]


def get_countries_rows(countries: Sequence[VpsCountry]) -> List[List[InlineButton]]:
    rows = []
    for item in countries:
        callback_data = country_callback_data(item.country)
        if callback_data is None:
            # длинное имя не влезает в 64 байта callback_data
            logger.warning(f"COUNTRY_BUTTON_SKIPPED [country_length={len(item.country)}]")
            continue
        rows.append([InlineButton(text=f"{item.country} {item.country_emoji}", callback_data=callback_data)])
    return rows


def get_servers_rows(servers: Sequence[VpsServer]) -> List[List[InlineButton]]:
    return [
        [InlineButton(text=server.button_text, callback_data=f"countries:vps:{server.internal_uuid}")]
        for server in servers
    ]


# ====================================================================================
# Gifts
# ====================================================================================

def get_gifts_menu_rows(language: str) -> List[List[InlineButton]]:
    return [
        [InlineButton(text=i18n_get_text(language, "gift.button_my"), callback_data="gift:my")],
        [InlineButton(text=i18n_get_text(language, "gift.button_give"), callback_data="gift:give")],
        [InlineButton(text=i18n_get_text(language, "gift.button_promo"), callback_data="gift:promo")],
    ]


def get_gift_list_rows(gifts: Sequence[Gift], language: str) -> List[List[InlineButton]]:
    rows = []
    for index, gift in enumerate(gifts):
        rows.append([InlineButton(
            text=i18n_get_text(
                language,
                "gift.item_button",
                number=index + 1,
                months=gift.months,
                months_word=months_word(language, gift.months),
                giver=gift.giver_name or i18n_get_text(language, "common.someone"),
            ),
            callback_data=f"gift:view:{index}",
        )])
    return rows


def get_gift_view_rows(gift_index: int, language: str) -> List[List[InlineButton]]:
    return [
        [InlineButton(text=i18n_get_text(language, "gift.button_activate"), callback_data=f"gift:activate:{gift_index}")],
        [InlineButton(text=i18n_get_text(language, "common.back"), callback_data="gift:my")],
    ]


def get_gift_methods_rows(recipient_tg_id: str, language: str) -> List[List[InlineButton]]:
    return [
        [InlineButton(
            text=i18n_get_text(language, "buy.method_stars"),
            callback_data=f"gift:method:tg_stars:{recipient_tg_id}",
        )],
        [InlineButton(
            text=i18n_get_text(language, "buy.method_tbd"),
            callback_data=f"gift:method:tbd_1:{recipient_tg_id}",
        )],
    ]


def get_gift_plans_rows(
    prices: Sequence[SubscriptionPrice],
    recipient_tg_id: str,
    language: str,
) -> List[List[InlineButton]]:
    return [
        [InlineButton(
            text=i18n_get_text(
                language,
                "buy.plan_button",
                months=price.months,
                months_word=months_word(language, price.months),
                stars=price.stars,
            ),
            callback_data=f"gift:plan:{price.months}:{recipient_tg_id}",
        )]
        for price in prices
    ]
