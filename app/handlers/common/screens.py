"""
Pure presentation helpers. Reusable for callbacks and message commands.
No transport calls, no ledger access - only text rendering.
"""
import html
from typing import List, Optional

import config
from app.i18n import get_text as i18n_get_text
from app.i18n import months_word
from app.services.referrals.service import build_referral_link
from app.services.subscriptions.service import STATUS_ENDING, STATUS_LIVE, SubscriptionPrice
from app.services.users.service import TelegramUser
from app.utils.date_utils import format_date
from app.utils.money import format_money


def subscription_status_text(user: TelegramUser, language: str) -> str:
    until = format_date(user.subscription_untill)
    if user.subscription_status == STATUS_LIVE:
        head = i18n_get_text(language, "status.live")
    elif user.subscription_status == STATUS_ENDING:
        head = i18n_get_text(language, "status.ending")
    else:
        return i18n_get_text(language, "status.absent")
    if until is None:
        return head
    return "\n".join([head, i18n_get_text(language, "status.until", date=until)])


def referral_program_text(user: TelegramUser, language: str, bot_username: Optional[str] = None) -> str:
    link = build_referral_link(user.tg_id, bot_username)
    return i18n_get_text(
        language,
        "referral.program",
        first_percent=config.REFERRAL_FIRST_PURCHASE_PERCENT,
        repeat_percent=config.REFERRAL_REPEAT_PURCHASE_PERCENT,
        min_withdrawal=config.REFERRAL_MIN_WITHDRAWAL_USD,
        link=link or i18n_get_text(language, "referral.link_not_configured"),
        earned=format_money(user.earned_money),
        count=user.number_of_referals,
    )


def prolongation_success_text(user: TelegramUser, price: SubscriptionPrice, language: str) -> str:
    lines = [
        i18n_get_text(language, "referral.prolong_success"),
        i18n_get_text(language, "referral.prolong_period", months=price.months),
        i18n_get_text(language, "referral.prolong_debited", amount=format_money(price.usdt)),
        i18n_get_text(language, "referral.prolong_balance", balance=format_money(user.earned_money)),
    ]
    if user.subscription_untill is not None:
        lines.append(i18n_get_text(language, "referral.prolong_until", date=format_date(user.subscription_untill)))
    return "\n".join(lines)


def payment_success_text(user: TelegramUser, months: int, language: str) -> str:
    lines = [
        i18n_get_text(language, "payment.success"),
        i18n_get_text(language, "payment.paid_for", months=months, months_word=months_word(language, months)),
        i18n_get_text(language, "payment.status_live"),
    ]
    if user.subscription_untill is not None:
        lines.append(i18n_get_text(language, "payment.valid_until", date=format_date(user.subscription_untill)))
    return "\n".join(lines)


def invoice_texts(months: int, language: str, recipient: Optional[str] = None) -> List[str]:
    """[title, description] для счёта (подписка или подарок)"""
    word = months_word(language, months)
    if recipient is None:
        return [
            i18n_get_text(language, "invoice.title", months=months, months_word=word),
            i18n_get_text(language, "invoice.description", months=months, months_word=word),
        ]
    return [
        i18n_get_text(language, "invoice.gift_title", months=months, months_word=word),
        i18n_get_text(language, "invoice.gift_description", months=months, months_word=word, recipient=recipient),
    ]


def protected_config_text(config_url: str) -> str:
    """Config string as HTML <code>; only &, <, > are escaped."""
    return f"<code>{html.escape(config_url, quote=False)}</code>"


def display_name(first_name: Optional[str], nickname: Optional[str], language: str) -> str:
    if nickname:
        return f"@{nickname}"
    return first_name or i18n_get_text(language, "common.someone")
