"""
Payment Service Layer

This module provides business logic for Telegram Stars payments:
- invoice payload codec (the only state carried between invoice and payment)
- validation of pre-checkout queries and successful payments against the
  LIVE pricing catalog
- idempotent finalization keyed on telegram_payment_charge_id

All functions are pure business logic - no aiogram imports or Telegram-specific types.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Optional

import config
import database
from app.services.gifts.service import add_gift
from app.services.payments.exceptions import (
    InvalidPaymentPayloadError,
    PaymentAlreadyProcessedError,
    PaymentAmountMismatchError,
    PaymentPayerMismatchError,
)
from app.services.referrals.service import ReferralRewardResult, ReferrerLink, apply_referral_reward
from app.services.subscriptions.exceptions import PlanNotFoundError
from app.services.subscriptions.service import (
    SubscriptionPrice,
    activate_subscription,
    get_subscription_price_by_months,
)
from app.services.users.service import TelegramUser, get_user
from app.utils.date_utils import format_date, today_utc
from app.utils.security import MAX_PAYLOAD_LENGTH, TG_ID_PATTERN

logger = logging.getLogger(__name__)

ACTION_SUBSCRIPTION = "subscription"
ACTION_GIFT = "gift"
PAYLOAD_ACTIONS = (ACTION_SUBSCRIPTION, ACTION_GIFT)


# ====================================================================================
# Result Types
# ====================================================================================

@dataclass(frozen=True)
class InvoicePayload:
    """Decoded invoice payload"""
    action: str
    months: int
    tg_id: str
    recipient_tg_id: Optional[str] = None


@dataclass
class ValidatedPayment:
    """Payload re-checked against the catalog; price is the authoritative one"""
    payload: InvoicePayload
    price: SubscriptionPrice


@dataclass
class PaymentFinalizationResult:
    """Result of applying a successful payment"""
    applied: bool
    action: str
    user: TelegramUser  # payer for subscription, recipient for gift
    recipient_created: bool = False
    referral: Optional[ReferralRewardResult] = None


# ====================================================================================
# Invoice Payload Codec
# ====================================================================================

def build_subscription_invoice_payload(tg_id: str, months: int) -> str:
    return json.dumps(
        {"action": ACTION_SUBSCRIPTION, "months": int(months), "tgId": str(tg_id)},
        separators=(",", ":"),
    )


def build_gift_invoice_payload(tg_id: str, recipient_tg_id: str, months: int) -> str:
    return json.dumps(
        {
            "action": ACTION_GIFT,
            "months": int(months),
            "tgId": str(tg_id),
            "recipientTgId": str(recipient_tg_id),
        },
        separators=(",", ":"),
    )


def parse_subscription_invoice_payload(payload: Optional[str]) -> Optional[InvoicePayload]:
    """
    Decode an invoice payload produced by the builders above.

    Never raises: anything malformed (not JSON, unknown action, non-positive
    or non-integer months, bad identity, gift without recipient, oversized)
    yields None.
    """
    if not payload or len(payload.encode("utf-8")) > MAX_PAYLOAD_LENGTH:
        return None

    try:
        raw = json.loads(payload)
    except ValueError:
        return None
    if not isinstance(raw, dict):
        return None

    action = raw.get("action")
    months = raw.get("months")
    tg_id = raw.get("tgId")
    if action not in PAYLOAD_ACTIONS:
        return None
    # bool is an int subclass
    if not isinstance(months, int) or isinstance(months, bool) or months <= 0:
        return None
    if not isinstance(tg_id, str) or not TG_ID_PATTERN.match(tg_id):
        return None

    recipient = raw.get("recipientTgId")
    if action == ACTION_GIFT:
        if not isinstance(recipient, str) or not TG_ID_PATTERN.match(recipient):
            return None
    else:
        recipient = None

    return InvoicePayload(action=action, months=months, tg_id=tg_id, recipient_tg_id=recipient)


# ====================================================================================
# Validation
# ====================================================================================

async def validate_stars_payment(
    payload: Optional[str],
    currency: Optional[str],
    total_amount: int,
    payer_tg_id: str,
    conn: Optional[Any] = None,
) -> ValidatedPayment:
    """
    Re-validate a payment attempt. Used for BOTH pre-checkout and successful payment.

    The payload only binds identity and duration; the price always comes from
    the catalog read here.

    Raises:
        InvalidPaymentPayloadError: malformed payload or a gift to oneself
        PaymentPayerMismatchError: payload payer differs from the sender
        PlanNotFoundError: no catalog row for the duration
        PaymentAmountMismatchError: wrong currency or amount
    """
    parsed = parse_subscription_invoice_payload(payload)
    if parsed is None:
        raise InvalidPaymentPayloadError("Invoice payload is malformed")

    payer_tg_id = str(payer_tg_id)
    if parsed.tg_id != payer_tg_id:
        raise PaymentPayerMismatchError(
            f"Payload payer mismatch: payload_tg_id={parsed.tg_id}, payer_tg_id={payer_tg_id}"
        )
    if parsed.action == ACTION_GIFT and parsed.recipient_tg_id == payer_tg_id:
        raise InvalidPaymentPayloadError("Gift payload addressed to the payer")

    if currency != config.STARS_CURRENCY:
        raise PaymentAmountMismatchError(f"Unexpected currency: {currency}")

    price = await get_subscription_price_by_months(parsed.months, conn=conn)
    if price is None:
        raise PlanNotFoundError(f"No subscription plan for months={parsed.months}")

    if int(total_amount) != price.stars:
        raise PaymentAmountMismatchError(
            f"Payment amount mismatch: expected={price.stars} {config.STARS_CURRENCY}, "
            f"actual={total_amount} {config.STARS_CURRENCY}"
        )

    return ValidatedPayment(payload=parsed, price=price)


# ====================================================================================
# Finalization
# ====================================================================================

async def finalize_stars_payment(
    validated: ValidatedPayment,
    charge_id: str,
    payer_nickname: Optional[str],
    payer_name: Optional[str] = None,
    conn: Optional[Any] = None,
) -> PaymentFinalizationResult:
    """
    Apply a validated Stars payment exactly once.

    The charge id is recorded in the same transaction as the activation: a
    redelivered update hits the unique constraint and raises
    PaymentAlreadyProcessedError without touching the ledger.

    The referral reward runs AFTER the commit. Its failure is logged and never
    rolls the activation back; a retried reward is guarded by the claim flag
    on the processed-payment row.

    Raises:
        PaymentAlreadyProcessedError: charge id already applied
    """
    payload = validated.payload
    price = validated.price
    recipient_created = False

    async with database.connection(conn) as c:
        async with c.transaction():
            recorded = await database.record_telegram_payment(
                c,
                charge_id,
                payload.tg_id,
                payload.recipient_tg_id,
                payload.action,
                payload.months,
                price.stars,
            )
            if not recorded:
                logger.info(
                    f"PAYMENT_DUPLICATE_SKIPPED [charge_id={charge_id}, payer={payload.tg_id}, "
                    f"action={payload.action}]"
                )
                raise PaymentAlreadyProcessedError(f"Charge {charge_id} already processed")

            if payload.action == ACTION_GIFT:
                recipient_created = await get_user(payload.recipient_tg_id, conn=c) is None
                user = await add_gift(
                    payload.recipient_tg_id,
                    None,
                    payload.tg_id,
                    payer_name or payer_nickname,
                    payload.months,
                    referred_by_on_create=ReferrerLink(
                        tg_id=payload.tg_id,
                        tg_nickname=payer_nickname,
                        refer_date=format_date(today_utc()),
                    ),
                    conn=c,
                )
            else:
                user = await activate_subscription(payload.tg_id, payer_nickname, payload.months, conn=c)

    logger.info(
        f"PAYMENT_APPLIED [charge_id={charge_id}, payer={payload.tg_id}, action={payload.action}, "
        f"months={payload.months}, stars={price.stars}]"
    )

    referral = None
    try:
        referral = await apply_referral_reward(
            payload.tg_id,
            payer_nickname,
            price.usdt,
            charge_id=charge_id,
            conn=conn,
        )
    except Exception as e:
        logger.exception(
            f"REFERRAL_REWARD_FAILED [charge_id={charge_id}, payer={payload.tg_id}, error={type(e).__name__}]"
        )

    return PaymentFinalizationResult(
        applied=True,
        action=payload.action,
        user=user,
        recipient_created=recipient_created,
        referral=referral,
    )
