"""
Successful Stars payment.

The payment is re-validated from scratch (pre-checkout approval is not
trusted), then applied once per telegram_payment_charge_id.
"""
import logging
from typing import Dict

from aiogram.types import SuccessfulPayment

from app.handlers.common.context import UpdateContext, processed
from app.handlers.common.screens import display_name, payment_success_text
from app.i18n import DEFAULT_LANGUAGE
from app.i18n import get_text as i18n_get_text
from app.i18n import months_word
from app.services.payments.exceptions import PaymentAlreadyProcessedError, PaymentServiceError
from app.services.payments.service import ACTION_GIFT, finalize_stars_payment, validate_stars_payment
from app.services.subscriptions.exceptions import SubscriptionServiceError

logger = logging.getLogger(__name__)


async def _notify_recipient(ctx: UpdateContext, recipient_tg_id: str, months: int) -> bool:
    """Best-effort: the recipient may never have opened the bot."""
    giver = display_name(ctx.first_name, ctx.nickname, DEFAULT_LANGUAGE)
    result = await ctx.transport.send_text(
        int(recipient_tg_id),
        i18n_get_text(
            DEFAULT_LANGUAGE,
            "gift.received",
            giver=giver,
            months=months,
            months_word=months_word(DEFAULT_LANGUAGE, months),
        ),
    )
    if not result.ok:
        logger.warning(f"GIFT_RECIPIENT_NOTIFY_FAILED [recipient={recipient_tg_id}, status={result.status_code}]")
    return result.ok


async def _report_failure(ctx: UpdateContext) -> None:
    await ctx.transport.send_text(ctx.chat_id, i18n_get_text(ctx.language, "payment.error_contact_support"))


async def handle_successful_payment(ctx: UpdateContext, payment: SuccessfulPayment) -> Dict:
    charge_id = payment.telegram_payment_charge_id
    try:
        validated = await validate_stars_payment(
            payment.invoice_payload,
            payment.currency,
            payment.total_amount,
            ctx.tg_id,
        )
    except (PaymentServiceError, SubscriptionServiceError) as e:
        logger.error(
            f"PAYMENT_REJECTED [tg_id={ctx.tg_id}, charge_id={charge_id}, reason={type(e).__name__}: {e}]"
        )
        await _report_failure(ctx)
        return processed(payment_applied=False)
    except Exception as e:
        logger.exception(f"PAYMENT_VALIDATION_FAILED [tg_id={ctx.tg_id}, charge_id={charge_id}, error={type(e).__name__}]")
        await _report_failure(ctx)
        return processed(payment_applied=False)

    try:
        result = await finalize_stars_payment(
            validated,
            charge_id,
            ctx.nickname,
            payer_name=display_name(ctx.first_name, ctx.nickname, ctx.language),
        )
    except PaymentAlreadyProcessedError:
        return processed(payment_applied=False, duplicate=True)
    except Exception as e:
        logger.exception(f"PAYMENT_FINALIZATION_FAILED [tg_id={ctx.tg_id}, charge_id={charge_id}, error={type(e).__name__}]")
        await _report_failure(ctx)
        return processed(payment_applied=False)

    months = validated.payload.months
    if result.action == ACTION_GIFT:
        recipient_tg_id = validated.payload.recipient_tg_id
        recipient = f"@{result.user.tg_nickname}" if result.user.tg_nickname else recipient_tg_id
        sent = await ctx.transport.send_text(
            ctx.chat_id,
            i18n_get_text(
                ctx.language,
                "payment.gift_sent",
                months=months,
                months_word=months_word(ctx.language, months),
                recipient=recipient,
            ),
        )
        notified = await _notify_recipient(ctx, recipient_tg_id, months)
        return processed(payment_applied=True, sent=sent.ok, recipient_notified=notified)

    sent = await ctx.transport.send_text(ctx.chat_id, payment_success_text(result.user, months, ctx.language))
    return processed(payment_applied=True, sent=sent.ok)
