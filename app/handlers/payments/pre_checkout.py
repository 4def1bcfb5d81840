"""
Pre-checkout gate: the only branch Telegram waits on synchronously.

At most one catalog read; any failure rejects the checkout.
"""
import logging
from typing import Dict

from aiogram.types import PreCheckoutQuery

from app.handlers.common.context import processed
from app.i18n import get_text as i18n_get_text
from app.i18n import resolve_language
from app.services.payments.exceptions import PaymentServiceError
from app.services.payments.service import validate_stars_payment
from app.services.subscriptions.exceptions import SubscriptionServiceError
from app.utils.telegram_safe import TelegramTransport

logger = logging.getLogger(__name__)


async def handle_pre_checkout(transport: TelegramTransport, query: PreCheckoutQuery) -> Dict:
    payer_tg_id = str(query.from_user.id)
    is_valid = False
    try:
        validated = await validate_stars_payment(
            query.invoice_payload,
            query.currency,
            query.total_amount,
            payer_tg_id,
        )
        is_valid = True
        logger.info(
            f"PRE_CHECKOUT_ACCEPTED [tg_id={payer_tg_id}, action={validated.payload.action}, "
            f"months={validated.payload.months}, stars={validated.price.stars}]"
        )
    except (PaymentServiceError, SubscriptionServiceError) as e:
        logger.warning(f"PRE_CHECKOUT_REJECTED [tg_id={payer_tg_id}, reason={type(e).__name__}: {e}]")
    except Exception as e:
        logger.exception(f"PRE_CHECKOUT_VALIDATION_FAILED [tg_id={payer_tg_id}, error={type(e).__name__}]")

    language = resolve_language(query.from_user.language_code)
    answer = await transport.answer_pre_checkout(
        query.id,
        ok=is_valid,
        error_message=i18n_get_text(language, "payment.precheckout_rejected"),
    )
    if not answer.ok:
        logger.error(f"PRE_CHECKOUT_ANSWER_FAILED [tg_id={payer_tg_id}, status={answer.status_code}]")

    return processed(pre_checkout_validated=is_valid)
