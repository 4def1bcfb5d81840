"""
Payment Service Layer

This package provides business logic for Telegram Stars invoice payloads,
payment validation, and idempotent finalization.
"""

from app.services.payments.service import (
    ACTION_GIFT,
    ACTION_SUBSCRIPTION,
    build_subscription_invoice_payload,
    build_gift_invoice_payload,
    parse_subscription_invoice_payload,
    validate_stars_payment,
    finalize_stars_payment,
    InvoicePayload,
    ValidatedPayment,
    PaymentFinalizationResult,
)

from app.services.payments.exceptions import (
    PaymentServiceError,
    InvalidPaymentPayloadError,
    PaymentPayerMismatchError,
    PaymentAmountMismatchError,
    PaymentAlreadyProcessedError,
)

__all__ = [
    "ACTION_GIFT",
    "ACTION_SUBSCRIPTION",
    "build_subscription_invoice_payload",
    "build_gift_invoice_payload",
    "parse_subscription_invoice_payload",
    "validate_stars_payment",
    "finalize_stars_payment",
    "InvoicePayload",
    "ValidatedPayment",
    "PaymentFinalizationResult",
    "PaymentServiceError",
    "InvalidPaymentPayloadError",
    "PaymentPayerMismatchError",
    "PaymentAmountMismatchError",
    "PaymentAlreadyProcessedError",
]
