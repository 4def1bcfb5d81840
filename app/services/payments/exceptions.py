"""
Payment Service Domain Exceptions

Raised while validating Telegram Stars invoices and applying paid purchases.
"""


class PaymentServiceError(Exception):
    """Base exception for payment service errors"""
    pass


class InvalidPaymentPayloadError(PaymentServiceError):
    """Invoice payload is not a well-formed subscription/gift descriptor"""
    pass


class PaymentPayerMismatchError(PaymentServiceError):
    """Payer identity embedded in the payload differs from the paying user"""
    pass


class PaymentAmountMismatchError(PaymentServiceError):
    """Charged amount or currency does not match the current catalog price"""
    pass


class PaymentAlreadyProcessedError(PaymentServiceError):
    """Telegram charge id was already applied (redelivered update)"""
    pass

