"""
Structured logging helpers for webhook handlers.

Logging contract:
- correlation_id: Telegram update_id of the update being processed
- component: handler | api | service
- operation: branch name (pre_checkout, callback, successful_payment, message)
- outcome: success | degraded | failed

Failure taxonomy:
- infra_error: Infrastructure errors (DB, network, timeouts)
- dependency_error: Telegram Bot API / SSH errors
- domain_error: Business rule violations (balance, gifts, payments)
- unexpected_error: Everything else (bugs)
"""

import asyncio
import json
import logging
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import asyncpg
from aiogram.exceptions import TelegramAPIError

logger = logging.getLogger(__name__)

# Correlation ID для текущего апдейта
_correlation_id: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)


def generate_correlation_id() -> str:
    return str(uuid.uuid4())


def set_correlation_id(correlation_id: str) -> None:
    _correlation_id.set(correlation_id)


def get_correlation_id() -> Optional[str]:
    return _correlation_id.get()


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def _emit(log_data: Dict[str, Any], outcome: Optional[str] = None) -> None:
    if outcome == "failed":
        log_data["level"] = "ERROR"
        logger.error(json.dumps(log_data, default=str))
    elif outcome == "degraded":
        log_data["level"] = "WARNING"
        logger.warning(json.dumps(log_data, default=str))
    else:
        log_data["level"] = "INFO"
        logger.info(json.dumps(log_data, default=str))


def log_handler_entry(
    handler_name: str,
    telegram_id: Optional[str] = None,
    operation: Optional[str] = None,
    correlation_id: Optional[str] = None,
    **kwargs
) -> str:
    """
    Log handler entry point and bind the correlation id to the current context.

    For webhook branches correlation_id is the update_id. A UUID is generated
    when none is given (e.g. admin endpoints).

    Returns:
        Correlation ID for this request
    """
    if correlation_id is None:
        correlation_id = generate_correlation_id()
    correlation_id = str(correlation_id)
    set_correlation_id(correlation_id)

    log_data = {
        "event": "HANDLER_ENTRY",
        "handler": handler_name,
        "correlation_id": correlation_id,
        "component": "handler",
        "operation": operation or handler_name,
        "timestamp": _timestamp(),
    }
    if telegram_id:
        log_data["telegram_id"] = telegram_id
    if kwargs:
        log_data.update(kwargs)

    _emit(log_data)
    return correlation_id


def log_handler_exit(
    handler_name: str,
    outcome: str,  # "success" | "degraded" | "failed"
    telegram_id: Optional[str] = None,
    operation: Optional[str] = None,
    error_type: Optional[str] = None,
    duration_ms: Optional[float] = None,
    **kwargs
) -> None:
    """Log handler exit point; level follows the outcome."""
    log_data = {
        "event": "HANDLER_EXIT",
        "handler": handler_name,
        "correlation_id": get_correlation_id(),
        "component": "handler",
        "operation": operation or handler_name,
        "outcome": outcome,
        "timestamp": _timestamp(),
    }
    if telegram_id:
        log_data["telegram_id"] = telegram_id
    if error_type:
        log_data["error_type"] = error_type
    if duration_ms is not None:
        log_data["duration_ms"] = round(duration_ms, 2)
    if kwargs:
        log_data.update(kwargs)

    _emit(log_data, outcome)


def classify_error(exception: BaseException) -> str:
    """
    Classify error type for failure taxonomy.

    Returns:
        "infra_error" | "dependency_error" | "domain_error" | "unexpected_error"
    """
    import paramiko

    from app.services.gifts.exceptions import GiftServiceError
    from app.services.payments.exceptions import PaymentServiceError
    from app.services.subscriptions.exceptions import SubscriptionServiceError
    from app.services.users.exceptions import UserServiceError

    if isinstance(exception, (
        PaymentServiceError,
        SubscriptionServiceError,
        GiftServiceError,
        UserServiceError,
    )):
        return "domain_error"

    if isinstance(exception, (TelegramAPIError, paramiko.SSHException)):
        return "dependency_error"

    if isinstance(exception, (
        asyncpg.PostgresError,
        asyncio.TimeoutError,
        ConnectionError,
        OSError,
    )):
        return "infra_error"

    return "unexpected_error"


def log_worker_iteration_start(worker_name: str, iteration_number: Optional[int] = None, **kwargs) -> str:
    """Log worker iteration start; returns the iteration correlation id."""
    correlation_id = generate_correlation_id()
    set_correlation_id(correlation_id)

    log_data = {
        "event": "ITERATION_START",
        "worker": worker_name,
        "correlation_id": correlation_id,
        "component": "worker",
        "operation": f"{worker_name}_iteration",
        "timestamp": _timestamp(),
    }
    if iteration_number is not None:
        log_data["iteration_number"] = iteration_number
    if kwargs:
        log_data.update(kwargs)

    _emit(log_data)
    return correlation_id


def log_worker_iteration_end(
    worker_name: str,
    outcome: str,  # "success" | "failed" | "skipped"
    error_type: Optional[str] = None,
    duration_ms: Optional[float] = None,
    **kwargs
) -> None:
    log_data = {
        "event": "ITERATION_END",
        "worker": worker_name,
        "correlation_id": get_correlation_id(),
        "component": "worker",
        "operation": f"{worker_name}_iteration",
        "outcome": outcome,
        "timestamp": _timestamp(),
    }
    if error_type:
        log_data["error_type"] = error_type
    if duration_ms is not None:
        log_data["duration_ms"] = round(duration_ms, 2)
    if kwargs:
        log_data.update(kwargs)

    _emit(log_data, outcome)
