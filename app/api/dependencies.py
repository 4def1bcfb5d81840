"""
Shared-secret guards for the HTTP routes.

Failures are raised as ApiError and rendered by the handler registered in
create_app() as {"ok": false, "message": ...}.
"""
import logging
from typing import Any, Dict, Optional

from fastapi import Header, Request

import config
from app.utils.security import log_security_warning, mask_secret, secrets_match

logger = logging.getLogger(__name__)


class ApiError(Exception):
    def __init__(self, status_code: int, message: str, **extra: Any):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.extra = extra

    def to_dict(self) -> Dict[str, Any]:
        body = {"ok": False, "message": self.message}
        body.update(self.extra)
        return body


def _client_host(request: Request) -> str:
    return request.client.host if request.client else "unknown"


async def require_telegram_secret(
    request: Request,
    x_telegram_secret: Optional[str] = Header(default=None),
    x_telegram_bot_api_secret_token: Optional[str] = Header(default=None),
) -> None:
    if not config.TG_SECRET:
        logger.error("TG_SECRET not configured")
        raise ApiError(500, "TG_SECRET is not configured.")

    provided = x_telegram_secret if x_telegram_secret is not None else x_telegram_bot_api_secret_token
    if not secrets_match(provided, config.TG_SECRET):
        log_security_warning("TELEGRAM_SECRET_MISMATCH", ip=_client_host(request), provided=mask_secret(provided))
        raise ApiError(401, "Unauthorized: invalid Telegram secret.")


async def require_admin_secret(
    request: Request,
    x_admin_secret: Optional[str] = Header(default=None),
) -> None:
    if not config.ADMIN_SECRET:
        logger.error("ADMIN_SECRET not configured")
        raise ApiError(500, "ADMIN_SECRET is not configured.")

    if not secrets_match(x_admin_secret, config.ADMIN_SECRET):
        log_security_warning("ADMIN_SECRET_MISMATCH", ip=_client_host(request), provided=mask_secret(x_admin_secret))
        raise ApiError(401, "Unauthorized: invalid admin secret.")
