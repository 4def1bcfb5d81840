"""
Per-update handler context and result helpers.

Branch handlers receive an UpdateContext built once by the dispatcher and
return plain dicts; the HTTP layer serialises them with status 200.
"""
from dataclasses import dataclass
from typing import Any, Dict, Optional

from app.core.message_registry import MessageRegistry
from app.utils.telegram_safe import TelegramTransport


@dataclass
class UpdateContext:
    transport: TelegramTransport
    registry: MessageRegistry
    tg_id: str
    chat_id: Optional[int]
    language: str
    nickname: Optional[str] = None
    first_name: Optional[str] = None
    message_id: Optional[int] = None
    bot_username: Optional[str] = None


def processed(**fields: Any) -> Dict[str, Any]:
    result = {"ok": True, "processed": True}
    result.update(fields)
    return result


def not_processed(reason: str, **fields: Any) -> Dict[str, Any]:
    result = {"ok": True, "processed": False, "reason": reason}
    result.update(fields)
    return result


def callback_result(handled: bool = True, **fields: Any) -> Dict[str, Any]:
    return processed(callback_handled=handled, **fields)
