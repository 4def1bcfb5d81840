"""
Centralized safe wrapper around the aiogram Bot.

Every outbound call returns an ApiResult and NEVER raises: a failed send,
edit or delete is logged and reported to the caller, so it can not abort a
ledger mutation that is already committed. Successful sends are tracked in
the MessageRegistry for /clear.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from aiogram import Bot
from aiogram.exceptions import (
    TelegramAPIError,
    TelegramBadRequest,
    TelegramConflictError,
    TelegramEntityTooLarge,
    TelegramForbiddenError,
    TelegramNotFound,
    TelegramRetryAfter,
    TelegramServerError,
    TelegramUnauthorizedError,
)
from aiogram.types import (
    ForceReply,
    InlineKeyboardButton,
    InlineKeyboardMarkup,
    KeyboardButton,
    KeyboardButtonRequestUsers,
    LabeledPrice,
    ReplyKeyboardMarkup,
    ReplyKeyboardRemove,
)

import config
from app.core.message_registry import MessageRegistry

logger = logging.getLogger(__name__)

INVOICE_START_PARAMETER = "vpn-subscription"

_STATUS_BY_ERROR = (
    (TelegramBadRequest, 400),
    (TelegramUnauthorizedError, 401),
    (TelegramForbiddenError, 403),
    (TelegramNotFound, 404),
    (TelegramConflictError, 409),
    (TelegramEntityTooLarge, 413),
    (TelegramRetryAfter, 429),
    (TelegramServerError, 500),
)


@dataclass(frozen=True)
class ApiResult:
    ok: bool
    status_code: Optional[int] = None
    error: Optional[str] = None
    message_id: Optional[int] = None


@dataclass(frozen=True)
class InlineButton:
    """Inline button: exactly one of callback_data / url"""
    text: str
    callback_data: Optional[str] = None
    url: Optional[str] = None


def build_inline_markup(rows: Sequence[Sequence[InlineButton]]) -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(
        inline_keyboard=[
            [
                InlineKeyboardButton(text=button.text, url=button.url)
                if button.url
                else InlineKeyboardButton(text=button.text, callback_data=button.callback_data)
                for button in row
            ]
            for row in rows
        ]
    )


def _status_code(error: Exception) -> Optional[int]:
    for error_class, status in _STATUS_BY_ERROR:
        if isinstance(error, error_class):
            return status
    return None


class TelegramTransport:
    """Send/edit/delete/answer primitives over one aiogram Bot."""

    def __init__(self, bot: Bot, registry: Optional[MessageRegistry] = None):
        self.bot = bot
        self.registry = registry

    def _failed(self, method: str, chat_id, error: Exception) -> ApiResult:
        status = _status_code(error)
        if isinstance(error, TelegramForbiddenError):
            logger.warning(f"TELEGRAM_{method.upper()}_FORBIDDEN [chat_id={chat_id}]")
        else:
            logger.error(
                f"TELEGRAM_{method.upper()}_FAILED [chat_id={chat_id}, status={status}, "
                f"error={type(error).__name__}: {error}]"
            )
        return ApiResult(ok=False, status_code=status, error=str(error) or type(error).__name__)

    def _unexpected(self, method: str, chat_id, error: Exception) -> ApiResult:
        logger.exception(f"TELEGRAM_{method.upper()}_UNEXPECTED_ERROR [chat_id={chat_id}, error={type(error).__name__}]")
        return ApiResult(ok=False, error=str(error) or type(error).__name__)

    def _sent(self, chat_id: int, message) -> ApiResult:
        message_id = getattr(message, "message_id", None)
        if self.registry is not None and message_id is not None:
            self.registry.track(chat_id, message_id)
        return ApiResult(ok=True, status_code=200, message_id=message_id)

    async def send_text(
        self,
        chat_id: int,
        text: str,
        parse_mode: Optional[str] = None,
        protect_content: bool = False,
        remove_keyboard: bool = False,
    ) -> ApiResult:
        try:
            message = await self.bot.send_message(
                chat_id=chat_id,
                text=text,
                parse_mode=parse_mode,
                protect_content=protect_content or None,
                reply_markup=ReplyKeyboardRemove() if remove_keyboard else None,
            )
        except (TelegramAPIError, asyncio.TimeoutError, OSError) as e:
            return self._failed("send_message", chat_id, e)
        except Exception as e:
            return self._unexpected("send_message", chat_id, e)
        return self._sent(chat_id, message)

    async def send_photo(self, chat_id: int, photo: str, caption: Optional[str] = None) -> ApiResult:
        try:
            message = await self.bot.send_photo(chat_id=chat_id, photo=photo, caption=caption)
        except (TelegramAPIError, asyncio.TimeoutError, OSError) as e:
            return self._failed("send_photo", chat_id, e)
        except Exception as e:
            return self._unexpected("send_photo", chat_id, e)
        return self._sent(chat_id, message)

    async def send_inline_keyboard(
        self,
        chat_id: int,
        text: str,
        rows: Sequence[Sequence[InlineButton]],
        parse_mode: Optional[str] = None,
    ) -> ApiResult:
        try:
            message = await self.bot.send_message(
                chat_id=chat_id,
                text=text,
                parse_mode=parse_mode,
                reply_markup=build_inline_markup(rows),
            )
        except (TelegramAPIError, asyncio.TimeoutError, OSError) as e:
            return self._failed("send_inline_keyboard", chat_id, e)
        except Exception as e:
            return self._unexpected("send_inline_keyboard", chat_id, e)
        return self._sent(chat_id, message)

    async def send_user_picker(self, chat_id: int, text: str, button_text: str, request_id: int) -> ApiResult:
        """One-time reply keyboard with a "choose a user" button (users_shared answer)."""
        try:
            markup = ReplyKeyboardMarkup(
                keyboard=[[
                    KeyboardButton(
                        text=button_text,
                        request_users=KeyboardButtonRequestUsers(
                            request_id=request_id,
                            user_is_bot=False,
                            max_quantity=1,
                        ),
                    )
                ]],
                resize_keyboard=True,
                one_time_keyboard=True,
            )
            message = await self.bot.send_message(chat_id=chat_id, text=text, reply_markup=markup)
        except (TelegramAPIError, asyncio.TimeoutError, OSError) as e:
            return self._failed("send_user_picker", chat_id, e)
        except Exception as e:
            return self._unexpected("send_user_picker", chat_id, e)
        return self._sent(chat_id, message)

    async def send_force_reply(self, chat_id: int, text: str, placeholder: Optional[str] = None) -> ApiResult:
        try:
            message = await self.bot.send_message(
                chat_id=chat_id,
                text=text,
                reply_markup=ForceReply(force_reply=True, input_field_placeholder=placeholder),
            )
        except (TelegramAPIError, asyncio.TimeoutError, OSError) as e:
            return self._failed("send_force_reply", chat_id, e)
        except Exception as e:
            return self._unexpected("send_force_reply", chat_id, e)
        return self._sent(chat_id, message)

    async def edit_message_text(
        self,
        chat_id: int,
        message_id: int,
        text: str,
        rows: Optional[Sequence[Sequence[InlineButton]]] = None,
        parse_mode: Optional[str] = None,
    ) -> ApiResult:
        try:
            await self.bot.edit_message_text(
                text=text,
                chat_id=chat_id,
                message_id=message_id,
                parse_mode=parse_mode,
                reply_markup=build_inline_markup(rows) if rows is not None else None,
            )
        except TelegramBadRequest as e:
            # повторное нажатие той же кнопки
            if "message is not modified" in str(e).lower():
                logger.debug(f"TELEGRAM_EDIT_NOT_MODIFIED [chat_id={chat_id}, message_id={message_id}]")
                return ApiResult(ok=True, status_code=200, message_id=message_id)
            return self._failed("edit_message_text", chat_id, e)
        except (TelegramAPIError, asyncio.TimeoutError, OSError) as e:
            return self._failed("edit_message_text", chat_id, e)
        except Exception as e:
            return self._unexpected("edit_message_text", chat_id, e)
        return ApiResult(ok=True, status_code=200, message_id=message_id)

    async def delete_message(self, chat_id: int, message_id: int) -> ApiResult:
        try:
            await self.bot.delete_message(chat_id=chat_id, message_id=message_id)
        except (TelegramAPIError, asyncio.TimeoutError, OSError) as e:
            # sweep по чужим/старым id: ошибки ожидаемы
            logger.debug(f"TELEGRAM_DELETE_FAILED [chat_id={chat_id}, message_id={message_id}, error={e}]")
            return ApiResult(ok=False, status_code=_status_code(e), error=str(e) or type(e).__name__)
        except Exception as e:
            return self._unexpected("delete_message", chat_id, e)
        if self.registry is not None:
            self.registry.forget(chat_id, message_id)
        return ApiResult(ok=True, status_code=200, message_id=message_id)

    async def answer_callback(self, callback_query_id: str, text: Optional[str] = None) -> ApiResult:
        try:
            await self.bot.answer_callback_query(callback_query_id=callback_query_id, text=text)
        except (TelegramAPIError, asyncio.TimeoutError, OSError) as e:
            return self._failed("answer_callback", None, e)
        except Exception as e:
            return self._unexpected("answer_callback", None, e)
        return ApiResult(ok=True, status_code=200)

    async def answer_pre_checkout(
        self,
        pre_checkout_query_id: str,
        ok: bool,
        error_message: Optional[str] = None,
    ) -> ApiResult:
        try:
            await self.bot.answer_pre_checkout_query(
                pre_checkout_query_id=pre_checkout_query_id,
                ok=ok,
                error_message=None if ok else error_message,
            )
        except (TelegramAPIError, asyncio.TimeoutError, OSError) as e:
            return self._failed("answer_pre_checkout", None, e)
        except Exception as e:
            return self._unexpected("answer_pre_checkout", None, e)
        return ApiResult(ok=True, status_code=200)

    async def send_invoice(
        self,
        chat_id: int,
        title: str,
        description: str,
        payload: str,
        stars: int,
    ) -> ApiResult:
        """Telegram Stars invoice: empty provider token, currency XTR, one price line."""
        try:
            message = await self.bot.send_invoice(
                chat_id=chat_id,
                title=title,
                description=description,
                payload=payload,
                provider_token="",
                currency=config.STARS_CURRENCY,
                prices=[LabeledPrice(label=title, amount=stars)],
                start_parameter=INVOICE_START_PARAMETER,
            )
        except (TelegramAPIError, asyncio.TimeoutError, OSError) as e:
            return self._failed("send_invoice", chat_id, e)
        except Exception as e:
            return self._unexpected("send_invoice", chat_id, e)
        return self._sent(chat_id, message)

