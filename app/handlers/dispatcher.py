"""
Webhook update dispatcher.

One update in, one result dict out. Branches are tried in order:
pre-checkout query, callback query, message (payment first, then private
chat commands). Nothing here raises to the HTTP layer for an expected
condition; every outcome is a dict with ok/processed.
"""
import logging
import time
from typing import Any, Dict, Optional

from aiogram.types import CallbackQuery, Message, Update
from pydantic import ValidationError

from app.core.message_registry import MessageRegistry
from app.handlers.callbacks import callback_answer_key, route_callback
from app.handlers.common.context import UpdateContext, callback_result, not_processed
from app.handlers.payments import handle_pre_checkout, handle_successful_payment
from app.handlers.user import (
    handle_clear,
    handle_promo_reply,
    handle_start_or_menu,
    handle_users_shared,
    is_promo_reply,
)
from app.i18n import get_text as i18n_get_text
from app.i18n import resolve_language
from app.utils.callback_data import decode_callback_data
from app.utils.logging_helpers import classify_error, log_handler_entry, log_handler_exit
from app.utils.security import get_telegram_command, log_security_warning
from app.utils.telegram_safe import TelegramTransport

logger = logging.getLogger(__name__)

HANDLED_COMMANDS = ("/start", "/menu", "/clear")


class WebhookDispatcher:
    def __init__(
        self,
        transport: TelegramTransport,
        registry: MessageRegistry,
        bot_username: Optional[str] = None,
    ):
        self.transport = transport
        self.registry = registry
        self.bot_username = bot_username or None

    def _context(self, tg_id: str, chat_id: Optional[int], language_code: Optional[str], **fields) -> UpdateContext:
        return UpdateContext(
            transport=self.transport,
            registry=self.registry,
            tg_id=tg_id,
            chat_id=chat_id,
            language=resolve_language(language_code),
            bot_username=self.bot_username,
            **fields,
        )

    async def process_update(self, body: Any) -> Dict[str, Any]:
        try:
            update = Update.model_validate(body)
        except ValidationError:
            logger.warning("WEBHOOK_INVALID_PAYLOAD")
            return not_processed("Invalid Telegram update payload.")

        branch = _branch_name(update)
        telegram_id = _sender_id(update)
        log_handler_entry(
            "webhook",
            telegram_id=telegram_id,
            operation=branch,
            correlation_id=str(update.update_id),
        )
        start = time.monotonic()
        try:
            if update.pre_checkout_query is not None:
                result = await handle_pre_checkout(self.transport, update.pre_checkout_query)
            elif update.callback_query is not None:
                result = await self._process_callback(update.callback_query)
            else:
                result = await self._process_message(update.message or update.edited_message)
        except Exception as e:
            log_handler_exit(
                "webhook",
                outcome="failed",
                telegram_id=telegram_id,
                operation=branch,
                error_type=classify_error(e),
                duration_ms=(time.monotonic() - start) * 1000,
            )
            raise

        log_handler_exit(
            "webhook",
            outcome="success" if result.get("processed") else "degraded",
            telegram_id=telegram_id,
            operation=branch,
            duration_ms=(time.monotonic() - start) * 1000,
        )
        return result

    async def _process_callback(self, query: CallbackQuery) -> Dict[str, Any]:
        tg_id = str(query.from_user.id)
        message = query.message
        chat = message.chat if message is not None else None

        if chat is not None and chat.type == "private" and query.from_user.id != chat.id:
            log_security_warning("CALLBACK_OWNERSHIP_MISMATCH", telegram_id=tg_id, chat_id=chat.id)
            return callback_result(handled=False, reason="Callback ownership mismatch.")

        action = decode_callback_data(query.data)
        language = resolve_language(query.from_user.language_code)
        answer = await self.transport.answer_callback(query.id, i18n_get_text(language, callback_answer_key(action)))
        if not answer.ok:
            logger.warning(f"CALLBACK_ANSWER_FAILED [tg_id={tg_id}, status={answer.status_code}]")

        if action is None:
            logger.info(f"CALLBACK_UNKNOWN [tg_id={tg_id}]")
            return callback_result(handled=False)
        if chat is None:
            return callback_result(handled=False, reason="Callback chat is missing.")

        ctx = self._context(
            tg_id,
            chat.id,
            query.from_user.language_code,
            nickname=query.from_user.username,
            first_name=query.from_user.first_name,
            message_id=message.message_id,
        )
        return await route_callback(ctx, action)

    async def _process_message(self, message: Optional[Message]) -> Dict[str, Any]:
        if message is None:
            return not_processed("No message in update.")

        sender = message.from_user
        chat = message.chat

        if message.successful_payment is not None:
            if sender is None:
                return not_processed("Payment update is missing sender.")
            ctx = self._context(
                str(sender.id),
                chat.id,
                sender.language_code,
                nickname=sender.username,
                first_name=sender.first_name,
                message_id=message.message_id,
            )
            return await handle_successful_payment(ctx, message.successful_payment)

        if chat.type != "private":
            return not_processed("Only private chat commands are handled.")
        if sender is not None and sender.id != chat.id:
            log_security_warning("MESSAGE_SENDER_CHAT_MISMATCH", telegram_id=str(sender.id), chat_id=chat.id)
            return not_processed("Sender/chat mismatch detected.")

        ctx = self._context(
            str(sender.id) if sender is not None else str(chat.id),
            chat.id,
            sender.language_code if sender is not None else None,
            nickname=sender.username if sender is not None else None,
            first_name=sender.first_name if sender is not None else None,
            message_id=message.message_id,
        )

        if sender is not None:
            if message.users_shared is not None:
                return await handle_users_shared(ctx, message.users_shared)
            # ответ на промо-запрос, если это не команда
            if is_promo_reply(message) and not (message.text or "").lstrip().startswith("/"):
                return await handle_promo_reply(ctx, message.text)

        command = get_telegram_command(message.text, self.bot_username)
        if command.suspicious:
            log_security_warning("COMMAND_BLOCKED", telegram_id=ctx.tg_id, reason=command.reason)
            return not_processed(command.reason, blocked=True)
        if command.command not in HANDLED_COMMANDS:
            return not_processed(command.reason or "Command is not handled.")

        if command.command == "/clear":
            return await handle_clear(ctx)

        if sender is None:
            return not_processed("Telegram user context is missing.")
        return await handle_start_or_menu(ctx, command)


def _branch_name(update: Update) -> str:
    if update.pre_checkout_query is not None:
        return "pre_checkout"
    if update.callback_query is not None:
        return "callback"
    message = update.message or update.edited_message
    if message is not None and message.successful_payment is not None:
        return "successful_payment"
    return "message"


def _sender_id(update: Update) -> Optional[str]:
    if update.pre_checkout_query is not None:
        return str(update.pre_checkout_query.from_user.id)
    if update.callback_query is not None:
        return str(update.callback_query.from_user.id)
    message = update.message or update.edited_message
    if message is not None and message.from_user is not None:
        return str(message.from_user.id)
    return None
