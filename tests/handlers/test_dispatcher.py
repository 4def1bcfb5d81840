"""
End-to-end routing of raw Telegram updates through WebhookDispatcher.

Services are patched where the handlers import them; the transport is the
AsyncMock double from conftest.
"""
from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock, patch

import pytest

import config
from app.handlers.dispatcher import WebhookDispatcher
from app.services.payments.exceptions import PaymentAlreadyProcessedError, PaymentAmountMismatchError
from app.services.payments.service import (
    ACTION_GIFT,
    ACTION_SUBSCRIPTION,
    InvoicePayload,
    PaymentFinalizationResult,
    ValidatedPayment,
    build_gift_invoice_payload,
    build_subscription_invoice_payload,
)
from app.services.promo.service import BloggerPromo
from app.services.referrals.service import ReferrerLink
from app.services.subscriptions.service import SubscriptionPrice
from app.services.users.service import EnsureUserResult
from app.utils.security import REASON_INJECTION
from app.utils.telegram_safe import ApiResult

ALICE = {"id": 1001, "is_bot": False, "first_name": "Alice", "username": "alice", "language_code": "en"}
PRIVATE_CHAT = {"id": 1001, "type": "private"}
PRICE = SubscriptionPrice(months=3, stars=450, usdt=Decimal("9.99"), rubles=799)


def message_update(text=None, update_id=1, **fields):
    message = {
        "message_id": fields.pop("message_id", 10),
        "date": 1700000000,
        "chat": fields.pop("chat", PRIVATE_CHAT),
        "from": fields.pop("sender", ALICE),
    }
    if text is not None:
        message["text"] = text
    message.update(fields)
    return {"update_id": update_id, "message": message}


def callback_update(data, chat=PRIVATE_CHAT, sender=ALICE):
    return {
        "update_id": 2,
        "callback_query": {
            "id": "cb-1",
            "from": sender,
            "chat_instance": "ci-1",
            "data": data,
            "message": {"message_id": 77, "date": 1700000000, "chat": chat, "text": "menu"},
        },
    }


def pre_checkout_update(amount=450):
    return {
        "update_id": 3,
        "pre_checkout_query": {
            "id": "pcq-1",
            "from": ALICE,
            "currency": "XTR",
            "total_amount": amount,
            "invoice_payload": build_subscription_invoice_payload("1001", 3),
        },
    }


def payment_update(payload=None):
    return message_update(
        update_id=4,
        successful_payment={
            "currency": "XTR",
            "total_amount": 450,
            "invoice_payload": payload or build_subscription_invoice_payload("1001", 3),
            "telegram_payment_charge_id": "charge-1",
            "provider_payment_charge_id": "",
        },
    )


@pytest.fixture
def dispatcher(transport, registry):
    return WebhookDispatcher(transport, registry, bot_username="starlink_test_bot")


class TestMessageGuards:
    @pytest.mark.asyncio
    async def test_invalid_payload(self, dispatcher):
        result = await dispatcher.process_update({"message": {"text": "/start"}})
        assert result == {"ok": True, "processed": False, "reason": "Invalid Telegram update payload."}

    @pytest.mark.asyncio
    async def test_no_message(self, dispatcher):
        result = await dispatcher.process_update({"update_id": 1})
        assert result["reason"] == "No message in update."

    @pytest.mark.asyncio
    async def test_group_chat_ignored(self, dispatcher, transport):
        result = await dispatcher.process_update(message_update("/menu", chat={"id": -100, "type": "supergroup"}))
        assert result["processed"] is False
        assert result["reason"] == "Only private chat commands are handled."
        transport.send_inline_keyboard.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_sender_chat_mismatch(self, dispatcher):
        result = await dispatcher.process_update(message_update("/menu", chat={"id": 2002, "type": "private"}))
        assert result["reason"] == "Sender/chat mismatch detected."

    @pytest.mark.asyncio
    async def test_suspicious_command_blocked(self, dispatcher):
        result = await dispatcher.process_update(message_update("/start user_id=123"))
        assert result == {"ok": True, "processed": False, "reason": REASON_INJECTION, "blocked": True}

    @pytest.mark.asyncio
    async def test_plain_text_not_handled(self, dispatcher):
        result = await dispatcher.process_update(message_update("hello"))
        assert result["processed"] is False
        assert result["reason"] == "Command is not handled."

    @pytest.mark.asyncio
    async def test_other_bot_command(self, dispatcher):
        result = await dispatcher.process_update(message_update("/menu@other_bot"))
        assert result["reason"] == "Command is addressed to a different bot."


class TestCommands:
    @pytest.mark.asyncio
    async def test_start_new_user_with_referrer(self, dispatcher, transport, make_user):
        referrer = make_user(tg_id="77", tg_nickname="boss")
        ensured = EnsureUserResult(user=make_user(status="trial"), created=True)
        with patch("app.handlers.user.commands.get_user", AsyncMock(return_value=referrer)), \
             patch("app.handlers.user.commands.ensure_user", AsyncMock(return_value=ensured)) as ensure:
            result = await dispatcher.process_update(message_update("/start ref_77"))

        assert result == {"ok": True, "processed": True, "command": "/start", "sent": True}
        link = ensure.call_args.kwargs["referred_by"]
        assert isinstance(link, ReferrerLink)
        assert (link.tg_id, link.tg_nickname) == ("77", "boss")
        text = transport.send_inline_keyboard.call_args.args[1]
        assert f"{config.TRIAL_DAYS} days" in text

    @pytest.mark.asyncio
    async def test_start_self_referral_ignored(self, dispatcher, make_user):
        ensured = EnsureUserResult(user=make_user(), created=False)
        with patch("app.handlers.user.commands.get_user", AsyncMock()) as lookup, \
             patch("app.handlers.user.commands.ensure_user", AsyncMock(return_value=ensured)) as ensure:
            await dispatcher.process_update(message_update("/start ref_1001"))

        lookup.assert_not_awaited()
        assert ensure.call_args.kwargs["referred_by"] is None

    @pytest.mark.asyncio
    async def test_menu_for_existing_user(self, dispatcher, transport, make_user):
        ensured = EnsureUserResult(user=make_user(), created=False)
        with patch("app.handlers.user.commands.ensure_user", AsyncMock(return_value=ensured)):
            result = await dispatcher.process_update(message_update("/menu"))

        assert result["command"] == "/menu"
        chat_id, text, rows = transport.send_inline_keyboard.call_args.args
        assert chat_id == 1001
        assert text == "Main menu:"
        assert rows[0][0].callback_data == "menu:subscription_status"

    @pytest.mark.asyncio
    async def test_user_sync_failure(self, dispatcher, transport):
        with patch("app.handlers.user.commands.ensure_user", AsyncMock(side_effect=RuntimeError("db down"))):
            result = await dispatcher.process_update(message_update("/start"))

        assert result["processed"] is False
        assert result["reason"] == "Failed to sync user profile."
        transport.send_inline_keyboard.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_clear_counts(self, dispatcher, transport, registry, monkeypatch):
        monkeypatch.setattr(config, "CLEAR_SWEEP_WINDOW", 5)
        registry.track(1001, 50)

        async def _delete(chat_id, message_id):
            return ApiResult(ok=message_id != 7, status_code=200 if message_id != 7 else 400)

        transport.delete_message.side_effect = _delete
        result = await dispatcher.process_update(message_update("/clear", message_id=10))

        assert result == {
            "ok": True,
            "processed": True,
            "command": "/clear",
            "history_cleared": True,
            "attempted_count": 7,
            "deleted_count": 6,
            "failed_count": 1,
        }
        deleted_ids = sorted(call.args[1] for call in transport.delete_message.call_args_list)
        assert deleted_ids == [5, 6, 7, 8, 9, 10, 50]
        assert registry.owned_ids(1001) == []


class TestCallbacks:
    @pytest.mark.asyncio
    async def test_ownership_mismatch(self, dispatcher, transport):
        result = await dispatcher.process_update(callback_update("menu:faq", chat={"id": 2002, "type": "private"}))
        assert result["callback_handled"] is False
        assert result["reason"] == "Callback ownership mismatch."
        transport.answer_callback.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unknown_callback_answered(self, dispatcher, transport):
        result = await dispatcher.process_update(callback_update("admin:grant:1001"))
        assert result == {"ok": True, "processed": True, "callback_handled": False}
        transport.answer_callback.assert_awaited_once_with("cb-1", "Unknown action.")

    @pytest.mark.asyncio
    async def test_routed_callback(self, dispatcher, transport):
        result = await dispatcher.process_update(callback_update("menu:faq"))
        assert result["callback_handled"] is True
        transport.answer_callback.assert_awaited_once_with("cb-1", "Opening FAQ...")
        assert transport.send_inline_keyboard.call_args.args[1] == "Choose a question:"


class TestPayments:
    @pytest.mark.asyncio
    async def test_pre_checkout_accepted(self, dispatcher, transport):
        validated = ValidatedPayment(InvoicePayload(ACTION_SUBSCRIPTION, 3, "1001"), PRICE)
        with patch("app.handlers.payments.pre_checkout.validate_stars_payment", AsyncMock(return_value=validated)):
            result = await dispatcher.process_update(pre_checkout_update())

        assert result == {"ok": True, "processed": True, "pre_checkout_validated": True}
        assert transport.answer_pre_checkout.call_args.kwargs["ok"] is True

    @pytest.mark.asyncio
    async def test_pre_checkout_rejected(self, dispatcher, transport):
        with patch("app.handlers.payments.pre_checkout.validate_stars_payment",
                   AsyncMock(side_effect=PaymentAmountMismatchError("450 != 1"))):
            result = await dispatcher.process_update(pre_checkout_update(amount=1))

        assert result["pre_checkout_validated"] is False
        kwargs = transport.answer_pre_checkout.call_args.kwargs
        assert kwargs["ok"] is False
        assert kwargs["error_message"] == "Payment validation failed. Please retry from bot menu."

    @pytest.mark.asyncio
    async def test_subscription_payment_applied(self, dispatcher, transport, make_user):
        validated = ValidatedPayment(InvoicePayload(ACTION_SUBSCRIPTION, 3, "1001"), PRICE)
        finalized = PaymentFinalizationResult(
            applied=True, action=ACTION_SUBSCRIPTION, user=make_user(status="active", until=date(2030, 4, 10))
        )
        with patch("app.handlers.payments.successful_payment.validate_stars_payment",
                   AsyncMock(return_value=validated)), \
             patch("app.handlers.payments.successful_payment.finalize_stars_payment",
                   AsyncMock(return_value=finalized)) as finalize:
            result = await dispatcher.process_update(payment_update())

        assert result == {"ok": True, "processed": True, "payment_applied": True, "sent": True}
        assert finalize.call_args.args[1] == "charge-1"
        assert transport.send_text.call_args.args[0] == 1001

    @pytest.mark.asyncio
    async def test_duplicate_charge_not_reapplied(self, dispatcher, transport):
        validated = ValidatedPayment(InvoicePayload(ACTION_SUBSCRIPTION, 3, "1001"), PRICE)
        with patch("app.handlers.payments.successful_payment.validate_stars_payment",
                   AsyncMock(return_value=validated)), \
             patch("app.handlers.payments.successful_payment.finalize_stars_payment",
                   AsyncMock(side_effect=PaymentAlreadyProcessedError("charge-1"))):
            result = await dispatcher.process_update(payment_update())

        assert result == {"ok": True, "processed": True, "payment_applied": False, "duplicate": True}
        transport.send_text.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_invalid_payment_reports_support(self, dispatcher, transport):
        with patch("app.handlers.payments.successful_payment.validate_stars_payment",
                   AsyncMock(side_effect=PaymentAmountMismatchError("mismatch"))), \
             patch("app.handlers.payments.successful_payment.finalize_stars_payment", AsyncMock()) as finalize:
            result = await dispatcher.process_update(payment_update())

        assert result["payment_applied"] is False
        finalize.assert_not_awaited()
        assert transport.send_text.call_args.args[1] == (
            "Payment received, but an error occurred. Please contact support."
        )

    @pytest.mark.asyncio
    async def test_gift_payment_notifies_both_sides(self, dispatcher, transport, make_user):
        validated = ValidatedPayment(InvoicePayload(ACTION_GIFT, 3, "1001", recipient_tg_id="2002"), PRICE)
        finalized = PaymentFinalizationResult(
            applied=True, action=ACTION_GIFT, user=make_user(tg_id="2002", tg_nickname="bob")
        )
        with patch("app.handlers.payments.successful_payment.validate_stars_payment",
                   AsyncMock(return_value=validated)), \
             patch("app.handlers.payments.successful_payment.finalize_stars_payment",
                   AsyncMock(return_value=finalized)):
            result = await dispatcher.process_update(payment_update(build_gift_invoice_payload("1001", "2002", 3)))

        assert result["recipient_notified"] is True
        (payer_call, recipient_call) = transport.send_text.call_args_list
        assert payer_call.args[0] == 1001
        assert "@bob" in payer_call.args[1]
        assert recipient_call.args[0] == 2002

    @pytest.mark.asyncio
    async def test_handler_crash_propagates(self, dispatcher):
        with patch("app.handlers.dispatcher.handle_pre_checkout", AsyncMock(side_effect=RuntimeError("boom"))):
            with pytest.raises(RuntimeError):
                await dispatcher.process_update(pre_checkout_update())


class TestGiftMessages:
    @pytest.mark.asyncio
    async def test_users_shared_opens_methods(self, dispatcher, transport):
        update = message_update(users_shared={"request_id": 1, "users": [{"user_id": 2002, "username": "bob"}]})
        result = await dispatcher.process_update(update)

        assert result["gift_recipient_selected"] is True
        assert transport.send_text.call_args.kwargs["remove_keyboard"] is True
        rows = transport.send_inline_keyboard.call_args.args[2]
        assert rows[0][0].callback_data == "gift:method:tg_stars:2002"
        assert "@bob" in transport.send_inline_keyboard.call_args.args[1]

    @pytest.mark.asyncio
    async def test_users_shared_self(self, dispatcher, transport):
        update = message_update(users_shared={"request_id": 1, "users": [{"user_id": 1001}]})
        result = await dispatcher.process_update(update)

        assert result["gift_recipient_selected"] is False
        transport.send_inline_keyboard.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_promo_reply(self, dispatcher, transport):
        promo = BloggerPromo(promocode="BLOGGER10", bloger_name="Ivan", amount_of_discount=10)
        update = message_update(
            "blogger10",
            reply_to_message={
                "message_id": 9,
                "date": 1700000000,
                "chat": PRIVATE_CHAT,
                "text": "Send the promo code as a reply to this message:",
            },
        )
        with patch("app.handlers.user.gifts.get_blogger_promo_by_code", AsyncMock(return_value=promo)) as lookup:
            result = await dispatcher.process_update(update)

        lookup.assert_awaited_once_with("blogger10")
        assert result["promo_found"] is True
        assert "BLOGGER10" in transport.send_text.call_args.args[1]

    @pytest.mark.asyncio
    async def test_command_in_promo_reply_runs_command(self, dispatcher, make_user):
        ensured = EnsureUserResult(user=make_user(), created=False)
        update = message_update(
            "/start",
            reply_to_message={
                "message_id": 9,
                "date": 1700000000,
                "chat": PRIVATE_CHAT,
                "text": "Send the promo code as a reply to this message:",
            },
        )
        with patch("app.handlers.user.gifts.get_blogger_promo_by_code", AsyncMock()) as lookup, \
             patch("app.handlers.user.commands.ensure_user", AsyncMock(return_value=ensured)) as ensure:
            result = await dispatcher.process_update(update)

        lookup.assert_not_awaited()
        ensure.assert_awaited_once()
        assert result["command"] == "/start"
