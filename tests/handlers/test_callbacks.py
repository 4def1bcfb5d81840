"""
Callback handlers called directly with a decoded action.
"""
import json
from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock, patch

import pytest

from app.handlers.callbacks import route_callback
from app.services.gifts.exceptions import GiftNotFoundError
from app.services.gifts.service import Gift, GiftActivationResult
from app.services.subscriptions.exceptions import InsufficientBalanceError
from app.services.subscriptions.service import SubscriptionPrice
from app.services.vpn.service import VpsConfig
from app.utils.callback_data import decode_callback_data
from app.utils.telegram_safe import ApiResult


async def press(ctx, data):
    return await route_callback(ctx, decode_callback_data(data))


class TestPurchase:
    @pytest.mark.asyncio
    async def test_invoice_for_plan(self, make_ctx, transport, price_3m):
        ctx = make_ctx(language="en")
        with patch("app.handlers.callbacks.purchase.get_subscription_price_by_months",
                   AsyncMock(return_value=price_3m)):
            result = await press(ctx, "buy:plan:3")

        assert result == {"ok": True, "processed": True, "callback_handled": True, "invoice_sent": True}
        kwargs = transport.send_invoice.call_args.kwargs
        assert kwargs["stars"] == 450
        assert json.loads(kwargs["payload"]) == {"action": "subscription", "months": 3, "tgId": "1001"}

    @pytest.mark.asyncio
    async def test_unknown_plan(self, make_ctx, transport):
        with patch("app.handlers.callbacks.purchase.get_subscription_price_by_months", AsyncMock(return_value=None)):
            result = await press(make_ctx(language="en"), "buy:plan:7")

        assert result["invoice_sent"] is False
        transport.send_invoice.assert_not_awaited()
        assert "unavailable" in transport.send_text.call_args.args[1]

    @pytest.mark.asyncio
    async def test_placeholder_method(self, make_ctx, transport):
        result = await press(make_ctx(), "buy:method:tbd_1")
        assert result["sent"] is True
        transport.send_inline_keyboard.assert_not_awaited()


class TestReferralProlongation:
    @pytest.mark.asyncio
    async def test_nothing_affordable(self, make_ctx, transport, make_user, price_3m):
        with patch("app.handlers.callbacks.referrals.get_user", AsyncMock(return_value=make_user(earned="1.00"))), \
             patch("app.handlers.callbacks.referrals.list_subscription_prices", AsyncMock(return_value=[price_3m])):
            await press(make_ctx(language="en"), "referals:prolong")

        assert transport.send_text.call_args.args[1] == "Not enough funds to pay for a subscription yet."

    @pytest.mark.asyncio
    async def test_only_affordable_plans_listed(self, make_ctx, transport, make_user, price_3m):
        cheap = SubscriptionPrice(months=1, stars=150, usdt=Decimal("3.49"), rubles=299)
        with patch("app.handlers.callbacks.referrals.get_user", AsyncMock(return_value=make_user(earned="5.00"))), \
             patch("app.handlers.callbacks.referrals.list_subscription_prices",
                   AsyncMock(return_value=[cheap, price_3m])):
            await press(make_ctx(), "referals:prolong")

        rows = transport.send_inline_keyboard.call_args.args[2]
        assert [row[0].callback_data for row in rows] == ["referals:balance_plan:1"]

    @pytest.mark.asyncio
    async def test_insufficient_at_debit_time(self, make_ctx, transport, price_3m):
        with patch("app.handlers.callbacks.referrals.get_subscription_price_by_months",
                   AsyncMock(return_value=price_3m)), \
             patch("app.handlers.callbacks.referrals.activate_subscription_from_balance",
                   AsyncMock(side_effect=InsufficientBalanceError("1001", price_3m.usdt, Decimal("1.00")))):
            result = await press(make_ctx(), "referals:balance_plan:3")

        assert result["prolonged"] is False

    @pytest.mark.asyncio
    async def test_prolonged(self, make_ctx, make_user, price_3m):
        with patch("app.handlers.callbacks.referrals.get_subscription_price_by_months",
                   AsyncMock(return_value=price_3m)), \
             patch("app.handlers.callbacks.referrals.activate_subscription_from_balance",
                   AsyncMock(return_value=make_user(status="active"))) as activate:
            result = await press(make_ctx(nickname="alice"), "referals:balance_plan:3")

        assert result["prolonged"] is True
        activate.assert_awaited_once_with("1001", "alice", 3, Decimal("9.99"))


class TestCountries:
    @pytest.mark.asyncio
    async def test_expired_user_gated(self, make_ctx, transport, make_user):
        expired = make_user(status="expired", active=False, until=date(2020, 1, 1))
        with patch("app.handlers.callbacks.countries.get_user", AsyncMock(return_value=expired)), \
             patch("app.handlers.callbacks.countries.get_vps_config", AsyncMock()) as load_config:
            await press(make_ctx(language="en"), "countries:vps:0b9c5a0e-6f7e-4d43-9b0c-0f2b5e7b6a11")

        load_config.assert_not_awaited()
        assert transport.send_inline_keyboard.call_args.args[1].startswith("TO SEE THE SERVERS")

    @pytest.mark.asyncio
    async def test_configs_sent_protected(self, make_ctx, transport, make_user):
        vps_config = VpsConfig(nickname="NL-1", config_list=["vless://a", "vless://b"])
        with patch("app.handlers.callbacks.countries.get_user", AsyncMock(return_value=make_user())), \
             patch("app.handlers.callbacks.countries.get_vps_config", AsyncMock(return_value=vps_config)):
            result = await press(make_ctx(), "countries:vps:0b9c5a0e-6f7e-4d43-9b0c-0f2b5e7b6a11")

        assert result["sent"] is True
        calls = transport.send_text.call_args_list
        assert len(calls) == 3
        assert all(call.kwargs["protect_content"] is True for call in calls)
        assert calls[1].args[1] == "<code>vless://a</code>"


class TestHowTo:
    @pytest.mark.asyncio
    async def test_photo_fallback_to_text(self, make_ctx, transport):
        transport.send_photo.return_value = ApiResult(ok=False, status_code=400)
        result = await press(make_ctx(), "howto:ios")

        assert result["sent"] is True
        assert transport.send_text.call_args.args[1].startswith("https://ibb.co/")

    @pytest.mark.asyncio
    async def test_android_tv_steps(self, make_ctx, transport):
        await press(make_ctx(), "howto:android_tv")
        assert transport.send_photo.await_count == 7


class TestGifts:
    @pytest.mark.asyncio
    async def test_activate(self, make_ctx, transport, make_user):
        activation = GiftActivationResult(
            gift=Gift(giver_tg_id="2002", giver_name="Bob", months=3, granted_at="2030-01-01"),
            user=make_user(until=date(2030, 4, 10)),
        )
        with patch("app.handlers.callbacks.gifts.activate_gift", AsyncMock(return_value=activation)):
            result = await press(make_ctx(language="en"), "gift:activate:0")

        assert result["gift_activated"] is True
        assert "2030-04-10" in transport.send_text.call_args.args[1]

    @pytest.mark.asyncio
    async def test_activate_stale_index(self, make_ctx, transport):
        with patch("app.handlers.callbacks.gifts.activate_gift",
                   AsyncMock(side_effect=GiftNotFoundError("1001", 4))):
            result = await press(make_ctx(language="en"), "gift:activate:4")

        assert result["gift_activated"] is False
        assert transport.send_text.call_args.args[1].startswith("Gift not found")

    @pytest.mark.asyncio
    async def test_self_gift_plan_refused(self, make_ctx, transport):
        await press(make_ctx(), "gift:plan:3:1001")
        transport.send_invoice.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_gift_invoice(self, make_ctx, transport, price_3m):
        with patch("app.handlers.callbacks.gifts.get_subscription_price_by_months", AsyncMock(return_value=price_3m)), \
             patch("app.handlers.callbacks.gifts.get_user", AsyncMock(return_value=None)):
            result = await press(make_ctx(), "gift:plan:3:2002")

        assert result["invoice_sent"] is True
        payload = json.loads(transport.send_invoice.call_args.kwargs["payload"])
        assert payload == {"action": "gift", "months": 3, "tgId": "1001", "recipientTgId": "2002"}
