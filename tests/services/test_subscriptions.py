"""
Unit tests for subscription service layer.
"""
from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock, patch

import pytest

from app.services.subscriptions.exceptions import InsufficientBalanceError
from app.services.subscriptions.service import (
    MENU_STATUS_ACTIVE,
    MENU_STATUS_EXPIRED,
    MENU_STATUS_TRIAL,
    MENU_STATUS_UNKNOWN,
    activate_subscription,
    activate_subscription_from_balance,
    calculate_new_expiry,
    get_subscription_price_by_months,
    has_access_to_servers,
    is_subscription_missing,
    list_subscription_prices,
    map_user_to_menu_status,
)

TODAY = date(2027, 3, 10)


class TestCalculateNewExpiry:
    def test_extends_from_future_expiry(self):
        assert calculate_new_expiry(date(2027, 4, 1), 1, today=TODAY) == date(2027, 5, 1)

    def test_past_expiry_starts_from_today(self):
        assert calculate_new_expiry(date(2026, 1, 1), 3, today=TODAY) == date(2027, 6, 10)

    def test_no_expiry_starts_from_today(self):
        assert calculate_new_expiry(None, 12, today=TODAY) == date(2028, 3, 10)

    def test_invalid_months(self):
        with pytest.raises(ValueError):
            calculate_new_expiry(None, 0, today=TODAY)


class TestStatusMapping:
    def test_menu_status(self, make_user):
        assert map_user_to_menu_status(None) == MENU_STATUS_UNKNOWN
        assert map_user_to_menu_status(make_user(status="live")) == MENU_STATUS_ACTIVE
        assert map_user_to_menu_status(make_user(status="ending")) == MENU_STATUS_TRIAL
        assert map_user_to_menu_status(make_user(status=None, active=True)) == MENU_STATUS_ACTIVE
        assert map_user_to_menu_status(make_user(status=None, active=False)) == MENU_STATUS_EXPIRED

    def test_access_requires_unexpired_subscription(self, make_user):
        assert has_access_to_servers(make_user(status="live", until=date(2027, 3, 10)), today=TODAY) is True
        assert has_access_to_servers(make_user(status="live", until=date(2027, 3, 9)), today=TODAY) is False
        assert has_access_to_servers(make_user(status=None, active=False), today=TODAY) is False
        assert has_access_to_servers(None, today=TODAY) is False

    def test_missing_subscription(self, make_user):
        assert is_subscription_missing(None) is True
        assert is_subscription_missing(make_user(status=None, active=False)) is True
        assert is_subscription_missing(make_user(status="ending")) is False


class TestCatalog:
    @pytest.mark.asyncio
    async def test_list_prices_in_catalog_order(self, fake_conn):
        fake_conn.fetch.return_value = [
            {"months": 1, "stars": 150, "usdt": Decimal("3.49"), "rubles": 299},
            {"months": 3, "stars": 450, "usdt": Decimal("9.99"), "rubles": 799},
        ]
        prices = await list_subscription_prices()
        assert [p.months for p in prices] == [1, 3]
        assert prices[1].usdt == Decimal("9.99")

    @pytest.mark.asyncio
    async def test_price_lookup_missing(self, fake_conn):
        fake_conn.fetchrow.return_value = None
        assert await get_subscription_price_by_months(5) is None


class TestActivation:
    @pytest.mark.asyncio
    async def test_paid_activation_sets_live(self, fake_conn, user_row):
        fake_conn.fetchrow.side_effect = [
            {"subscription_untill": None},
            user_row(subscription_status="live", subscription_untill=date(2030, 4, 10)),
        ]
        with patch("app.services.subscriptions.service.ensure_user", AsyncMock()) as ensure:
            user = await activate_subscription("1001", "alice", 3)

        ensure.assert_awaited_once()
        assert user.subscription_status == "live"
        update_sql, tg_id, new_until = fake_conn.fetchrow.call_args_list[1].args
        assert "subscription_status = 'live'" in update_sql
        assert tg_id == "1001"

    @pytest.mark.asyncio
    async def test_balance_prolongation_debits(self, fake_conn, user_row):
        fake_conn.fetchrow.side_effect = [
            {"subscription_untill": None, "earned_money": Decimal("12.00")},
            user_row(subscription_status="live", earned_money=Decimal("2.01")),
        ]
        with patch("app.services.subscriptions.service.ensure_user", AsyncMock()):
            user = await activate_subscription_from_balance("1001", "alice", 3, "9.99")

        assert user.earned_money == Decimal("2.01")
        assert fake_conn.fetchrow.call_args_list[1].args[2] == Decimal("9.99")

    @pytest.mark.asyncio
    async def test_balance_prolongation_insufficient(self, fake_conn):
        fake_conn.fetchrow.side_effect = [
            {"subscription_untill": None, "earned_money": Decimal("1.00")},
            None,
        ]
        with patch("app.services.subscriptions.service.ensure_user", AsyncMock()):
            with pytest.raises(InsufficientBalanceError) as exc_info:
                await activate_subscription_from_balance("1001", "alice", 3, "9.99")

        assert exc_info.value.required == Decimal("9.99")
        assert exc_info.value.available == Decimal("1.00")
