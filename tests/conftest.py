"""
Pytest configuration and shared fixtures.

Environment is pinned to APP_ENV=local before config is imported anywhere,
so the prefixed variables below are the ones config.py reads.
"""
import os

os.environ["APP_ENV"] = "local"
os.environ.setdefault("LOCAL_BOT_TOKEN", "123456789:TEST-token-for-unit-tests")
os.environ.setdefault("LOCAL_DATABASE_URL", "")
os.environ.setdefault("LOCAL_TG_SECRET", "test-telegram-secret")
os.environ.setdefault("LOCAL_ADMIN_SECRET", "test-admin-secret")
os.environ.setdefault("LOCAL_BOT_USERNAME", "starlink_test_bot")

from contextlib import asynccontextmanager
from datetime import date
from decimal import Decimal
from typing import Optional
from unittest.mock import AsyncMock, MagicMock

import pytest

from app.core.message_registry import MessageRegistry
from app.handlers.common.context import UpdateContext
from app.services.users.service import TelegramUser
from app.services.subscriptions.service import SubscriptionPrice
from app.utils.telegram_safe import ApiResult

TRANSPORT_METHODS = (
    "send_text",
    "send_photo",
    "send_inline_keyboard",
    "send_user_picker",
    "send_force_reply",
    "edit_message_text",
    "delete_message",
    "answer_callback",
    "answer_pre_checkout",
    "send_invoice",
)


class FakeConnection:
    """asyncpg.Connection stand-in: scripted fetchrow/fetch/execute, no-op transactions."""

    def __init__(self):
        self.fetchrow = AsyncMock(return_value=None)
        self.fetch = AsyncMock(return_value=[])
        self.fetchval = AsyncMock(return_value=None)
        self.execute = AsyncMock(return_value="UPDATE 1")

    @asynccontextmanager
    async def _transaction(self):
        yield self

    def transaction(self):
        return self._transaction()


@pytest.fixture
def fake_conn(monkeypatch):
    """Route every database.connection() block to one FakeConnection."""
    import database

    conn = FakeConnection()

    @asynccontextmanager
    async def _connection(existing=None):
        yield existing if existing is not None else conn

    monkeypatch.setattr(database, "connection", _connection)
    return conn


@pytest.fixture
def transport():
    """TelegramTransport double: every call succeeds with message_id=100."""
    fake = MagicMock()
    for name in TRANSPORT_METHODS:
        setattr(fake, name, AsyncMock(return_value=ApiResult(ok=True, status_code=200, message_id=100)))
    return fake


@pytest.fixture
def registry():
    return MessageRegistry(max_per_chat=50, max_chats=10)


@pytest.fixture
def make_ctx(transport, registry):
    def _make(tg_id: str = "1001", language: str = "ru", **fields) -> UpdateContext:
        fields.setdefault("chat_id", int(tg_id))
        fields.setdefault("message_id", 555)
        return UpdateContext(
            transport=transport,
            registry=registry,
            tg_id=tg_id,
            language=language,
            **fields,
        )
    return _make


@pytest.fixture
def make_user():
    def _make(
        tg_id: str = "1001",
        status: Optional[str] = "ending",
        active: bool = True,
        until: Optional[date] = date(2030, 1, 10),
        earned: str = "0.00",
        **fields,
    ) -> TelegramUser:
        return TelegramUser(
            internal_uuid="0b9c5a0e-6f7e-4d43-9b0c-0f2b5e7b6a11",
            tg_id=tg_id,
            tg_nickname=fields.pop("tg_nickname", "alice"),
            subscription_active=active,
            subscription_status=status,
            subscription_untill=until,
            earned_money=Decimal(earned),
            **fields,
        )
    return _make


@pytest.fixture
def price_3m():
    return SubscriptionPrice(months=3, stars=450, usdt=Decimal("9.99"), rubles=799)


@pytest.fixture
def user_row():
    """Full users row as asyncpg returns it (jsonb already decoded)."""
    def _make(tg_id: str = "1001", **overrides):
        row = {
            "internal_uuid": "0b9c5a0e-6f7e-4d43-9b0c-0f2b5e7b6a11",
            "tg_id": tg_id,
            "tg_nickname": "alice",
            "subscription_active": True,
            "subscription_status": "ending",
            "subscription_untill": date(2030, 1, 10),
            "earned_money": Decimal("0.00"),
            "number_of_referals": 0,
            "referals": [],
            "referred_by": None,
            "gifts": [],
            "traffic_consumed_mb": 0,
            "number_of_connections": 0,
            "number_of_connections_last_month": 0,
        }
        row.update(overrides)
        return row
    return _make
