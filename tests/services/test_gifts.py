"""
Unit tests for gift service.
"""
from datetime import date
from unittest.mock import AsyncMock, patch

import pytest

from app.services.gifts.exceptions import GiftNotFoundError, SelfGiftError
from app.services.gifts.service import Gift, activate_gift, add_gift, list_gifts

GIFTS = [
    {"giver_tg_id": "77", "giver_name": "Boss", "months": 1, "granted_at": "2027-01-01"},
    {"giverTgId": "88", "giverName": "Other", "months": 3, "grantedAt": "2027-02-01"},
]


def test_list_gifts_reads_both_key_styles(make_user):
    gifts = list_gifts(make_user(gifts=GIFTS + ["garbage"]))
    assert gifts == [
        Gift(giver_tg_id="77", giver_name="Boss", months=1, granted_at="2027-01-01"),
        Gift(giver_tg_id="88", giver_name="Other", months=3, granted_at="2027-02-01"),
    ]
    assert list_gifts(None) == []


class TestAddGift:
    @pytest.mark.asyncio
    async def test_self_gift_rejected(self, fake_conn):
        with pytest.raises(SelfGiftError):
            await add_gift("1001", None, "1001", "Alice", 3)

    @pytest.mark.asyncio
    async def test_appends_gift(self, fake_conn, user_row):
        fake_conn.fetchrow.return_value = user_row(tg_id="2002", gifts=[GIFTS[0]])
        with patch("app.services.gifts.service.ensure_user", AsyncMock()) as ensure:
            user = await add_gift("2002", None, "1001", "Alice", 3)

        ensure.assert_awaited_once()
        assert user.tg_id == "2002"
        sql, recipient, appended = fake_conn.fetchrow.call_args.args
        assert recipient == "2002"
        assert appended[0]["giver_tg_id"] == "1001"
        assert appended[0]["months"] == 3


class TestActivateGift:
    @pytest.mark.asyncio
    async def test_index_out_of_range(self, fake_conn):
        fake_conn.fetchrow.return_value = {"gifts": GIFTS, "subscription_untill": None}
        with pytest.raises(GiftNotFoundError):
            await activate_gift("1001", "alice", 2)

    @pytest.mark.asyncio
    async def test_unknown_user(self, fake_conn):
        fake_conn.fetchrow.return_value = None
        with pytest.raises(GiftNotFoundError):
            await activate_gift("1001", "alice", 0)

    @pytest.mark.asyncio
    async def test_activation_removes_only_that_index(self, fake_conn, user_row):
        fake_conn.fetchrow.side_effect = [
            {"gifts": list(GIFTS), "subscription_untill": None},
            user_row(gifts=[GIFTS[1]], subscription_status="live", subscription_untill=date(2030, 2, 10)),
        ]
        result = await activate_gift("1001", "alice", 0)

        assert result.gift.months == 1
        assert result.user.subscription_status == "live"
        sql, tg_id, remaining, new_until, nickname = fake_conn.fetchrow.call_args_list[1].args
        assert remaining == [GIFTS[1]]
        assert nickname == "alice"
