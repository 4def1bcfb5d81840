"""
Unit tests for callback_data decoding.
"""
import pytest

from app.utils.callback_data import (
    CountriesAction,
    FaqAction,
    GiftAction,
    HowToAction,
    MenuAction,
    PurchaseAction,
    ReferralAction,
    decode_base64url,
    decode_callback_data,
    encode_country_callback_value,
)


class TestDecodeCallbackData:
    """Tests for decode_callback_data"""

    def test_menu(self):
        assert decode_callback_data("menu:faq") == MenuAction(key="faq")
        assert decode_callback_data("menu:settings") == MenuAction(key="settings")

    def test_purchase(self):
        assert decode_callback_data("buy:open") == PurchaseAction(kind="open")
        assert decode_callback_data("buy:method:tg_stars") == PurchaseAction(kind="method", method="tg_stars")
        assert decode_callback_data("buy:plan:3") == PurchaseAction(kind="plan", months=3)

    def test_faq_and_howto(self):
        assert decode_callback_data("faq:rules") == FaqAction(kind="rules")
        assert decode_callback_data("howto:android_tv") == HowToAction(platform="android_tv")

    def test_referrals(self):
        assert decode_callback_data("referals:prolong") == ReferralAction(kind="prolong")
        assert decode_callback_data("referals:balance_plan:6") == ReferralAction(kind="balance_plan", months=6)

    def test_gifts(self):
        assert decode_callback_data("gift:my") == GiftAction(kind="my")
        assert decode_callback_data("gift:view:0") == GiftAction(kind="view", gift_index=0)
        assert decode_callback_data("gift:activate:2") == GiftAction(kind="activate", gift_index=2)
        assert decode_callback_data("gift:method:tg_stars:2002") == GiftAction(
            kind="method", method="tg_stars", recipient_tg_id="2002"
        )
        assert decode_callback_data("gift:plan:12:2002") == GiftAction(
            kind="plan", months=12, recipient_tg_id="2002"
        )

    def test_country_roundtrip_with_unicode(self):
        data = "countries:country:" + encode_country_callback_value("Нидерланды")
        assert decode_callback_data(data) == CountriesAction(kind="country", country="Нидерланды")

    def test_vps_uuid_is_normalized(self):
        action = decode_callback_data("countries:vps:0B9C5A0E-6F7E-4D43-9B0C-0F2B5E7B6A11")
        assert action == CountriesAction(kind="vps", internal_uuid="0b9c5a0e-6f7e-4d43-9b0c-0f2b5e7b6a11")

    @pytest.mark.parametrize("data", [
        None,
        "",
        "menu",
        "menu:unknown",
        "menu:faq:extra",
        "buy:plan:0",
        "buy:plan:-1",
        "buy:plan:abc",
        "buy:method:paypal",
        "faq:other",
        "referals:balance_plan:0",
        "gift:view:-1",
        "gift:view:01",
        "gift:plan:3:0",
        "gift:plan:3:abc",
        "gift:method:cash:2002",
        "countries:vps:not-a-uuid",
        "countries:country:!!!",
        "howto:linux",
        "admin:ban:1",
        "menu:" + "x" * 80,
    ])
    def test_malformed_decodes_to_none(self, data):
        assert decode_callback_data(data) is None


def test_decode_base64url_rejects_garbage():
    assert decode_base64url("") is None
    assert decode_base64url("a+b/") is None
    assert decode_base64url("_w") is None  # не UTF-8
