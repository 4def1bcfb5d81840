"""
Menu payload, keyboards and localized texts.
"""
from decimal import Decimal

import pytest

from app.handlers.common.keyboards import (
    build_telegram_menu,
    get_countries_rows,
    get_balance_plans_rows,
    get_gift_plans_rows,
    get_main_menu_rows,
    get_stars_plans_rows,
)
from app.handlers.common.screens import protected_config_text
from app.i18n import LANGUAGES, get_text, months_word, resolve_language
from app.services.subscriptions.service import SubscriptionPrice
from app.services.vpn.service import VpsCountry
from app.utils.callback_data import decode_callback_data
from app.utils.security import MAX_CALLBACK_DATA_LENGTH

PRICES = [
    SubscriptionPrice(months=1, stars=150, usdt=Decimal("3.49"), rubles=299),
    SubscriptionPrice(months=12, stars=1500, usdt=Decimal("34.99"), rubles=2990),
]


class TestMenuPayload:
    def test_layout(self):
        payload = build_telegram_menu("active", "ru")
        assert payload["subscription_status"] == "active"
        assert [[item["key"] for item in row] for row in payload["keyboard_rows"]] == [
            ["subscription_status"],
            ["how_to_use", "faq"],
            ["referals", "gifts"],
            ["countries"],
            ["settings"],
        ]
        assert len(payload["menu"]) == 7
        assert payload["menu"][0]["label"].startswith("🟢")

    @pytest.mark.parametrize("status,emoji", [("trial", "🟡"), ("expired", "🔴"), ("unknown", "⚪")])
    def test_status_emoji(self, status, emoji):
        assert build_telegram_menu(status, "en")["menu"][0]["label"].startswith(emoji)

    def test_every_button_decodes(self):
        rows = get_main_menu_rows("trial", "ru")
        rows += get_stars_plans_rows(PRICES, "ru")
        rows += get_balance_plans_rows(PRICES, "ru")
        rows += get_gift_plans_rows(PRICES, "98765432101", "ru")
        for row in rows:
            for button in row:
                if button.callback_data is None:
                    continue
                assert len(button.callback_data.encode("utf-8")) <= MAX_CALLBACK_DATA_LENGTH
                assert decode_callback_data(button.callback_data) is not None, button.callback_data

    def test_country_buttons_fit_and_decode(self):
        countries = [
            VpsCountry("Нидерланды", "🇳🇱"),
            VpsCountry("Germany", "🇩🇪"),
            VpsCountry("Объединённые Арабские Эмираты", "🇦🇪"),
        ]
        rows = get_countries_rows(countries)

        assert [row[0].text for row in rows] == ["Нидерланды 🇳🇱", "Germany 🇩🇪"]
        for row in rows:
            data = row[0].callback_data
            assert len(data.encode("utf-8")) <= MAX_CALLBACK_DATA_LENGTH
            assert decode_callback_data(data).country in ("Нидерланды", "Germany")


class TestI18n:
    def test_languages_have_same_keys(self):
        assert set(LANGUAGES["ru"]) == set(LANGUAGES["en"])

    def test_resolve_language(self):
        assert resolve_language("en-US") == "en"
        assert resolve_language("de") == "ru"
        assert resolve_language(None) == "ru"

    def test_missing_key_returns_key(self):
        assert get_text("ru", "no.such.key") == "no.such.key"

    def test_months_word(self):
        assert months_word("ru", 1) == "месяц"
        assert months_word("ru", 3) == "месяца"
        assert months_word("ru", 12) == "месяцев"
        assert months_word("ru", 21) == "месяц"
        assert months_word("en", 1) == "month"
        assert months_word("en", 6) == "months"


def test_protected_config_is_escaped():
    text = protected_config_text("vless://id@host:443?type=tcp&sni=a<b>#name")
    assert text.startswith("<code>") and text.endswith("</code>")
    assert "&amp;" in text
    assert "&lt;b&gt;" in text
