# -*- coding: utf-8 -*-
"""
I18N for bot texts.
Strict localization: no hardcoded UI strings in handlers.

Language resolution:
- If language not in LANGUAGES → use DEFAULT_LANGUAGE (ru)
- If key missing in requested language → fallback to English
- If key missing in all languages → return key (safe fallback, never crash)
"""

import logging
from typing import Optional

from . import en, ru

logger = logging.getLogger(__name__)

DEFAULT_LANGUAGE = "ru"

LANGUAGES = {
    "ru": ru.LANG,
    "en": en.LANG,
}


def resolve_language(language_code: Optional[str]) -> str:
    """Telegram language_code ("en-US", "ru", None) -> supported language."""
    if not language_code:
        return DEFAULT_LANGUAGE
    base = language_code.split("-")[0].lower()
    return base if base in LANGUAGES else DEFAULT_LANGUAGE


def get_text(language: str, key: str, **kwargs) -> str:
    """
    Get localized text for key in given language.

    Args:
        language: Language code (ru, en)
        key: Dot-separated key (e.g. menu.title, buy.choose_method)
        **kwargs: Format placeholders (e.g. months=3 for {months})

    Returns:
        Localized string, optionally formatted. Never raises.
    """
    lang_dict = LANGUAGES.get(language, LANGUAGES[DEFAULT_LANGUAGE])
    text = lang_dict.get(key)

    if text is None:
        text = LANGUAGES["en"].get(key)
        if text is None:
            logger.error("I18N missing key in all languages: %s", key)
            return key
        logger.warning("I18N fallback to EN for key=%s, lang=%s", key, language)

    if kwargs:
        return text.format(**kwargs)
    return text


def months_word(language: str, months: int) -> str:
    """месяц / месяца / месяцев по правилам множественного числа"""
    n = abs(months) % 100
    if language != "ru":
        form = "one" if months == 1 else "many"
    elif 11 <= n <= 14:
        form = "many"
    elif n % 10 == 1:
        form = "one"
    elif 2 <= n % 10 <= 4:
        form = "few"
    else:
        form = "many"
    return get_text(language, f"common.month_{form}")


__all__ = ["get_text", "months_word", "resolve_language", "LANGUAGES", "DEFAULT_LANGUAGE"]
