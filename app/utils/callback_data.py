"""
Callback data decoding.

Inline buttons carry colon-delimited strings "<domain>:<subaction>[:<param>...]".
Each domain has its own allow-list; anything that does not match exactly
decodes to None so the dispatcher can report the callback as unhandled.
Free-text parameters (country names) travel base64url-encoded.
"""
import base64
import binascii
import re
import uuid
from dataclasses import dataclass
from typing import Optional, Union

from app.utils.security import MAX_CALLBACK_DATA_LENGTH, TG_ID_PATTERN

MENU_KEYS = (
    "subscription_status",
    "how_to_use",
    "faq",
    "referals",
    "gifts",
    "settings",
    "countries",
)
PURCHASE_METHODS = ("tg_stars", "tbd_1", "tbd_2")
FAQ_KINDS = ("email", "rules")
HOWTO_PLATFORMS = ("ios", "android", "macos", "windows", "android_tv")

MAX_COUNTRY_LENGTH = 64

_POSITIVE_INT = re.compile(r"^[1-9]\d{0,5}$")
_NON_NEGATIVE_INT = re.compile(r"^(?:0|[1-9]\d{0,5})$")


@dataclass(frozen=True)
class MenuAction:
    key: str


@dataclass(frozen=True)
class PurchaseAction:
    kind: str  # open | method | plan
    method: Optional[str] = None
    months: Optional[int] = None


@dataclass(frozen=True)
class FaqAction:
    kind: str  # email | rules


@dataclass(frozen=True)
class ReferralAction:
    kind: str  # prolong | balance_plan
    months: Optional[int] = None


@dataclass(frozen=True)
class GiftAction:
    kind: str  # my | give | promo | view | activate | method | plan
    gift_index: Optional[int] = None
    method: Optional[str] = None
    months: Optional[int] = None
    recipient_tg_id: Optional[str] = None


@dataclass(frozen=True)
class CountriesAction:
    kind: str  # country | vps
    country: Optional[str] = None
    internal_uuid: Optional[str] = None


@dataclass(frozen=True)
class HowToAction:
    platform: str


CallbackAction = Union[
    MenuAction,
    PurchaseAction,
    FaqAction,
    ReferralAction,
    GiftAction,
    CountriesAction,
    HowToAction,
]


# ====================================================================================
# base64url helpers (no padding on the wire)
# ====================================================================================

def encode_base64url(value: str) -> str:
    return base64.urlsafe_b64encode(value.encode("utf-8")).decode("ascii").rstrip("=")


def decode_base64url(value: str) -> Optional[str]:
    if not value or not re.match(r"^[A-Za-z0-9_-]+$", value):
        return None
    padded = value + "=" * (-len(value) % 4)
    try:
        return base64.urlsafe_b64decode(padded).decode("utf-8")
    except (binascii.Error, ValueError):
        return None


def encode_country_callback_value(country: str) -> str:
    return encode_base64url(country)


def country_callback_data(country: str) -> Optional[str]:
    """countries:country:<base64url>, or None when it would not fit into callback_data."""
    data = f"countries:country:{encode_country_callback_value(country)}"
    if len(data.encode("utf-8")) > MAX_CALLBACK_DATA_LENGTH:
        return None
    return data


# ====================================================================================
# Per-domain decoders
# ====================================================================================

def _positive_int(raw: str) -> Optional[int]:
    return int(raw) if _POSITIVE_INT.match(raw) else None


def _non_negative_int(raw: str) -> Optional[int]:
    return int(raw) if _NON_NEGATIVE_INT.match(raw) else None


def _decode_menu(parts) -> Optional[MenuAction]:
    if len(parts) == 2 and parts[1] in MENU_KEYS:
        return MenuAction(key=parts[1])
    return None


def _decode_purchase(parts) -> Optional[PurchaseAction]:
    if parts[1:] == ["open"]:
        return PurchaseAction(kind="open")
    if len(parts) != 3:
        return None
    if parts[1] == "method" and parts[2] in PURCHASE_METHODS:
        return PurchaseAction(kind="method", method=parts[2])
    if parts[1] == "plan":
        months = _positive_int(parts[2])
        if months is not None:
            return PurchaseAction(kind="plan", months=months)
    return None


def _decode_faq(parts) -> Optional[FaqAction]:
    if len(parts) == 2 and parts[1] in FAQ_KINDS:
        return FaqAction(kind=parts[1])
    return None


def _decode_referral(parts) -> Optional[ReferralAction]:
    if parts[1:] == ["prolong"]:
        return ReferralAction(kind="prolong")
    if len(parts) == 3 and parts[1] == "balance_plan":
        months = _positive_int(parts[2])
        if months is not None:
            return ReferralAction(kind="balance_plan", months=months)
    return None


def _decode_gift(parts) -> Optional[GiftAction]:
    if len(parts) == 2 and parts[1] in ("my", "give", "promo"):
        return GiftAction(kind=parts[1])

    if len(parts) == 3 and parts[1] in ("view", "activate"):
        index = _non_negative_int(parts[2])
        if index is None:
            return None
        return GiftAction(kind=parts[1], gift_index=index)

    if len(parts) == 4 and TG_ID_PATTERN.match(parts[3]):
        if parts[1] == "method" and parts[2] in PURCHASE_METHODS:
            return GiftAction(kind="method", method=parts[2], recipient_tg_id=parts[3])
        if parts[1] == "plan":
            months = _positive_int(parts[2])
            if months is not None:
                return GiftAction(kind="plan", months=months, recipient_tg_id=parts[3])
    return None


def _decode_countries(parts) -> Optional[CountriesAction]:
    if len(parts) != 3:
        return None
    if parts[1] == "country":
        decoded = decode_base64url(parts[2])
        country = decoded.strip() if decoded is not None else ""
        if not country or len(country) > MAX_COUNTRY_LENGTH:
            return None
        return CountriesAction(kind="country", country=country)
    if parts[1] == "vps":
        try:
            internal_uuid = str(uuid.UUID(parts[2]))
        except ValueError:
            return None
        return CountriesAction(kind="vps", internal_uuid=internal_uuid)
    return None


def _decode_howto(parts) -> Optional[HowToAction]:
    if len(parts) == 2 and parts[1] in HOWTO_PLATFORMS:
        return HowToAction(platform=parts[1])
    return None


_DECODERS = {
    "menu": _decode_menu,
    "buy": _decode_purchase,
    "faq": _decode_faq,
    "referals": _decode_referral,
    "gift": _decode_gift,
    "countries": _decode_countries,
    "howto": _decode_howto,
}


def decode_callback_data(data: Optional[str]) -> Optional[CallbackAction]:
    """
    Decode callback_data into a typed action.

    Never raises: anything malformed, oversized or unknown gives None.
    """
    if not data or not isinstance(data, str):
        return None
    if len(data.encode("utf-8")) > MAX_CALLBACK_DATA_LENGTH:
        return None

    parts = data.split(":")
    if len(parts) < 2:
        return None
    decoder = _DECODERS.get(parts[0])
    if decoder is None:
        return None
    return decoder(parts)
