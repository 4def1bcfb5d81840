"""
Security utilities for trust boundaries and input validation.

Commands are the only free-text surface reachable from arbitrary chat input,
and /start carries an identity (ref_<tg_id>) into the referral ledger, so
anything resembling a smuggled identifier is rejected here.
"""

import hmac
import logging
import re
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)

# ====================================================================================
# INPUT LIMITS
# ====================================================================================

MAX_COMMAND_LENGTH = 128
MAX_CALLBACK_DATA_LENGTH = 64  # Telegram callback_data limit (bytes)
MAX_PAYLOAD_LENGTH = 128  # Telegram invoice payload limit (bytes)
MAX_PROMO_CODE_LENGTH = 64

TG_ID_PATTERN = re.compile(r"^[1-9]\d{0,19}$")
REFERRAL_ARGUMENT_PATTERN = re.compile(r"^ref_([1-9]\d{0,19})$")

_COMMAND_TOKEN = re.compile(r"^/([a-z_]+)(?:@([a-z0-9_]{3,}))?$", re.IGNORECASE)

SUSPICIOUS_ID_PATTERN = re.compile(
    r"\b(?:id|user_id|chat_id|admin_id|target_id|uid)\s*[:=]\s*\d+\b"
    r"|tg://user\?id="
    r"|\b\d{8,}\b",
    re.IGNORECASE,
)

REASON_INJECTION = "Potential ID injection payload detected."
REASON_MALFORMED = "Malformed Telegram command."
REASON_TOO_MANY_ARGUMENTS = "Too many command arguments."
REASON_OTHER_BOT = "Command is addressed to a different bot."
REASON_UNSUPPORTED_PAYLOAD = "Unsupported command payload."

COMMANDS_WITH_ARGUMENT = ("/start",)


@dataclass(frozen=True)
class ParsedCommand:
    command: Optional[str] = None
    argument: Optional[str] = None
    suspicious: bool = False
    reason: Optional[str] = None

    @property
    def referrer_tg_id(self) -> Optional[str]:
        """tg_id из аргумента ref_<id> (только для /start)"""
        if self.command != "/start" or not self.argument:
            return None
        match = REFERRAL_ARGUMENT_PATTERN.match(self.argument)
        return match.group(1) if match else None


def get_telegram_command(text: Optional[str], bot_username: Optional[str] = None) -> ParsedCommand:
    """
    Classify raw message text into a command plus a safety verdict.

    Rules are applied in order; the first one that fires decides the result.
    A command addressed to another bot (/menu@other_bot) is neither suspicious
    nor actionable.
    """
    if text is None:
        return ParsedCommand()

    normalized = text.strip()
    if not normalized.startswith("/"):
        return ParsedCommand()

    if len(normalized) > MAX_COMMAND_LENGTH:
        return ParsedCommand(suspicious=True, reason=REASON_INJECTION)

    tokens = normalized.split()
    match = _COMMAND_TOKEN.match(tokens[0])
    if match is None:
        return ParsedCommand(suspicious=True, reason=REASON_MALFORMED)

    if len(tokens) > 2:
        return ParsedCommand(suspicious=True, reason=REASON_TOO_MANY_ARGUMENTS)

    command = "/" + match.group(1).lower()
    mention = (match.group(2) or "").lower()
    expected = (bot_username or "").lstrip("@").lower()
    if mention and expected and mention != expected:
        return ParsedCommand(reason=REASON_OTHER_BOT)

    if len(tokens) == 2:
        argument = tokens[1]
        if command in COMMANDS_WITH_ARGUMENT and REFERRAL_ARGUMENT_PATTERN.match(argument):
            return ParsedCommand(command=command, argument=argument)
        if SUSPICIOUS_ID_PATTERN.search(normalized):
            return ParsedCommand(suspicious=True, reason=REASON_INJECTION)
        return ParsedCommand(suspicious=True, reason=REASON_UNSUPPORTED_PAYLOAD)

    if SUSPICIOUS_ID_PATTERN.search(normalized):
        return ParsedCommand(suspicious=True, reason=REASON_INJECTION)

    return ParsedCommand(command=command)


def is_valid_tg_id(value) -> bool:
    return isinstance(value, str) and TG_ID_PATTERN.match(value) is not None


def secrets_match(provided: Optional[str], expected: str) -> bool:
    """Constant-time comparison of a header secret with the configured one."""
    if not provided:
        return False
    return hmac.compare_digest(provided.encode("utf-8"), expected.encode("utf-8"))


# ====================================================================================
# SECRET & CONFIG SAFETY
# ====================================================================================

def mask_secret(secret: Optional[str], visible_chars: int = 4) -> str:
    """
    Mask secret in logs.

    Returns:
        Masked secret (e.g., "****1234")
    """
    if not secret or len(secret) <= visible_chars:
        return "****"
    return "*" * (len(secret) - visible_chars) + secret[-visible_chars:]


def log_security_warning(event: str, telegram_id: Optional[str] = None, **details) -> None:
    """Security-related warnings (spoofed callback, blocked command, bad secret)."""
    suffix = " ".join(f"{key}={value}" for key, value in details.items())
    logger.warning(f"[SECURITY_WARNING] {event} telegram_id={telegram_id} {suffix}".rstrip())
