import os
import sys

# ====================================================================================
# ENVIRONMENT CONFIGURATION: Изоляция PROD / STAGE / LOCAL через префиксы
# ====================================================================================
# Все переменные окружения читаются с префиксом окружения:
#   - PROD: PROD_BOT_TOKEN, PROD_DATABASE_URL, PROD_TG_SECRET
#   - STAGE: STAGE_BOT_TOKEN, STAGE_DATABASE_URL, STAGE_TG_SECRET
#   - LOCAL: LOCAL_BOT_TOKEN, LOCAL_DATABASE_URL, LOCAL_TG_SECRET
#
# STAGE бот не сможет использовать PROD_BOT_TOKEN, даже если он случайно задан.
# ====================================================================================

APP_ENV = os.getenv("APP_ENV", "prod").lower()
if APP_ENV not in ("prod", "stage", "local"):
    print(f"ERROR: Invalid APP_ENV={APP_ENV}. Must be one of: prod, stage, local", file=sys.stderr)
    sys.exit(1)

IS_LOCAL = APP_ENV == "local"
IS_STAGE = APP_ENV == "stage"
IS_PROD = APP_ENV == "prod"


def env(key: str, default: str = "") -> str:
    """
    Получить переменную окружения с префиксом окружения

    Example:
        env("BOT_TOKEN") -> значение STAGE_BOT_TOKEN (если APP_ENV=stage)
        env("HTTP_PORT", default="8080") -> "8080" если не задано
    """
    env_key = f"{APP_ENV.upper()}_{key}"
    return os.getenv(env_key, default)


def _require(key: str) -> str:
    """Required in PROD (exit), warning in STAGE/LOCAL."""
    value = env(key)
    if not value:
        if IS_PROD:
            print(f"ERROR: {APP_ENV.upper()}_{key} environment variable is not set!", file=sys.stderr)
            sys.exit(1)
        print(f"WARNING: {APP_ENV.upper()}_{key} is not set", file=sys.stderr)
    return value


# Защита от прямого использования секретов без префикса
_direct_usage_vars = ["BOT_TOKEN", "DATABASE_URL", "TG_SECRET", "ADMIN_SECRET"]
for var in _direct_usage_vars:
    if os.getenv(var):
        print(f"ERROR: Direct usage of {var} is FORBIDDEN!", file=sys.stderr)
        print(f"ERROR: Use {APP_ENV.upper()}_{var} instead (via env('{var}'))", file=sys.stderr)
        sys.exit(1)

# ====================================================================================
# SECRETS
# ====================================================================================
# Secrets are read once at startup and never logged.
# TG_SECRET / ADMIN_SECRET are checked per request: an empty value answers 500.
# ====================================================================================

BOT_TOKEN = _require("BOT_TOKEN")
DATABASE_URL = _require("DATABASE_URL")
TG_SECRET = env("TG_SECRET")
ADMIN_SECRET = env("ADMIN_SECRET")

# Username бота без "@" (для ссылок ref_ и проверки /cmd@bot в группах)
BOT_USERNAME = env("BOT_USERNAME").lstrip("@")

SERVICE_NAME = env("SERVICE_NAME", default="vpn-subscription-backend")
LOG_LEVEL = env("LOG_LEVEL", default="INFO").upper()

HTTP_HOST = env("HTTP_HOST", default="0.0.0.0")
HTTP_PORT = int(os.getenv("PORT") or env("HTTP_PORT") or "8080")

# Timeout одного запроса к Bot API (секунды). Telegram ждёт ответа на webhook ~60s.
TELEGRAM_REQUEST_TIMEOUT = float(env("TELEGRAM_REQUEST_TIMEOUT", default="10.0"))

# ====================================================================================
# BUSINESS CONSTANTS
# ====================================================================================

TRIAL_DAYS = 3

# Telegram Stars currency tag
STARS_CURRENCY = "XTR"

# Реферальные проценты: первая оплата приглашённого / последующие продления
REFERRAL_FIRST_PURCHASE_PERCENT = 20
REFERRAL_REPEAT_PURCHASE_PERCENT = 10
REFERRAL_MIN_WITHDRAWAL_USD = 5

# Поддержка / ссылки
SUPPORT_URL = env("SUPPORT_URL", default="https://t.me/starlinkacc")
COMMUNITY_URL = env("COMMUNITY_URL", default="https://t.me/starlinkpage")
SUPPORT_EMAIL = env("SUPPORT_EMAIL", default="starlink.echo@outlook.com")
OFFER_URL = env(
    "OFFER_URL",
    default="https://telegra.ph/Publichnaya-oferta-starlink-fast-internet-bot-02-26",
)

# /clear: сколько message_id ниже команды пытаемся удалить
CLEAR_SWEEP_WINDOW = int(env("CLEAR_SWEEP_WINDOW", default="100"))

# Реестр исходящих сообщений (per chat) для /clear
MESSAGE_REGISTRY_MAX_PER_CHAT = int(env("MESSAGE_REGISTRY_MAX_PER_CHAT", default="200"))
MESSAGE_REGISTRY_MAX_CHATS = int(env("MESSAGE_REGISTRY_MAX_CHATS", default="10000"))

# ====================================================================================
# VPS SSH / CONNECTION SYNC
# ====================================================================================

VPS_SSH_HOST = env("VPS_SSH_HOST")
VPS_SSH_USER = env("VPS_SSH_USER")
VPS_SSH_PASSWORD = env("VPS_SSH_PASSWORD")
VPS_SSH_PRIVATE_KEY_PATH = env("VPS_SSH_PRIVATE_KEY_PATH")
VPS_SSH_PORT = env("VPS_SSH_PORT", default="22")
VPS_SSH_TIMEOUT = float(env("VPS_SSH_TIMEOUT", default="20"))

VPS_SYNC_TARGET_DOMAIN = env("VPS_SYNC_TARGET_DOMAIN") or env("VPS_DOMAIN")
VPS_SYNC_PORTS = env("VPS_SYNC_PORTS", default="443,8443")

# Фоновая синхронизация количества подключений (по умолчанию выключена)
VPS_CONNECTION_SYNC_ENABLED = env("VPS_CONNECTION_SYNC_ENABLED", default="false").lower() == "true"
VPS_CONNECTION_SYNC_INTERVAL_SECONDS = int(env("VPS_CONNECTION_SYNC_INTERVAL_SECONDS", default="3600"))
if VPS_CONNECTION_SYNC_INTERVAL_SECONDS < 60:
    print("ERROR: VPS_CONNECTION_SYNC_INTERVAL_SECONDS must be at least 60", file=sys.stderr)
    sys.exit(1)

print(f"INFO: Config loaded for environment: {APP_ENV.upper()}", flush=True)
