import json
import logging
import os
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional

import asyncpg

import config

logger = logging.getLogger(__name__)

DATABASE_URL = config.DATABASE_URL

# ====================================================================================
# SAFE STARTUP GUARD: Глобальный флаг готовности базы данных
# ====================================================================================
# Если False, webhook всё равно отвечает 200, но ветки с БД логируют ошибку
# и деградируют до сообщения пользователю.
# ====================================================================================
DB_READY: bool = False

_pool: Optional[asyncpg.Pool] = None


def _get_pool_config() -> dict:
    """Build asyncpg.create_pool kwargs. Single source of truth for all pool creation."""
    return {
        "min_size": int(os.getenv("DB_POOL_MIN_SIZE", "1")),
        "max_size": int(os.getenv("DB_POOL_MAX_SIZE", "10")),
        "max_inactive_connection_lifetime": 300,
        "timeout": int(os.getenv("DB_POOL_ACQUIRE_TIMEOUT", "10")),
        "command_timeout": int(os.getenv("DB_POOL_COMMAND_TIMEOUT", "30")),
    }


async def _init_connection(conn: asyncpg.Connection) -> None:
    """jsonb columns (referals, gifts, referred_by) are exchanged as Python objects."""
    await conn.set_type_codec(
        "jsonb",
        encoder=json.dumps,
        decoder=json.loads,
        schema="pg_catalog",
    )


async def get_pool() -> asyncpg.Pool:
    """
    Получить пул соединений, создав его при необходимости

    Raises:
        RuntimeError: DATABASE_URL не настроен
    """
    global _pool
    if not DATABASE_URL:
        raise RuntimeError(f"{config.APP_ENV.upper()}_DATABASE_URL is not configured")
    if _pool is None:
        pool_config = _get_pool_config()
        _pool = await asyncpg.create_pool(DATABASE_URL, init=_init_connection, **pool_config)
        logger.info(
            "DB_POOL_CONFIG min=%s max=%s acquire_timeout=%s command_timeout=%s",
            pool_config["min_size"], pool_config["max_size"],
            pool_config["timeout"], pool_config["command_timeout"],
        )
    return _pool


async def close_pool():
    """Закрыть пул соединений"""
    global _pool, DB_READY
    if _pool:
        await _pool.close()
        _pool = None
        DB_READY = False
        logger.info("Database connection pool closed")


@asynccontextmanager
async def connection(conn: Optional[asyncpg.Connection] = None) -> AsyncIterator[asyncpg.Connection]:
    """
    Yield the caller's connection when one is passed (shared transaction),
    otherwise acquire one from the pool for the duration of the block.
    """
    if conn is not None:
        yield conn
        return
    pool = await get_pool()
    async with pool.acquire() as acquired:
        yield acquired


async def init_db() -> bool:
    """
    Инициализация базы данных: пул + миграции

    Идемпотентна: безопасно вызывать при каждом старте.

    Returns:
        True если БД готова, False если работаем в деградированном режиме
    """
    global DB_READY

    if DB_READY:
        logger.info("Database already initialized (DB_READY=True), skipping init")
        return True

    if not DATABASE_URL:
        logger.error("DATABASE_URL not configured")
        return False

    try:
        pool = await get_pool()
    except Exception as e:
        logger.error(f"Failed to create database pool: {e}")
        return False

    import migrations
    if not await migrations.run_migrations_safe(pool):
        logger.error("Migration execution failed")
        return False

    DB_READY = True
    logger.info("DB_READY=True")
    return True


# ====================================================================================
# PROCESSED PAYMENTS
# ====================================================================================

async def record_telegram_payment(
    conn: asyncpg.Connection,
    charge_id: str,
    payer_tg_id: str,
    recipient_tg_id: Optional[str],
    action: str,
    months: int,
    stars: int,
) -> bool:
    """
    Записать обработанный платёж.

    Returns:
        True если платёж записан впервые, False если charge_id уже был (повторная доставка)
    """
    row = await conn.fetchrow(
        """INSERT INTO telegram_payments
               (telegram_payment_charge_id, payer_tg_id, recipient_tg_id, action, months, stars)
           VALUES ($1, $2, $3, $4, $5, $6)
           ON CONFLICT (telegram_payment_charge_id) DO NOTHING
           RETURNING id""",
        charge_id, payer_tg_id, recipient_tg_id, action, months, stars,
    )
    return row is not None


async def claim_payment_referral_reward(conn: asyncpg.Connection, charge_id: str) -> bool:
    """
    Atomically flip referral_rewarded for a processed payment.

    Returns:
        True if this caller won the claim, False if already rewarded or unknown
    """
    row = await conn.fetchrow(
        """UPDATE telegram_payments
           SET referral_rewarded = TRUE
           WHERE telegram_payment_charge_id = $1 AND referral_rewarded = FALSE
           RETURNING id""",
        charge_id,
    )
    return row is not None


def decode_jsonb(raw: Any, default: Any) -> Any:
    """jsonb приходит уже декодированным (codec), строка - только без codec"""
    if raw is None:
        return default
    if isinstance(raw, str):
        try:
            return json.loads(raw)
        except ValueError:
            return default
    return raw
