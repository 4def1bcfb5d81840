"""
API module: HTTP endpoints for the Telegram webhook, admin VPS tools and health.
"""
import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Optional

from aiogram import Bot
from aiogram.client.session.aiohttp import AiohttpSession
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

import config
import database
from app.api import telegram_webhook, vps
from app.api.dependencies import ApiError
from app.core.logging_config import setup_logging
from app.core.message_registry import MessageRegistry
from app.handlers import WebhookDispatcher
from app.services.vpn.sync import vps_connections_sync_task
from app.utils.telegram_safe import TelegramTransport

logger = logging.getLogger(__name__)


async def _stop_task(task: Optional[asyncio.Task]) -> None:
    if task is None or task.done():
        return
    task.cancel()
    try:
        await task
    except asyncio.CancelledError:
        pass
    except Exception as e:
        logger.error(f"Error during shutdown of task {task.get_name()}: {e}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(config.LOG_LEVEL)
    logger.info(f"STARTUP [service={config.SERVICE_NAME}, env={config.APP_ENV}]")

    if not await database.init_db():
        # degraded: webhook branches report store failures per update
        logger.error("DATABASE_INIT_FAILED, starting in degraded mode")

    bot = Bot(token=config.BOT_TOKEN, session=AiohttpSession(timeout=config.TELEGRAM_REQUEST_TIMEOUT))
    registry = MessageRegistry()
    transport = TelegramTransport(bot, registry)
    app.state.bot = bot
    app.state.dispatcher = WebhookDispatcher(transport, registry, bot_username=config.BOT_USERNAME)

    sync_task = None
    if config.VPS_CONNECTION_SYNC_ENABLED:
        sync_task = asyncio.create_task(vps_connections_sync_task(), name="vps_connections_sync")
    else:
        logger.info("VPS connection sync worker disabled (VPS_CONNECTION_SYNC_ENABLED=false)")

    try:
        yield
    finally:
        await _stop_task(sync_task)
        try:
            await bot.session.close()
            logger.info("Bot session closed")
        except Exception as e:
            logger.debug(f"Error closing bot session: {e}")
        try:
            await database.close_pool()
        except Exception as e:
            logger.error(f"Error closing database pool: {e}")
        logger.info("SHUTDOWN_COMPLETED")


def create_app(with_lifespan: bool = True) -> FastAPI:
    app = FastAPI(title=config.SERVICE_NAME, lifespan=lifespan if with_lifespan else None)
    app.include_router(telegram_webhook.router)
    app.include_router(vps.router)

    @app.exception_handler(ApiError)
    async def api_error_handler(request: Request, exc: ApiError):
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.get("/health")
    async def health():
        return {"ok": True, "service": config.SERVICE_NAME, "db_ready": database.DB_READY}

    return app


app = create_app()

__all__ = ["app", "create_app", "lifespan"]
