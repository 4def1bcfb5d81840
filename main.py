"""
Entry point: uvicorn serving the webhook API.

Logging is configured before anything else imports and logs.
"""
import logging

from app.core.logging_config import setup_logging

import config

setup_logging(config.LOG_LEVEL)

import uvicorn

logger = logging.getLogger(__name__)


def main() -> None:
    logger.info(f"Starting {config.SERVICE_NAME} on {config.HTTP_HOST}:{config.HTTP_PORT} (APP_ENV={config.APP_ENV})")
    uvicorn.run(
        "app.api:app",
        host=config.HTTP_HOST,
        port=config.HTTP_PORT,
        log_level=config.LOG_LEVEL.lower(),
        log_config=None,
    )


if __name__ == "__main__":
    main()
