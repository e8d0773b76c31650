"""
Define application startup and shutdown procedures
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI
from core.config import get_settings, get_storage_config
from core.deps import init_storage_gateway
from api.files.storage import StorageNotReadyError
from core.logger import logger


def _log_setting(key: str, value):
    """Log a setting, masking sensitive values like passwords and secrets"""
    if ("PASSWORD" in key or "SECRET" in key or "KEY_ID" in key) and value is not None:
        logger.info("  %s: %s", key, "*****")
    else:
        logger.info("  %s: %s", key, value)


# Handle startup/shutdown tasks
@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info("In lifespan...starting up")

    # Print configuration settings (mask sensitive info)
    logger.info("Configuration Settings:")

    settings = get_settings()

    # Log computed fields first (they don't appear in vars())
    computed_fields = {
        "AWS_ACCESS_KEY_ID": settings.AWS_ACCESS_KEY_ID,
        "AWS_SECRET_ACCESS_KEY": settings.AWS_SECRET_ACCESS_KEY,
    }

    for key, value in computed_fields.items():
        _log_setting(key, value)

    # Log remaining settings
    for key, value in vars(settings).items():
        _log_setting(key, value)

    # Verify the bucket before serving; requests re-check if this fails
    logger.info("Initializing storage container...")
    gateway = init_storage_gateway(get_storage_config())
    try:
        gateway.ensure_container()
        logger.info("Storage container '%s' is ready", gateway.bucket)
    except StorageNotReadyError as e:
        logger.error("Storage container initialization failed: %s", e)

    logger.info("In lifespan...yield")
    try:
        yield
    finally:
        # Shutdown
        logger.info("In lifespan...shutting down")
