from contextlib import asynccontextmanager

from fastapi import FastAPI
from loguru import logger

from core.config import settings
from core.container import build_container


@asynccontextmanager
async def lifespan(app: FastAPI):
    # === 시작 ===
    logger.info(f"{settings.APP_NAME} v{settings.APP_VERSION}")

    container = build_container(settings)
    logger.info(f"Database ready ({container.engine.url.render_as_string(hide_password=True)})")
    logger.info(
        f"Upload bucket: {settings.STORAGE_BUCKET_NAME} "
        f"(url expiry {settings.STORAGE_UPLOAD_URL_EXPIRY_SECS}s, region {settings.AWS_REGION})"
    )

    app.state.settings = settings
    app.state.container = container

    yield

    # === 종료 ===
    container.close()
    logger.info("Shutting down")
