import uvicorn
from fastapi import FastAPI

from core.config import settings
from core.error_handlers import (
    app_exception_handler,
    dependency_exception_handler,
    unhandled_exception_handler,
)
from core.exceptions import AppException, RecordStoreError, StorageError
from core.lifespan import lifespan
from core.middleware import RequestLoggingMiddleware
from router.image_router import router as image_router
from router.ingest_router import router as ingest_router
from utility.logger import setup_logger

setup_logger(settings.LOG_LEVEL, settings.LOG_FORMAT)

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="이미지 직접 업로드용 presigned URL 발급 서비스",
    lifespan=lifespan,
)

app.add_middleware(RequestLoggingMiddleware)
app.add_exception_handler(AppException, app_exception_handler)
app.add_exception_handler(RecordStoreError, dependency_exception_handler)
app.add_exception_handler(StorageError, dependency_exception_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)

app.include_router(ingest_router)
app.include_router(image_router)


@app.get("/health")
async def health():
    return {
        "status": "ok",
        "app": settings.APP_NAME,
        "version": settings.APP_VERSION,
    }


if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        access_log=False,
    )
