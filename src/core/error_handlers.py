"""전역 예외 핸들러.

AppException 계열 예외를 잡아 일관된 JSON 응답으로 변환한다.
의존성 장애와 그 밖의 예상하지 못한 예외는 전체 내용을 로그에 남기고
INTERNAL_ERROR로만 응답한다.
main.py에서 app.add_exception_handler()로 등록한다.
"""

from fastapi import Request
from fastapi.responses import JSONResponse
from loguru import logger

from core.exceptions import AppException


def _error_response(exc: AppException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error_code": exc.error_code,
            "message": exc.message,
        },
    )


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    return _error_response(exc)


async def dependency_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.opt(exception=exc).error(
        f"{request.method} {request.url.path} | dependency failure: {type(exc).__name__}: {exc}"
    )
    return _error_response(AppException())


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.opt(exception=exc).error(
        f"{request.method} {request.url.path} | unhandled {type(exc).__name__}: {exc}"
    )
    return _error_response(AppException())
