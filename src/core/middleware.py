import time

from fastapi import Request, Response
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware
from ulid import ULID

SLOW_THRESHOLD_MS = 500
REQUEST_ID_HEADER = "X-Request-ID"
MAX_REQUEST_ID_LENGTH = 64


def _request_id(request: Request) -> str:
    incoming = request.headers.get(REQUEST_ID_HEADER, "")
    if incoming and len(incoming) <= MAX_REQUEST_ID_LENGTH and incoming.isprintable():
        return incoming
    return str(ULID())


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """요청마다 request id를 붙이고 접근 로그를 남긴다.

    request id는 loguru 컨텍스트(extra["request_id"])로 들어가므로
    서비스/저장소 계층 로그에도 같은 값이 찍힌다. 응답 헤더로도 돌려준다.
    쿼리스트링은 기록하지 않는다 (presigned URL 서명 값이 섞일 수 있음).
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = _request_id(request)
        start = time.perf_counter()

        with logger.contextualize(request_id=request_id):
            response = await call_next(request)

            elapsed_ms = (time.perf_counter() - start) * 1000
            line = f"{request.method} {request.url.path} -> {response.status_code} ({elapsed_ms:.0f}ms)"
            if elapsed_ms > SLOW_THRESHOLD_MS:
                logger.warning(f"{line} slow")
            else:
                logger.info(line)

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
