import sys

from loguru import logger

PRETTY_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<magenta>{extra[request_id]}</magenta> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)


def setup_logger(level: str = "INFO", fmt: str = "pretty"):
    """Loguru 기본 설정. 앱 시작 시 한 번 호출.

    fmt="json"이면 한 줄짜리 JSON 레코드로 출력한다 (로그 수집기용).
    요청 밖에서 찍히는 로그의 request_id는 "-".
    """
    fmt = fmt.lower()
    if fmt not in ("pretty", "json"):
        raise ValueError(f"invalid log format: {fmt!r} (expected pretty | json)")

    logger.remove()
    logger.configure(extra={"request_id": "-"})
    if fmt == "json":
        logger.add(sys.stderr, level=level.upper(), serialize=True)
    else:
        logger.add(sys.stderr, format=PRETTY_FORMAT, level=level.upper())
    return logger
