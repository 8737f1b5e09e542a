from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine

import model.image  # noqa: F401 — 테이블 등록


def create_db_engine(url: str, pool_size: int = 20, pool_timeout: int = 5) -> Engine:
    """DATABASE_URL로 엔진을 만든다.

    SQLite는 스레드 간 커넥션 공유를 위해 check_same_thread=False가 필요하고,
    in-memory("sqlite://")는 StaticPool이어야 모든 세션이 같은 DB를 본다.
    """
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(url, **kwargs)

    return create_engine(
        url,
        pool_size=pool_size,
        pool_timeout=pool_timeout,
        pool_pre_ping=True,
    )


def create_db_and_tables(engine: Engine) -> None:
    SQLModel.metadata.create_all(engine)
