"""ImageRecord 영속화 포트와 SQL 어댑터.

ImageRecordStore는 Executor가 의존하는 추상화이고,
SqlImageRecordStore가 유일한 운영 구현이다 (SQLModel/SQLAlchemy 엔진 위에서 동작).

동시성:
- save는 DB의 원자적 upsert(ON CONFLICT DO UPDATE)에 의존한다.
- update는 updated_at을 버전으로 쓰는 조건부 쓰기(compare-and-set)다.
  다른 writer가 먼저 커밋했으면 다시 읽고 변환을 재적용한다.
"""

from collections.abc import Callable, Iterable
from datetime import UTC, datetime, timedelta
from typing import Protocol

from loguru import logger
from sqlalchemy import update as sa_update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, col, select

from core.exceptions import (
    DecodeFailed,
    ImmutableFieldChanged,
    StoreUnavailable,
    UpdateConflict,
)
from model.image import ImageContentType, ImageRecord, ImageRecordRow, ImageStatus

RecordTransform = Callable[[ImageRecord], ImageRecord]

DEFAULT_MAX_UPDATE_ATTEMPTS = 3

_UPSERT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class ImageRecordStore(Protocol):
    def save(self, record: ImageRecord) -> None:
        """id 기준 upsert. 없으면 삽입, 있으면 모든 필드를 덮어쓴다."""
        ...

    def find_by_id(self, image_id: str) -> ImageRecord | None:
        """없으면 에러 대신 None."""
        ...

    def find_by_ids(self, image_ids: Iterable[str]) -> list[ImageRecord]:
        """배치 조회. 순서는 보장하지 않고, 없는 id는 빠진다."""
        ...

    def update(self, image_id: str, transform: RecordTransform) -> None:
        """현재 레코드에 순수 변환을 적용해 저장한다. 레코드가 없으면 조용히 성공한다."""
        ...


def _as_utc(value: datetime) -> datetime:
    # SQLite는 tzinfo 없이 돌려준다. 저장 시 항상 UTC로 정규화하므로 UTC로 복원.
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def _row_values(record: ImageRecord) -> dict:
    return {
        "id": record.id,
        "status": record.status.value,
        "content_type": record.content_type.value,
        "file_name": record.file_name,
        "size_bytes": record.size_bytes,
        "object_key": record.object_key,
        "created_at": _as_utc(record.created_at),
        "updated_at": _as_utc(record.updated_at),
    }


def _to_record(row: ImageRecordRow) -> ImageRecord:
    try:
        status = ImageStatus(row.status)
    except ValueError as exc:
        raise DecodeFailed(f"image {row.id}: unknown status {row.status!r}") from exc
    try:
        content_type = ImageContentType(row.content_type)
    except ValueError as exc:
        raise DecodeFailed(
            f"image {row.id}: unknown content type {row.content_type!r}"
        ) from exc

    return ImageRecord(
        id=row.id,
        status=status,
        content_type=content_type,
        file_name=row.file_name,
        size_bytes=row.size_bytes,
        object_key=row.object_key,
        created_at=_as_utc(row.created_at),
        updated_at=_as_utc(row.updated_at),
    )


class SqlImageRecordStore:
    def __init__(self, engine: Engine, max_update_attempts: int = DEFAULT_MAX_UPDATE_ATTEMPTS):
        if max_update_attempts < 1:
            raise ValueError("max_update_attempts must be >= 1")
        self._engine = engine
        self._max_update_attempts = max_update_attempts

    def save(self, record: ImageRecord) -> None:
        values = _row_values(record)
        insert = _UPSERT_INSERTS.get(self._engine.dialect.name)
        try:
            if insert is None:
                with Session(self._engine) as session:
                    session.merge(ImageRecordRow(**values))
                    session.commit()
                return

            stmt = insert(ImageRecordRow).values(**values)
            stmt = stmt.on_conflict_do_update(
                index_elements=["id"],
                set_={key: stmt.excluded[key] for key in values if key != "id"},
            )
            with self._engine.begin() as conn:
                conn.execute(stmt)
        except SQLAlchemyError as exc:
            raise StoreUnavailable(f"failed to save image {record.id}") from exc

    def find_by_id(self, image_id: str) -> ImageRecord | None:
        try:
            with Session(self._engine) as session:
                row = session.get(ImageRecordRow, image_id)
        except SQLAlchemyError as exc:
            raise StoreUnavailable(f"failed to load image {image_id}") from exc

        if row is None:
            return None
        return _to_record(row)

    def find_by_ids(self, image_ids: Iterable[str]) -> list[ImageRecord]:
        ids = list(dict.fromkeys(image_ids))
        if not ids:
            return []

        try:
            with Session(self._engine) as session:
                rows = session.exec(
                    select(ImageRecordRow).where(col(ImageRecordRow.id).in_(ids))
                ).all()
        except SQLAlchemyError as exc:
            raise StoreUnavailable(f"failed to load {len(ids)} images") from exc

        return [_to_record(row) for row in rows]

    def update(self, image_id: str, transform: RecordTransform) -> None:
        for attempt in range(1, self._max_update_attempts + 1):
            current = self.find_by_id(image_id)
            if current is None:
                return

            changed = transform(current)
            if (
                changed.id != current.id
                or changed.object_key != current.object_key
                or changed.created_at != current.created_at
            ):
                raise ImmutableFieldChanged(
                    f"image {image_id}: id, object_key and created_at cannot be changed"
                )

            now = datetime.now(UTC)
            if now <= current.updated_at:
                now = current.updated_at + timedelta(microseconds=1)
            values = _row_values(changed.model_copy(update={"updated_at": now}))
            values.pop("id")

            stmt = (
                sa_update(ImageRecordRow)
                .where(col(ImageRecordRow.id) == image_id)
                .where(col(ImageRecordRow.updated_at) == _as_utc(current.updated_at))
                .values(**values)
            )
            try:
                with self._engine.begin() as conn:
                    result = conn.execute(stmt)
            except SQLAlchemyError as exc:
                raise StoreUnavailable(f"failed to update image {image_id}") from exc

            if result.rowcount == 1:
                return
            logger.debug(f"update conflict on image {image_id} (attempt {attempt})")

        raise UpdateConflict(
            f"image {image_id}: concurrent writers, gave up after "
            f"{self._max_update_attempts} attempts"
        )
