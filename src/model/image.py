"""이미지 업로드 레코드 도메인 모델.

- ImageStatus / ImageContentType: 닫힌 열거형. 저장소 문자열과 1:1로 매핑된다.
- ImageRecord: 불변 값 객체. 변경은 model_copy(update=...)로 새 객체를 만든다.
- ImageRecordRow: image_records 테이블 (저장소 문자열 그대로 보관).
"""

from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict
from sqlalchemy import Column, DateTime
from sqlmodel import Field, SQLModel
from ulid import ULID

OBJECT_KEY_PREFIX = "ingest/"


class InvalidStatusTransition(ValueError):
    """상태 머신이 허용하지 않는 전이 (예: Ready → Pending)."""


class ImageStatus(str, Enum):
    PENDING = "Pending"
    READY = "Ready"
    FAILED = "Failed"

    @property
    def is_terminal(self) -> bool:
        return self is not ImageStatus.PENDING

    def can_transition_to(self, target: "ImageStatus") -> bool:
        # Pending → Ready | Failed 만 허용. 종료 상태에서는 나갈 수 없다.
        return self is ImageStatus.PENDING and target.is_terminal


class ImageContentType(str, Enum):
    """업로드 허용 MIME 타입. 와일드카드나 파라미터가 붙은 형태는 멤버가 아니다."""

    JPEG = "image/jpeg"
    PNG = "image/png"
    WEBP = "image/webp"
    AVIF = "image/avif"


class ImageRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    status: ImageStatus
    content_type: ImageContentType
    file_name: str
    size_bytes: int | None = None
    object_key: str
    created_at: datetime
    updated_at: datetime

    def _transition(self, target: ImageStatus, now: datetime, **changes) -> "ImageRecord":
        if not self.status.can_transition_to(target):
            raise InvalidStatusTransition(
                f"{self.status.value} → {target.value} 전이는 허용되지 않습니다"
            )
        return self.model_copy(update={"status": target, "updated_at": now, **changes})

    def mark_ready(self, size_bytes: int, now: datetime | None = None) -> "ImageRecord":
        """업로드 확인 후 Ready로 전이한 사본을 반환한다."""
        return self._transition(
            ImageStatus.READY, now or datetime.now(UTC), size_bytes=size_bytes
        )

    def mark_failed(self, now: datetime | None = None) -> "ImageRecord":
        return self._transition(ImageStatus.FAILED, now or datetime.now(UTC))


class ImageRecordRow(SQLModel, table=True):
    __tablename__ = "image_records"

    id: str = Field(primary_key=True)
    status: str
    content_type: str
    file_name: str
    size_bytes: int | None = None
    object_key: str
    created_at: datetime = Field(sa_column=Column(DateTime(timezone=True), nullable=False))
    updated_at: datetime = Field(sa_column=Column(DateTime(timezone=True), nullable=False))


def new_image_id() -> str:
    """시간순 정렬 가능한 ULID 문자열. 실행 간 조율이 필요 없다."""
    return str(ULID())


def object_key_for(image_id: str) -> str:
    return f"{OBJECT_KEY_PREFIX}{image_id}"
