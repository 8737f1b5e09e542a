from dataclasses import dataclass
from datetime import UTC, datetime

from loguru import logger

from core.exceptions import InvalidFileName, StorageError, UnsupportedContentType
from model.image import (
    ImageContentType,
    ImageRecord,
    ImageStatus,
    new_image_id,
    object_key_for,
)
from repository.image_record_store import ImageRecordStore
from storage.object_storage import ObjectStorage

MAX_FILE_NAME_LENGTH = 255


@dataclass(frozen=True)
class PresignedIngestUrl:
    image_id: str
    upload_url: str
    expires_at: datetime


def parse_content_type(value: str) -> ImageContentType:
    """허용 목록과 정확히 일치하는 값만 통과시킨다.

    "image/*" 같은 와일드카드나 "image/jpeg;charset=utf-8" 같은
    파라미터 형태는 열거형 멤버가 아니므로 모두 거절된다.
    """
    try:
        return ImageContentType(value)
    except ValueError:
        raise UnsupportedContentType(value) from None


def validate_file_name(file_name: str) -> None:
    if not file_name:
        raise InvalidFileName("파일 이름은 비어 있을 수 없습니다")
    # len()은 코드 포인트 개수
    if len(file_name) > MAX_FILE_NAME_LENGTH:
        raise InvalidFileName(f"파일 이름은 {MAX_FILE_NAME_LENGTH}자를 넘을 수 없습니다")
    if any(ord(ch) <= 31 for ch in file_name):
        raise InvalidFileName("파일 이름에 제어 문자를 포함할 수 없습니다")
    # JSON의 "\ud800" 같은 짝 없는 서로게이트는 str에는 들어오지만 저장 시 인코딩에 실패한다
    try:
        file_name.encode("utf-8")
    except UnicodeEncodeError:
        raise InvalidFileName("파일 이름이 올바른 UTF-8 문자열이 아닙니다") from None


class IngestService:
    """업로드용 presigned URL 발급 커맨드.

    흐름:
    1. content_type, file_name 검증 (실패 시 부수효과 없음)
    2. ULID 발급 → object_key = "ingest/" + id
    3. Pending 레코드 저장
    4. 저장소에 presigned PUT URL 요청
    """

    def __init__(
        self,
        record_store: ImageRecordStore,
        object_storage: ObjectStorage,
        bucket: str,
        expiry_seconds: int,
    ):
        self._record_store = record_store
        self._object_storage = object_storage
        self._bucket = bucket
        self._expiry_seconds = expiry_seconds

    def create_presigned_upload_url(self, content_type: str, file_name: str) -> PresignedIngestUrl:
        parsed_content_type = parse_content_type(content_type)
        validate_file_name(file_name)

        image_id = new_image_id()
        object_key = object_key_for(image_id)
        now = datetime.now(UTC)

        # 레코드가 먼저 저장되어야 그 object_key를 가리키는 URL을 내보낼 수 있다.
        self._record_store.save(
            ImageRecord(
                id=image_id,
                status=ImageStatus.PENDING,
                content_type=parsed_content_type,
                file_name=file_name,
                size_bytes=None,
                object_key=object_key,
                created_at=now,
                updated_at=now,
            )
        )

        try:
            presigned = self._object_storage.presign_upload(
                self._bucket,
                object_key,
                parsed_content_type.value,
                self._expiry_seconds,
            )
        except StorageError:
            # 보상 삭제는 하지 않는다. Pending 레코드는 별도 정리 작업이 처리한다.
            logger.warning(f"image {image_id} saved as Pending but presign failed")
            raise

        logger.info(f"issued upload url for image {image_id} ({parsed_content_type.value})")
        return PresignedIngestUrl(
            image_id=image_id,
            upload_url=presigned.url,
            expires_at=presigned.expires_at,
        )
