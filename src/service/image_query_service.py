from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime

from core.exceptions import ImageNotFound
from model.image import ImageRecord, ImageStatus
from repository.image_record_store import ImageRecordStore
from storage.cdn import CloudFrontSigner


@dataclass(frozen=True)
class ImageView:
    id: str
    status: str
    content_type: str
    file_name: str
    size_bytes: int | None
    created_at: datetime
    updated_at: datetime
    download_url: str | None


class ImageQueryService:
    """이미지 레코드 조회. Ready 상태일 때만 CDN signed URL을 붙인다."""

    def __init__(
        self,
        record_store: ImageRecordStore,
        cdn_signer: CloudFrontSigner | None,
        url_expiry_seconds: int,
    ):
        self._record_store = record_store
        self._cdn_signer = cdn_signer
        self._url_expiry_seconds = url_expiry_seconds

    def _to_view(self, record: ImageRecord) -> ImageView:
        download_url = None
        if record.status is ImageStatus.READY and self._cdn_signer is not None:
            download_url = self._cdn_signer.sign_read_url(
                record.object_key, self._url_expiry_seconds
            )
        return ImageView(
            id=record.id,
            status=record.status.value,
            content_type=record.content_type.value,
            file_name=record.file_name,
            size_bytes=record.size_bytes,
            created_at=record.created_at,
            updated_at=record.updated_at,
            download_url=download_url,
        )

    def get_image(self, image_id: str) -> ImageView:
        record = self._record_store.find_by_id(image_id)
        if record is None:
            raise ImageNotFound
        return self._to_view(record)

    def get_images(self, image_ids: Iterable[str]) -> list[ImageView]:
        """없는 id는 결과에서 빠진다. id 순으로 정렬해 반환 (ULID라 생성 순서와 같다)."""
        records = self._record_store.find_by_ids(image_ids)
        return [self._to_view(r) for r in sorted(records, key=lambda r: r.id)]
