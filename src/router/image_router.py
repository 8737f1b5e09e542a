from datetime import datetime

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from core.dependencies import get_image_query_service
from core.exceptions import TooManyImageIds
from service.image_query_service import ImageQueryService, ImageView

router = APIRouter(prefix="/api/image/v1/images", tags=["images"])

MAX_BATCH_IDS = 100


class ImageResponse(BaseModel):
    id: str
    status: str
    content_type: str
    file_name: str
    size_bytes: int | None
    created_at: datetime
    updated_at: datetime
    download_url: str | None

    @classmethod
    def from_view(cls, view: ImageView) -> "ImageResponse":
        return cls(
            id=view.id,
            status=view.status,
            content_type=view.content_type,
            file_name=view.file_name,
            size_bytes=view.size_bytes,
            created_at=view.created_at,
            updated_at=view.updated_at,
            download_url=view.download_url,
        )


@router.get("/", response_model=list[ImageResponse])
def list_images(
    ids: list[str] = Query(default=[]),
    service: ImageQueryService = Depends(get_image_query_service),
):
    """?ids=a&ids=b 배치 조회. 없는 id는 빠진다."""
    if len(ids) > MAX_BATCH_IDS:
        raise TooManyImageIds(f"한 번에 최대 {MAX_BATCH_IDS}개까지 조회할 수 있습니다")
    return [ImageResponse.from_view(v) for v in service.get_images(ids)]


@router.get("/{image_id}", response_model=ImageResponse)
def get_image(
    image_id: str,
    service: ImageQueryService = Depends(get_image_query_service),
):
    return ImageResponse.from_view(service.get_image(image_id))
