from datetime import datetime

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel

from core.dependencies import get_ingest_service
from service.ingest_service import IngestService

router = APIRouter(prefix="/api/image/v1/ingest", tags=["ingest"])


# --- 요청/응답 스키마 ---

class CreatePresignedUrlRequest(BaseModel):
    content_type: str
    file_name: str


class CreatePresignedUrlResponse(BaseModel):
    image_id: str
    upload_url: str
    expires_at: datetime


# --- 엔드포인트 ---

@router.post(
    "/create-presigned-url",
    response_model=CreatePresignedUrlResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_presigned_url(
    req: CreatePresignedUrlRequest,
    service: IngestService = Depends(get_ingest_service),
):
    """업로드용 presigned PUT URL 발급.

    클라이언트는 받은 upload_url로 선언한 Content-Type 그대로 PUT 해야 한다.
    """
    result = service.create_presigned_upload_url(req.content_type, req.file_name)
    return CreatePresignedUrlResponse(
        image_id=result.image_id,
        upload_url=result.upload_url,
        expires_at=result.expires_at,
    )
