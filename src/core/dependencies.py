from fastapi import Request

from service.image_query_service import ImageQueryService
from service.ingest_service import IngestService

# lifespan에서 만든 서비스를 라우터에 주입한다.
# 테스트에서는 app.dependency_overrides로 교체한다.


def get_ingest_service(request: Request) -> IngestService:
    return request.app.state.container.ingest_service


def get_image_query_service(request: Request) -> ImageQueryService:
    return request.app.state.container.image_query_service
