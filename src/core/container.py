"""앱 시작 시 한 번 실행되는 명시적 와이어링.

설정값은 여기서만 읽고, 각 컴포넌트에는 평범한 값으로 넘긴다.
"""

from dataclasses import dataclass

from loguru import logger
from sqlalchemy.engine import Engine

from core.config import Settings
from model.database import create_db_and_tables, create_db_engine
from repository.image_record_store import SqlImageRecordStore
from service.image_query_service import ImageQueryService
from service.ingest_service import IngestService
from storage.cdn import CloudFrontSigner
from storage.object_storage import S3ObjectStorage, create_s3_client


@dataclass
class Container:
    engine: Engine
    ingest_service: IngestService
    image_query_service: ImageQueryService

    def close(self) -> None:
        self.engine.dispose()


def build_container(settings: Settings) -> Container:
    engine = create_db_engine(
        settings.DATABASE_URL,
        pool_size=settings.DATABASE_POOL_SIZE,
        pool_timeout=settings.DATABASE_POOL_TIMEOUT_SECS,
    )
    create_db_and_tables(engine)

    record_store = SqlImageRecordStore(engine)
    object_storage = S3ObjectStorage(
        create_s3_client(settings.AWS_REGION, settings.AWS_ENDPOINT_URL)
    )

    cdn_signer = None
    if settings.cdn_enabled:
        cdn_signer = CloudFrontSigner(
            settings.CDN_DOMAIN,
            settings.CDN_KEY_PAIR_ID,
            settings.CDN_PRIVATE_KEY_PEM.get_secret_value(),
        )
    else:
        logger.warning("CDN is not configured; download URLs will be omitted")

    return Container(
        engine=engine,
        ingest_service=IngestService(
            record_store,
            object_storage,
            bucket=settings.STORAGE_BUCKET_NAME,
            expiry_seconds=settings.STORAGE_UPLOAD_URL_EXPIRY_SECS,
        ),
        image_query_service=ImageQueryService(
            record_store,
            cdn_signer,
            url_expiry_seconds=settings.CDN_SIGNED_URL_EXPIRY_SECS,
        ),
    )
