"""pytest 공용 fixture.

모든 테스트는 in-memory SQLite DB를 사용하여 격리된다.
- engine / record_store: 테스트마다 새 DB
- object_storage: 호출을 기록하는 가짜 오브젝트 스토리지
- ingest_service / image_query_service: 위 두 개로 조립한 서비스
- client: 서비스 의존성을 오버라이드한 TestClient
"""

import os
import sys
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine

# src/ 디렉토리를 import path에 추가
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "src"))

# core.config가 import 시점에 Settings()를 만들기 때문에 먼저 설정한다.
os.environ.setdefault("STORAGE_BUCKET_NAME", "test-bucket")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("AWS_REGION", "us-east-1")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import model.image  # noqa: E402,F401 — 테이블 등록
from core.dependencies import get_image_query_service, get_ingest_service  # noqa: E402
from core.exceptions import PresignFailed  # noqa: E402
from main import app  # noqa: E402
from repository.image_record_store import SqlImageRecordStore  # noqa: E402
from service.image_query_service import ImageQueryService  # noqa: E402
from service.ingest_service import IngestService  # noqa: E402
from storage.cdn import CloudFrontSigner  # noqa: E402
from storage.object_storage import ObjectMetadata, PresignedUpload  # noqa: E402

TEST_BUCKET = "test-bucket"
TEST_EXPIRY_SECS = 300


class FakeObjectStorage:
    """presign 요청을 기록하고 가짜 URL을 돌려준다. fail=True면 PresignFailed."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.presign_calls: list[tuple[str, str, str, int]] = []
        self.deleted: list[tuple[str, str]] = []

    def presign_upload(self, bucket, key, content_type, expiry_seconds):
        self.presign_calls.append((bucket, key, content_type, expiry_seconds))
        if self.fail:
            raise PresignFailed(f"presign PUT failed for s3://internal-{bucket}/{key}")
        return PresignedUpload(
            url=f"https://{bucket}.s3.amazonaws.com/{key}?X-Amz-Signature=fake",
            expires_at=datetime.now(UTC) + timedelta(seconds=expiry_seconds),
        )

    def get_object_metadata(self, bucket, key):
        return ObjectMetadata(size_bytes=1024)

    def delete_object(self, bucket, key):
        self.deleted.append((bucket, key))


@pytest.fixture()
def engine():
    """테스트마다 새 in-memory SQLite DB를 생성한다.

    StaticPool을 사용해야 모든 커넥션이 같은 in-memory DB를 공유한다.
    (기본값은 커넥션마다 별도 DB가 생성되어 테이블이 안 보임)
    """
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def record_store(engine):
    return SqlImageRecordStore(engine)


@pytest.fixture()
def object_storage():
    return FakeObjectStorage()


@pytest.fixture()
def failing_object_storage():
    return FakeObjectStorage(fail=True)


@pytest.fixture()
def ingest_service(record_store, object_storage):
    return IngestService(record_store, object_storage, TEST_BUCKET, TEST_EXPIRY_SECS)


@pytest.fixture(scope="session")
def rsa_private_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def rsa_private_key_pem(rsa_private_key) -> str:
    return rsa_private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.TraditionalOpenSSL,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode()


@pytest.fixture()
def cdn_signer(rsa_private_key_pem):
    return CloudFrontSigner("cdn.example.com", "K2JCJMDEHXQW5F", rsa_private_key_pem)


@pytest.fixture()
def image_query_service(record_store, cdn_signer):
    return ImageQueryService(record_store, cdn_signer, url_expiry_seconds=600)


@pytest.fixture()
def client(ingest_service, image_query_service):
    """서비스 의존성을 테스트용 인스턴스로 오버라이드한 TestClient."""
    app.dependency_overrides[get_ingest_service] = lambda: ingest_service
    app.dependency_overrides[get_image_query_service] = lambda: image_query_service
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
