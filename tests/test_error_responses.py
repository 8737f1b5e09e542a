"""커스텀 에러 응답 형식 검증 테스트.

모든 에러가 {"error_code": "...", "message": "..."} 형식인지 확인한다.
의존성 장애는 백엔드 상세 없이 INTERNAL_ERROR로만 나가야 한다.
"""

from unittest import mock

from fastapi.testclient import TestClient

from core.dependencies import get_image_query_service, get_ingest_service
from core.exceptions import DecodeFailed
from main import app
from service.image_query_service import ImageQueryService
from service.ingest_service import IngestService

INGEST_URL = "/api/image/v1/ingest/create-presigned-url"


def test_error_has_error_code_and_message(client):
    """에러 응답에 error_code + message 필드가 존재한다."""
    resp = client.post(INGEST_URL, json={"content_type": "image/bmp", "file_name": "a.bmp"})
    data = resp.json()
    assert "error_code" in data, f"error_code 필드 없음: {data}"
    assert "message" in data, f"message 필드 없음: {data}"
    assert isinstance(data["error_code"], str)
    assert isinstance(data["message"], str)


def test_presign_failure_is_opaque_internal_error(client, record_store, failing_object_storage):
    """presign 실패 → 500 INTERNAL_ERROR, 버킷/키 같은 상세는 노출하지 않는다."""
    app.dependency_overrides[get_ingest_service] = lambda: IngestService(
        record_store, failing_object_storage, "test-bucket", 300
    )

    resp = client.post(INGEST_URL, json={"content_type": "image/png", "file_name": "a.png"})

    assert resp.status_code == 500
    data = resp.json()
    assert data["error_code"] == "INTERNAL_ERROR"
    assert "internal-test-bucket" not in resp.text
    assert "ingest/" not in resp.text


def test_decode_failure_is_opaque_internal_error(client):
    store = mock.MagicMock()
    store.find_by_id.side_effect = DecodeFailed("image x: unknown status 'Archived'")
    app.dependency_overrides[get_image_query_service] = lambda: ImageQueryService(
        store, None, url_expiry_seconds=600
    )

    resp = client.get("/api/image/v1/images/x")

    assert resp.status_code == 500
    assert resp.json()["error_code"] == "INTERNAL_ERROR"
    assert "Archived" not in resp.text


def test_unexpected_exception_is_opaque_internal_error(client):
    """분류되지 않은 예외도 평문 500이 아니라 INTERNAL_ERROR JSON으로 나간다."""
    service = mock.MagicMock()
    service.create_presigned_upload_url.side_effect = RuntimeError("boom at sqlite3 cursor")
    app.dependency_overrides[get_ingest_service] = lambda: service

    raw_client = TestClient(app, raise_server_exceptions=False)
    resp = raw_client.post(INGEST_URL, json={"content_type": "image/png", "file_name": "a.png"})

    assert resp.status_code == 500
    assert resp.json()["error_code"] == "INTERNAL_ERROR"
    assert "boom" not in resp.text


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"
