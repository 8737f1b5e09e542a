"""오브젝트 스토리지 포트와 S3 어댑터.

presign_upload가 만든 URL은 해당 key에 대한 PUT 한 번만 허용한다.
ContentType을 서명에 포함하므로(SigV4 signed headers) 선언과 다른
Content-Type으로 올리면 S3가 거절한다.

botocore 예외는 모두 StorageError 계열로 감싼다. 원인은 __cause__에만 남는다.
"""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Protocol

import boto3
from botocore.client import Config
from botocore.exceptions import BotoCoreError, ClientError
from loguru import logger

from core.exceptions import DeleteFailed, MetadataFailed, PresignFailed


@dataclass(frozen=True)
class PresignedUpload:
    url: str
    expires_at: datetime


@dataclass(frozen=True)
class ObjectMetadata:
    size_bytes: int


class ObjectStorage(Protocol):
    def presign_upload(
        self, bucket: str, key: str, content_type: str, expiry_seconds: int
    ) -> PresignedUpload: ...

    def get_object_metadata(self, bucket: str, key: str) -> ObjectMetadata: ...

    def delete_object(self, bucket: str, key: str) -> None: ...


def create_s3_client(region: str, endpoint_url: str | None = None):
    return boto3.client(
        "s3",
        region_name=region,
        endpoint_url=endpoint_url,
        config=Config(signature_version="s3v4"),
    )


class S3ObjectStorage:
    def __init__(self, client):
        self._client = client

    def presign_upload(
        self, bucket: str, key: str, content_type: str, expiry_seconds: int
    ) -> PresignedUpload:
        # 서명 직전 시각 기준이므로 실제 만료보다 늦게 보고하지 않는다.
        issued_at = datetime.now(UTC)
        try:
            url = self._client.generate_presigned_url(
                ClientMethod="put_object",
                Params={
                    "Bucket": bucket,
                    "Key": key,
                    "ContentType": content_type,
                },
                ExpiresIn=expiry_seconds,
            )
        except (BotoCoreError, ClientError) as exc:
            raise PresignFailed(f"presign PUT failed for s3://{bucket}/{key}") from exc

        logger.debug(f"presigned PUT s3://{bucket}/{key} ({content_type}, {expiry_seconds}s)")
        return PresignedUpload(
            url=url,
            expires_at=issued_at + timedelta(seconds=expiry_seconds),
        )

    def get_object_metadata(self, bucket: str, key: str) -> ObjectMetadata:
        try:
            response = self._client.head_object(Bucket=bucket, Key=key)
        except (BotoCoreError, ClientError) as exc:
            raise MetadataFailed(f"head object failed for s3://{bucket}/{key}") from exc

        size = response.get("ContentLength")
        if size is None:
            raise MetadataFailed(f"missing content-length for s3://{bucket}/{key}")
        return ObjectMetadata(size_bytes=int(size))

    def delete_object(self, bucket: str, key: str) -> None:
        try:
            self._client.delete_object(Bucket=bucket, Key=key)
        except (BotoCoreError, ClientError) as exc:
            raise DeleteFailed(f"delete failed for s3://{bucket}/{key}") from exc
