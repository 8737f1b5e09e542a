"""CloudFront signed URL 테스트. 서명은 공개키로 직접 검증한다."""

import base64
import time
from datetime import UTC, datetime
from urllib.parse import parse_qs, urlparse

import pytest
from botocore.signers import CloudFrontSigner as BotocoreCloudFrontSigner
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec, padding

from storage.cdn import CloudFrontSigner


def _decode_cloudfront_b64(value: str) -> bytes:
    return base64.b64decode(value.replace("-", "+").replace("_", "=").replace("~", "/"))


def test_signed_url_shape(cdn_signer):
    url = cdn_signer.sign_read_url("ingest/01ABC", 600)

    parsed = urlparse(url)
    query = parse_qs(parsed.query)
    assert parsed.scheme == "https"
    assert parsed.netloc == "cdn.example.com"
    assert parsed.path == "/ingest/01ABC"
    assert query["Key-Pair-Id"] == ["K2JCJMDEHXQW5F"]
    expires = int(query["Expires"][0])
    assert abs(expires - (int(time.time()) + 600)) <= 5


def test_signature_verifies_with_public_key(cdn_signer, rsa_private_key):
    url = cdn_signer.sign_read_url("ingest/01ABC", 600)
    query = parse_qs(urlparse(url).query)
    expires = int(query["Expires"][0])

    policy = BotocoreCloudFrontSigner("unused", None).build_policy(
        "https://cdn.example.com/ingest/01ABC",
        datetime.fromtimestamp(expires, UTC),
    )
    signature = _decode_cloudfront_b64(query["Signature"][0])

    # 서명이 틀리면 InvalidSignature가 발생한다
    rsa_private_key.public_key().verify(
        signature, policy.encode("utf8"), padding.PKCS1v15(), hashes.SHA1()
    )


def test_escaped_newlines_in_pem_are_accepted(rsa_private_key_pem):
    escaped = rsa_private_key_pem.replace("\n", "\\n")

    signer = CloudFrontSigner("cdn.example.com/", "KID", escaped)

    assert signer.sign_read_url("/ingest/x", 60).startswith("https://cdn.example.com/ingest/x?")


def test_repr_hides_private_key(cdn_signer, rsa_private_key_pem):
    text = repr(cdn_signer)
    assert "K2JCJMDEHXQW5F" in text
    assert "PRIVATE KEY" not in text


def test_invalid_pem_is_rejected():
    with pytest.raises(ValueError):
        CloudFrontSigner("cdn.example.com", "KID", "not a key")


def test_non_rsa_key_is_rejected():
    ec_pem = (
        ec.generate_private_key(ec.SECP256R1())
        .private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption(),
        )
        .decode()
    )
    with pytest.raises(ValueError):
        CloudFrontSigner("cdn.example.com", "KID", ec_pem)
