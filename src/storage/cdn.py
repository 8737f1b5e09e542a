"""CloudFront signed URL 생성기.

업로드 경로와는 독립적이다. 읽기 경로가 Ready 이미지의 다운로드 URL을 만들 때 쓴다.
개인키는 프로세스 메모리에만 두고 로그나 repr에 절대 노출하지 않는다.
"""

from datetime import UTC, datetime, timedelta
from urllib.parse import quote

from botocore.signers import CloudFrontSigner as _BotocoreCloudFrontSigner
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa


def _load_rsa_private_key(private_key_pem: str) -> rsa.RSAPrivateKey:
    # 환경변수로 넘어온 PEM은 줄바꿈이 "\n" 문자열로 들어오는 경우가 많다.
    pem = private_key_pem.replace("\\n", "\n").strip().encode()
    try:
        key = serialization.load_pem_private_key(pem, password=None)
    except (ValueError, TypeError) as exc:
        raise ValueError("CDN private key is not a valid unencrypted PEM") from exc
    if not isinstance(key, rsa.RSAPrivateKey):
        raise ValueError("CDN private key must be an RSA key")
    return key


class CloudFrontSigner:
    def __init__(self, domain: str, key_pair_id: str, private_key_pem: str):
        self.domain = domain.strip().rstrip("/")
        self.key_pair_id = key_pair_id
        private_key = _load_rsa_private_key(private_key_pem)

        def rsa_signer(message: bytes) -> bytes:
            # CloudFront canned policy는 RSA-SHA1 (PKCS#1 v1.5) 서명을 요구한다.
            return private_key.sign(message, padding.PKCS1v15(), hashes.SHA1())

        self._signer = _BotocoreCloudFrontSigner(key_pair_id, rsa_signer)

    def __repr__(self) -> str:
        return f"CloudFrontSigner(domain={self.domain!r}, key_pair_id={self.key_pair_id!r})"

    def sign_read_url(self, object_key: str, expiry_seconds: int) -> str:
        """https://{domain}/{object_key}에 대한 GET 전용 signed URL (now + expiry_seconds까지 유효)."""
        url = f"https://{self.domain}/{quote(object_key.lstrip('/'))}"
        expires_at = datetime.now(UTC) + timedelta(seconds=expiry_seconds)
        return self._signer.generate_presigned_url(url, date_less_than=expires_at)
