from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # 앱 설정
    APP_NAME: str = "image-ingest"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False

    # 서버 설정
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # DB 설정 (운영: postgresql+psycopg://..., 로컬: SQLite)
    DATABASE_URL: str = "sqlite:///./image_ingest.db"
    DATABASE_POOL_SIZE: int = 20
    DATABASE_POOL_TIMEOUT_SECS: int = 5

    # AWS / S3
    AWS_REGION: str = "ap-northeast-2"
    AWS_ENDPOINT_URL: str | None = None  # MinIO, LocalStack 등 S3 호환 백엔드
    STORAGE_BUCKET_NAME: str
    STORAGE_UPLOAD_URL_EXPIRY_SECS: int = 300

    # CDN (CloudFront signed URL). 세 값이 모두 있어야 서명기를 만든다.
    CDN_DOMAIN: str | None = None
    CDN_KEY_PAIR_ID: str | None = None
    CDN_PRIVATE_KEY_PEM: SecretStr | None = None
    CDN_SIGNED_URL_EXPIRY_SECS: int = 600

    # 로깅
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "pretty"  # pretty | json

    @model_validator(mode="after")
    def _check_cdn_settings(self) -> "Settings":
        # CDN 세 값은 모두 있거나 모두 없어야 한다
        cdn_values = {
            "CDN_DOMAIN": self.CDN_DOMAIN,
            "CDN_KEY_PAIR_ID": self.CDN_KEY_PAIR_ID,
            "CDN_PRIVATE_KEY_PEM": self.CDN_PRIVATE_KEY_PEM,
        }
        missing = [name for name, value in cdn_values.items() if not value]
        if missing and len(missing) < len(cdn_values):
            raise ValueError(f"CDN 설정이 일부만 있습니다. 누락: {', '.join(missing)}")
        return self

    @property
    def cdn_enabled(self) -> bool:
        return bool(self.CDN_DOMAIN and self.CDN_KEY_PAIR_ID and self.CDN_PRIVATE_KEY_PEM)

    model_config = {"env_file": ".env", "extra": "ignore"}


settings = Settings()
