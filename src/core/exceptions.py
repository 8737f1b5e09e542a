"""앱 전역 커스텀 예외 클래스.

AppException을 상속하면 전역 핸들러(error_handlers.py)가 자동으로
{"error_code": "...", "message": "..."} 형식의 JSON 응답을 생성한다.

의존성 장애(RecordStoreError, StorageError)는 AppException이 아니다.
운영자용 상세 정보는 로그에만 남기고, 호출자에게는 INTERNAL_ERROR 하나로 응답한다.
"""


class AppException(Exception):
    """앱 전역 베이스 예외.

    서브클래스에서 status_code, error_code, message를 클래스 변수로 정의하면
    전역 핸들러가 해당 값을 읽어 HTTP 응답을 생성한다.
    """

    status_code: int = 500
    error_code: str = "INTERNAL_ERROR"
    message: str = "서버 내부 오류가 발생했습니다"

    def __init__(self, message: str | None = None):
        if message:
            self.message = message
        super().__init__(self.message)


# --- 입력 검증 (호출자 책임) ---


class UnsupportedContentType(AppException):
    status_code = 400
    error_code = "UNSUPPORTED_CONTENT_TYPE"
    message = "지원하지 않는 콘텐츠 타입입니다"

    def __init__(self, value: str):
        self.value = value
        super().__init__(f"지원하지 않는 콘텐츠 타입입니다: {value!r}")


class InvalidFileName(AppException):
    status_code = 400
    error_code = "INVALID_FILE_NAME"
    message = "파일 이름이 올바르지 않습니다"

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"파일 이름이 올바르지 않습니다: {reason}")


# --- 조회 ---


class ImageNotFound(AppException):
    status_code = 404
    error_code = "IMAGE_NOT_FOUND"
    message = "이미지를 찾을 수 없습니다"


class TooManyImageIds(AppException):
    status_code = 400
    error_code = "TOO_MANY_IMAGE_IDS"
    message = "한 번에 조회할 수 있는 이미지 수를 넘었습니다"


# --- 레코드 저장소 ---


class RecordStoreError(Exception):
    """레코드 저장소 장애의 베이스."""


class StoreUnavailable(RecordStoreError):
    """DB 연결/쿼리 실패."""


class DecodeFailed(RecordStoreError):
    """저장된 status/content_type 값이 닫힌 열거형에 매핑되지 않는다."""


class UpdateConflict(RecordStoreError):
    """조건부 쓰기가 재시도 한도 안에 성공하지 못했다."""


class ImmutableFieldChanged(ValueError):
    """update 변환 함수가 id 또는 object_key를 바꾸려 했다."""


# --- 오브젝트 스토리지 ---


class StorageError(Exception):
    """오브젝트 스토리지 장애의 베이스. 백엔드 상세는 __cause__에 남는다."""


class PresignFailed(StorageError):
    pass


class MetadataFailed(StorageError):
    pass


class DeleteFailed(StorageError):
    pass
