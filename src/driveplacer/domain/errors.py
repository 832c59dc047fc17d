"""
Error definitions for the service.

규칙:
- NotAuthenticated만 401로 구분 (클라이언트가 재로그인 유도)
- 나머지 upstream 에러는 메시지만 노출, 500으로 통일
- 배치 추천(resolver) 내부 에러는 절대 밖으로 나가지 않음 → NoMatch
"""

from typing import Any


class DriveAppError(Exception):
    """
    서비스 공통 에러.

    Usage:
        raise UpstreamWriteError("CREATE_FAILED", "Drive upload failed", file="a.pdf")
    """

    status_code: int = 500

    def __init__(self, code: str, message: str, **context: Any) -> None:
        self.code = code
        self.message = message
        self.context = context
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        ctx_str = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
        if ctx_str:
            return f"[{self.code}] {self.message} ({ctx_str})"
        return f"[{self.code}] {self.message}"

    def to_dict(self) -> dict[str, Any]:
        """로그/JSON 직렬화용."""
        return {
            "code": self.code,
            "message": self.message,
            **self.context,
        }


class NotAuthenticatedError(DriveAppError):
    """세션에 유효한 Drive 자격 증명이 없음."""

    status_code = 401

    def __init__(self, code: str = "NOT_AUTHENTICATED", **context: Any) -> None:
        super().__init__(code, "Not authenticated", **context)


class ValidationError(DriveAppError):
    """필수 입력 누락 (파일 없음, 빈 폴더명 등)."""

    status_code = 400


class UpstreamListingError(DriveAppError):
    """폴더 목록 페이지 조회 실패 (페이지 상한 초과 포함)."""


class UpstreamWriteError(DriveAppError):
    """create/move/update/get 호출 실패."""


class ResolverDegradedError(DriveAppError):
    """
    AI 배치 추천 단계 실패.

    PlacementResolver 내부에서만 발생/처리되고 NoMatch로 접힌다.
    """


# =============================================================================
# Error Codes
# =============================================================================

class ErrorCodes:
    """에러 코드 상수."""

    # === Auth ===
    NOT_AUTHENTICATED = "NOT_AUTHENTICATED"
    TOKEN_REFRESH_FAILED = "TOKEN_REFRESH_FAILED"
    OAUTH_EXCHANGE_FAILED = "OAUTH_EXCHANGE_FAILED"

    # === Validation ===
    MISSING_FILE = "MISSING_FILE"
    MISSING_FIELD = "MISSING_FIELD"

    # === Listing ===
    LISTING_FAILED = "LISTING_FAILED"
    LISTING_PAGE_LIMIT_EXCEEDED = "LISTING_PAGE_LIMIT_EXCEEDED"

    # === Write ===
    CREATE_FAILED = "CREATE_FAILED"
    MOVE_FAILED = "MOVE_FAILED"
    METADATA_FAILED = "METADATA_FAILED"
    SEARCH_FAILED = "SEARCH_FAILED"

    # === Resolver ===
    RESOLVER_LISTING_FAILED = "RESOLVER_LISTING_FAILED"
    RESOLVER_COMPLETION_FAILED = "RESOLVER_COMPLETION_FAILED"
    RESOLVER_TIMEOUT = "RESOLVER_TIMEOUT"
