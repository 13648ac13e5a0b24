"""커스텀 HTTP 예외 클래스 모듈.

Custom HTTP exception classes module.
Provides pre-configured HTTPException subclasses for common error patterns.
Each class carries a stable ``code`` so callers (and the JSON error body)
can classify failures without parsing messages.

Usage:
    from app.utils.exceptions import BadRequestError, StorageError
    raise BadRequestError("limit must be between 1 and 50")
    raise StorageError("Failed to fetch notifications")
"""

from fastapi import HTTPException, status


class AppError(HTTPException):
    """분류 코드를 가진 예외의 공통 부모.

    Base class for exceptions carrying a stable classification code.

    Attributes:
        code: 안정적인 오류 분류 문자열 (Stable error classification)
    """

    code: str = "error"

    def __init__(self, status_code: int, detail: str) -> None:
        super().__init__(status_code=status_code, detail=detail)


class NotFoundError(AppError):
    """404 Not Found 예외 — 요청한 리소스를 찾을 수 없을 때 사용.

    404 Not Found exception.
    Raised by routes when a read-state transition matched nothing
    (record missing or already read).

    Args:
        detail: 오류 메시지 (Error message, default: "Resource not found")
    """

    code = "not_found"

    def __init__(self, detail: str = "Resource not found") -> None:
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class ForbiddenError(AppError):
    """403 Forbidden 예외 — 권한 부족 시 사용.

    403 Forbidden exception.
    Raised when a non-admin user calls an authoring endpoint.

    Args:
        detail: 오류 메시지 (Error message, default: "Insufficient permissions")
    """

    code = "forbidden"

    def __init__(self, detail: str = "Insufficient permissions") -> None:
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class UnauthorizedError(AppError):
    """401 Unauthorized 예외 — 인증 실패 시 사용.

    401 Unauthorized exception.
    Raised when authentication is missing, invalid, or expired.

    Args:
        detail: 오류 메시지 (Error message, default: "Authentication required")
    """

    code = "unauthorized"

    def __init__(self, detail: str = "Authentication required") -> None:
        super().__init__(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


class BadRequestError(AppError):
    """400 Bad Request 예외 — 잘못된 입력이 코어까지 도달했을 때 사용.

    400 Bad Request exception.
    Raised by services when input is malformed even though the transport
    layer should have filtered it (page/limit range, unknown type, blank title).

    Args:
        detail: 오류 메시지 (Error message, default: "Bad request")
    """

    code = "validation_error"

    def __init__(self, detail: str = "Bad request") -> None:
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class StorageError(AppError):
    """503 Service Unavailable 예외 — 저장소 장애 시 사용.

    503 Service Unavailable exception.
    Raised when the database is unreachable or a statement fails on a
    primary path (create, feed, read-state mutation, unread count).
    Fan-out failures never raise this.

    Args:
        detail: 오류 메시지 (Error message, default: "Storage failure")
    """

    code = "storage_failure"

    def __init__(self, detail: str = "Storage failure") -> None:
        super().__init__(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=detail)
