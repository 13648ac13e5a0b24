"""공통 Pydantic 응답 스키마 정의.

Common Pydantic response schema definitions shared across routers.
"""

from pydantic import BaseModel


class MessageResponse(BaseModel):
    """범용 메시지 응답 스키마.

    Generic message response schema for simple confirmations.

    Attributes:
        message: 응답 메시지 (Response message string)
    """

    message: str  # 응답 메시지 (Human-readable confirmation message)


class ErrorResponse(BaseModel):
    """오류 응답 스키마.

    Error body returned for AppError subclasses.

    Attributes:
        detail: 오류 메시지 (Human-readable message)
        code: 오류 분류 (Stable classification, e.g. "storage_failure")
    """

    detail: str
    code: str
