"""알림 Pydantic 요청/응답 스키마.

Notification request/response schemas for the admin authoring endpoints
and the user feed endpoints.
"""

from datetime import datetime
from typing import Any, Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.models.notification import BODY_MAX_LENGTH, TITLE_MAX_LENGTH

NotificationType = Literal["new_video", "course_update", "system"]


class NotificationCreate(BaseModel):
    """알림 생성 요청 스키마.

    Notification creation request schema.
    Strings are stripped before length checks.

    Attributes:
        type: 알림 유형 (new_video | course_update | system)
        title: 제목 (1-200 chars)
        body: 본문 (1-1000 chars)
        metadata: 부가 정보 (Opaque payload echoed back to clients)
        is_global: 전체 사용자 대상 여부 (Address every current user)
        target_users: 지정 대상 사용자 UUID 목록 (Explicit recipients when not global)
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    type: NotificationType
    title: str = Field(..., min_length=1, max_length=TITLE_MAX_LENGTH)
    body: str = Field(..., min_length=1, max_length=BODY_MAX_LENGTH)
    metadata: dict[str, Any] = Field(default_factory=dict)
    is_global: bool = True
    target_users: list[UUID] = Field(default_factory=list)


class NewVideoNotificationCreate(BaseModel):
    """새 영상 알림 생성 요청 스키마.

    Shortcut request for the global "new video" notification.
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    course_id: UUID
    course_name: str = Field(..., min_length=1)
    video_id: UUID
    video_title: str = Field(..., min_length=1)


class NotificationResponse(BaseModel):
    """알림 응답 스키마.

    Notification content as stored.

    Attributes:
        id: 알림 UUID (Notification identifier)
        type: 알림 유형 (Notification kind)
        title: 제목 (Title)
        body: 본문 (Body)
        metadata: 부가 정보 (Opaque payload)
        is_global: 전체 대상 여부 (Global addressing flag)
        target_users: 지정 대상 목록 (Explicit recipients)
        created_at: 생성 일시 (Creation timestamp)
    """

    id: str  # 알림 UUID 문자열 (Notification UUID as string)
    type: str
    title: str
    body: str
    metadata: dict[str, Any]
    is_global: bool
    target_users: list[str]
    created_at: datetime


class FeedItem(BaseModel):
    """피드 항목 스키마 — 알림 본문 + 사용자 읽음 상태.

    Feed item: notification content merged with the caller's read state.
    """

    id: str  # 알림 UUID 문자열 (Notification UUID as string)
    type: str
    title: str
    body: str
    metadata: dict[str, Any]
    created_at: datetime
    is_read: bool  # 읽음 여부 (Read flag)
    read_at: datetime | None = None  # 읽은 일시 (Read timestamp, null while unread)


class FeedResponse(BaseModel):
    """피드 페이지 응답 스키마.

    Attributes:
        notifications: 현재 페이지 항목 (Items on this page)
        total: 전체 항목 수 (Total items across all pages)
        has_more: 다음 페이지 존재 여부 (More items after this page)
        page: 현재 페이지 번호 (Current page, 1-based)
        limit: 페이지 크기 (Page size)
    """

    notifications: list[FeedItem]
    total: int
    has_more: bool
    page: int
    limit: int


class UnreadCountResponse(BaseModel):
    count: int  # 읽지 않은 알림 수 (Unread notification count)


class MarkAllReadResponse(BaseModel):
    message: str
    updated_count: int  # 읽음 처리된 알림 수 (Records transitioned)


class BackfillResponse(BaseModel):
    """신규 사용자 백필 결과 응답 스키마."""

    user_id: str
    inserted: int  # 새로 생성된 수신 기록 수 (Records created)
    skipped: int  # 이미 존재하여 건너뛴 수 (Records that already existed)
    failed: int  # 실패한 배치의 기록 수 (Records in failed batches)
