"""알림 관련 SQLAlchemy ORM 모델 정의.

Notification SQLAlchemy ORM model definitions.
Content is stored once per notification; per-user read state lives in a
separate delivery table joined on notification_id.

Tables:
    - notifications: 알림 본문 (Immutable notification content, global or targeted)
    - user_notifications: 사용자별 수신/읽음 기록 (Per-user delivery and read state)
"""

import uuid
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import JSON, Boolean, DateTime, Index, String, UniqueConstraint, Uuid, false
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base

# 알림 유형 — Closed set of notification kinds
NOTIFICATION_TYPES: tuple[str, ...] = ("new_video", "course_update", "system")

TITLE_MAX_LENGTH: int = 200
BODY_MAX_LENGTH: int = 1000

# PostgreSQL에서는 JSONB, 그 외 드라이버에서는 일반 JSON
# JSONB on PostgreSQL, generic JSON elsewhere
_JSONType = JSON().with_variant(JSONB(), "postgresql")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Notification(Base):
    """알림 모델 — 한 번 작성되어 여러 사용자에게 전달되는 알림 본문.

    Notification model — Content authored once and delivered to many users.
    Never updated after creation; removed only by the retention sweep.

    Notification Types (type 필드 값):
        - "new_video": 새 영상 등록 알림 (New video added to a course)
        - "course_update": 강좌 변경 알림 (Course content changed)
        - "system": 시스템 공지 (System-wide message)

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        type: 알림 유형 (Notification kind, see above)
        title: 제목, 최대 200자 (Title, trimmed, <= 200 chars)
        body: 본문, 최대 1000자 (Body, trimmed, <= 1000 chars)
        meta: 유형별 부가 정보 — DB 컬럼명 "metadata" (Opaque kind-specific payload)
        is_global: 전체 사용자 대상 여부 (Addressed to every user when True)
        target_users: 대상 사용자 UUID 문자열 목록 (Explicit recipients when not global)
        created_at: 생성 일시 UTC (Creation timestamp, drives ordering and retention)
    """

    __tablename__ = "notifications"

    # 알림 고유 식별자 — Notification unique identifier (UUID v4, auto-generated)
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # 알림 유형 — Notification kind (new_video | course_update | system)
    type: Mapped[str] = mapped_column(String(30), nullable=False)
    # 제목 — Display title
    title: Mapped[str] = mapped_column(String(TITLE_MAX_LENGTH), nullable=False)
    # 본문 — Display body
    body: Mapped[str] = mapped_column(String(BODY_MAX_LENGTH), nullable=False)
    # 부가 정보 — "metadata"는 Declarative 예약어라 속성명은 meta (attribute renamed, column keeps the name)
    meta: Mapped[dict[str, Any]] = mapped_column("metadata", _JSONType, nullable=False, default=dict)
    # 전체 대상 여부 — True=전체 사용자, False=target_users만
    is_global: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    # 대상 사용자 목록 — Canonical UUID strings, empty for global notifications
    target_users: Mapped[list[str]] = mapped_column(_JSONType, nullable=False, default=list)
    # 생성 일시 — Creation timestamp (UTC, immutable)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)

    __table_args__ = (
        Index("ix_notifications_created_at", "created_at"),
        Index("ix_notifications_type_created_at", "type", "created_at"),
        Index("ix_notifications_is_global_created_at", "is_global", "created_at"),
    )


class UserNotification(Base):
    """사용자별 알림 수신 기록 — 읽음 상태를 보관하는 조인 엔티티.

    Delivery record — Join entity between users and notifications carrying
    the user's read state. Created only by fan-out or new-user backfill.

    notification_id/user_id에는 FK를 두지 않습니다. 알림과 수신 기록은 각자의
    보존 기간으로 독립적으로 삭제되며, 조회 시 조인으로 고아 기록을 제외합니다.
    (No foreign keys: both tables expire independently and the feed join
    drops records whose parent is gone.)

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        user_id: 수신자 UUID (Recipient user id)
        notification_id: 알림 UUID (Parent notification id)
        is_read: 읽음 여부 (Whether the user has read the notification)
        read_at: 읽은 일시, 최초 전환 시 1회만 기록 (Set once on the unread→read transition)
        created_at: 생성 일시 UTC (Creation timestamp, drives retention)

    Constraints:
        uq_user_notifications_user_notification: 사용자-알림 쌍 고유 (One record per pair)
    """

    __tablename__ = "user_notifications"

    # 수신 기록 고유 식별자 — Delivery record identifier (UUID v4)
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # 수신자 — Recipient user id
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    # 부모 알림 — Parent notification id
    notification_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    # 읽음 여부 — False=미읽음, True=읽음 (Unread by default)
    is_read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default=false())
    # 읽은 일시 — Read timestamp (NULL until read)
    read_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    # 생성 일시 — Record creation timestamp (UTC)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)

    __table_args__ = (
        UniqueConstraint("user_id", "notification_id", name="uq_user_notifications_user_notification"),
        Index("ix_user_notifications_user_is_read", "user_id", "is_read"),
        Index("ix_user_notifications_user_created_at", "user_id", "created_at"),
        Index("ix_user_notifications_notification_id", "notification_id"),
    )
