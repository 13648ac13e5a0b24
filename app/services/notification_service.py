"""알림 서비스 — 알림 비즈니스 로직.

Notification Service — Public entry points of the notification core:
creation with fan-out, the paginated feed, unread counts, read-state
mutations, and new-user backfill.

Transactions are owned here: creation commits the notification before
fan-out starts, and each read-state mutation commits on its own. Storage
failures on these primary paths surface as StorageError; fan-out and
backfill failures are logged and swallowed.
"""

import logging
from dataclasses import dataclass, field
from typing import Any
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.models.notification import (
    BODY_MAX_LENGTH,
    NOTIFICATION_TYPES,
    TITLE_MAX_LENGTH,
    Notification,
)
from app.repositories.notification_repository import notification_repository
from app.repositories.user_notification_repository import user_notification_repository
from app.services.fanout_service import FanoutResult, fanout_service
from app.services.recipient_resolver import normalize_user_ids
from app.utils.exceptions import BadRequestError, StorageError

logger = logging.getLogger(__name__)


@dataclass
class FeedPage:
    """사용자 피드 한 페이지.

    One page of a user's feed.

    Attributes:
        notifications: 알림 항목 목록 (Notification content plus is_read/read_at)
        total: 전체 항목 수 (Total items across all pages)
        has_more: 다음 페이지 존재 여부 (Whether items exist past this page)
        page: 현재 페이지 (Current page, 1-based)
        limit: 페이지 크기 (Page size)
    """

    notifications: list[dict[str, Any]] = field(default_factory=list)
    total: int = 0
    has_more: bool = False
    page: int = 1
    limit: int = 10


def _as_uuid(value: UUID | str, field_name: str) -> UUID:
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except ValueError as exc:
        raise BadRequestError(f"{field_name} must be a valid UUID") from exc


def _clean_text(value: str, field_name: str, max_length: int) -> str:
    if not isinstance(value, str):
        raise BadRequestError(f"{field_name} must be a string")
    cleaned: str = value.strip()
    if not cleaned:
        raise BadRequestError(f"{field_name} is required")
    if len(cleaned) > max_length:
        raise BadRequestError(f"{field_name} must be at most {max_length} characters")
    return cleaned


class NotificationService:
    """알림 서비스.

    Notification service: fan-out creation, feed, and read state.
    """

    # --- 생성 및 팬아웃 (Creation and fan-out) ---

    async def create_notification(
        self,
        db: AsyncSession,
        notification_type: str,
        title: str,
        body: str,
        metadata: dict[str, Any] | None = None,
        is_global: bool = True,
        target_users: list[str | UUID] | None = None,
    ) -> Notification:
        """알림을 생성하고 수신자에게 팬아웃합니다.

        Persist a notification, commit it, then fan it out.

        The returned notification is final as soon as the commit succeeds;
        fan-out afterwards is best effort and never raises.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            notification_type: 알림 유형 (new_video | course_update | system)
            title: 제목 (Title, trimmed, 1-200 chars)
            body: 본문 (Body, trimmed, 1-1000 chars)
            metadata: 부가 정보 (Opaque kind-specific payload)
            is_global: 전체 대상 여부 (Address every current user)
            target_users: 지정 대상 사용자 ID 목록 (Explicit recipients)

        Returns:
            Notification: 저장된 알림 (The persisted notification)

        Raises:
            BadRequestError: 입력 값이 잘못된 경우 (Malformed input)
            StorageError: 알림 저장 실패 (Notification could not be persisted)
        """
        if notification_type not in NOTIFICATION_TYPES:
            raise BadRequestError(
                f"type must be one of: {', '.join(NOTIFICATION_TYPES)}"
            )
        clean_title: str = _clean_text(title, "title", TITLE_MAX_LENGTH)
        clean_body: str = _clean_text(body, "body", BODY_MAX_LENGTH)
        if metadata is not None and not isinstance(metadata, dict):
            raise BadRequestError("metadata must be an object")

        targets, invalid = normalize_user_ids(list(target_users or []))
        if invalid:
            raise BadRequestError(f"target_users contains invalid ids: {', '.join(invalid)}")

        try:
            notification: Notification = await notification_repository.create_notification(
                db,
                notification_type=notification_type,
                title=clean_title,
                body=clean_body,
                metadata=dict(metadata or {}),
                is_global=is_global,
                target_users=[str(user_id) for user_id in targets],
            )
            await db.commit()
        except SQLAlchemyError as exc:
            await db.rollback()
            logger.exception("Failed to create notification")
            raise StorageError("Failed to create notification") from exc

        # 팬아웃 배치 롤백이 반환 객체를 만료시키지 않도록 분리
        # Detach so a rolled-back fan-out batch cannot expire the returned row
        db.expunge(notification)

        try:
            await fanout_service.deliver(db, notification)
        except Exception:
            logger.exception("Fan-out aborted for notification %s", notification.id)

        return notification

    async def create_for_new_video(
        self,
        db: AsyncSession,
        course_id: UUID | str,
        course_name: str,
        video_id: UUID | str,
        video_title: str,
    ) -> Notification:
        """새 영상 등록 시 전체 사용자 대상 알림을 생성합니다.

        Create the global "new video" notification for a course.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            course_id: 강좌 ID (Course id)
            course_name: 강좌 이름 (Course display name)
            video_id: 영상 ID (Video id)
            video_title: 영상 제목 (Video display title)

        Returns:
            Notification: 생성된 알림 (Created notification)
        """
        return await self.create_notification(
            db,
            notification_type="new_video",
            title="New Video Available",
            body=f'A new video "{video_title}" has been added to the course "{course_name}".',
            metadata={
                "course_id": str(course_id),
                "video_id": str(video_id),
                "course_name": course_name,
                "video_title": video_title,
            },
            is_global=True,
        )

    async def backfill_for_new_user(
        self,
        db: AsyncSession,
        user_id: UUID | str,
    ) -> FanoutResult:
        """신규 사용자에게 기존 전체 알림의 수신 기록을 생성합니다.

        Extend existing global notifications to a newly provisioned user.
        Never raises on storage failure; the outcome is logged.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            user_id: 신규 사용자 UUID (New user's UUID)

        Returns:
            FanoutResult: 백필 결과 (Backfill outcome)
        """
        return await fanout_service.backfill_for_user(db, _as_uuid(user_id, "user_id"))

    # --- 조회 (Reads) ---

    async def get_user_feed(
        self,
        db: AsyncSession,
        user_id: UUID | str,
        page: int = 1,
        limit: int = settings.FEED_DEFAULT_LIMIT,
    ) -> FeedPage:
        """사용자의 알림 피드를 페이지 단위로 조회합니다.

        Return one page of the user's feed, newest notification first.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            user_id: 사용자 UUID (User UUID)
            page: 페이지 번호, 1부터 시작 (Page number, >= 1)
            limit: 페이지 크기 (Page size, 1..FEED_MAX_LIMIT)

        Returns:
            FeedPage: 피드 페이지 (Feed page with total and has_more)

        Raises:
            BadRequestError: page/limit 범위 오류 (page or limit out of range)
            StorageError: 조회 실패 (Query failed)
        """
        uid: UUID = _as_uuid(user_id, "user_id")
        if not isinstance(page, int) or page < 1:
            raise BadRequestError("page must be an integer >= 1")
        if not isinstance(limit, int) or not 1 <= limit <= settings.FEED_MAX_LIMIT:
            raise BadRequestError(f"limit must be an integer between 1 and {settings.FEED_MAX_LIMIT}")

        skip: int = (page - 1) * limit
        try:
            items, total = await user_notification_repository.get_feed(db, uid, skip, limit)
        except SQLAlchemyError as exc:
            logger.exception("Failed to fetch feed for user %s", uid)
            raise StorageError("Failed to fetch notifications") from exc

        return FeedPage(
            notifications=items,
            total=total,
            has_more=skip + len(items) < total,
            page=page,
            limit=limit,
        )

    async def get_unread_count(
        self,
        db: AsyncSession,
        user_id: UUID | str,
    ) -> int:
        """사용자의 읽지 않은 알림 수를 조회합니다.

        Get the count of unread notifications for a user.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            user_id: 사용자 UUID (User UUID)

        Returns:
            int: 읽지 않은 알림 수 (Unread notification count)
        """
        uid: UUID = _as_uuid(user_id, "user_id")
        try:
            return await user_notification_repository.get_unread_count(db, uid)
        except SQLAlchemyError as exc:
            logger.exception("Failed to count unread notifications for user %s", uid)
            raise StorageError("Failed to get unread count") from exc

    # --- 읽음 처리 (Read-state mutations) ---

    async def mark_as_read(
        self,
        db: AsyncSession,
        user_id: UUID | str,
        notification_id: UUID | str,
    ) -> bool:
        """단일 알림을 읽음 처리합니다.

        Mark one of the user's notifications as read.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            user_id: 사용자 UUID (User UUID, must own the record)
            notification_id: 알림 UUID (Notification UUID)

        Returns:
            bool: 전환 발생 여부 — 기록이 없거나 이미 읽은 경우 False
                  (True iff unread→read happened; False when missing or already read)
        """
        uid: UUID = _as_uuid(user_id, "user_id")
        nid: UUID = _as_uuid(notification_id, "notification_id")
        try:
            transitioned: bool = await user_notification_repository.mark_read(db, uid, nid)
            await db.commit()
        except SQLAlchemyError as exc:
            await db.rollback()
            logger.exception("Failed to mark notification %s read for user %s", nid, uid)
            raise StorageError("Failed to mark notification as read") from exc
        return transitioned

    async def mark_all_as_read(
        self,
        db: AsyncSession,
        user_id: UUID | str,
    ) -> int:
        """사용자의 모든 읽지 않은 알림을 읽음 처리합니다.

        Mark all unread notifications as read for a user.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            user_id: 사용자 UUID (User UUID)

        Returns:
            int: 읽음 처리된 알림 수 (Count of notifications marked as read)
        """
        uid: UUID = _as_uuid(user_id, "user_id")
        try:
            updated: int = await user_notification_repository.mark_all_read(db, uid)
            await db.commit()
        except SQLAlchemyError as exc:
            await db.rollback()
            logger.exception("Failed to mark all notifications read for user %s", uid)
            raise StorageError("Failed to mark all notifications as read") from exc
        return updated


# 싱글턴 인스턴스 — Singleton instance
notification_service: NotificationService = NotificationService()
