"""알림 레포지토리 — 알림 본문 관련 DB 쿼리 담당.

Notification Repository — Handles queries on the notification content table.
Delivery-record queries live in user_notification_repository.
"""

from datetime import datetime
from typing import Any, Sequence
from uuid import UUID

from sqlalchemy import Select, delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.notification import Notification
from app.repositories.base import BaseRepository


class NotificationRepository(BaseRepository[Notification]):
    """알림 레포지토리.

    Notification repository with creation, global lookup, and expiry queries.

    Extends:
        BaseRepository[Notification]
    """

    def __init__(self) -> None:
        """레포지토리를 초기화합니다.

        Initialize the notification repository with Notification model.
        """
        super().__init__(Notification)

    async def create_notification(
        self,
        db: AsyncSession,
        notification_type: str,
        title: str,
        body: str,
        metadata: dict[str, Any],
        is_global: bool,
        target_users: list[str],
    ) -> Notification:
        """새 알림 본문을 생성합니다 (커밋은 호출자 책임).

        Insert a notification row. The caller commits.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            notification_type: 알림 유형 (Notification kind)
            title: 제목 (Trimmed title)
            body: 본문 (Trimmed body)
            metadata: 부가 정보 (Opaque payload)
            is_global: 전체 대상 여부 (Global addressing flag)
            target_users: 대상 사용자 UUID 문자열 목록 (Canonical target ids)

        Returns:
            Notification: 생성된 알림 (Created notification)
        """
        return await self.create(
            db,
            {
                "type": notification_type,
                "title": title,
                "body": body,
                "meta": metadata,
                "is_global": is_global,
                "target_users": target_users,
            },
        )

    async def get_global_ids_since(
        self,
        db: AsyncSession,
        since: datetime,
    ) -> Sequence[UUID]:
        """보존 기간 내의 전체 대상 알림 ID를 조회합니다.

        Return ids of global notifications created at or after ``since``.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            since: 보존 기간 시작 시각 (Start of the retention window)

        Returns:
            Sequence[UUID]: 알림 ID 목록, 최신순 (Notification ids, newest first)
        """
        query: Select = (
            select(Notification.id)
            .where(
                Notification.is_global.is_(True),
                Notification.created_at >= since,
            )
            .order_by(Notification.created_at.desc())
        )
        result = await db.execute(query)
        return result.scalars().all()

    async def delete_created_before(
        self,
        db: AsyncSession,
        cutoff: datetime,
    ) -> int:
        """보존 기간이 지난 알림을 삭제합니다.

        Delete notifications created before ``cutoff``. Delivery records are
        left alone; they expire on their own clock.

        Returns:
            int: 삭제된 행 수 (Number of deleted rows)
        """
        result = await db.execute(
            delete(Notification)
            .where(Notification.created_at < cutoff)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount


# 싱글턴 인스턴스 — Singleton instance
notification_repository: NotificationRepository = NotificationRepository()
