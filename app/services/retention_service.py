"""보존 기간 서비스 — 만료된 알림/수신 기록 삭제.

Retention Service — Deletes notifications and delivery records past the
retention window. Each table expires on its own created_at; nothing cascades.
Feed queries already hide delivery records whose parent is gone.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.repositories.notification_repository import notification_repository
from app.repositories.user_notification_repository import user_notification_repository

logger = logging.getLogger(__name__)


@dataclass
class PurgeResult:
    notifications: int = 0
    deliveries: int = 0


class RetentionService:
    """보존 기간 만료 처리 서비스."""

    async def purge_expired(
        self,
        db: AsyncSession,
        now: datetime | None = None,
    ) -> PurgeResult:
        """보존 기간이 지난 행을 두 테이블에서 각각 삭제하고 커밋합니다.

        Delete rows older than NOTIFICATION_RETENTION_DAYS from both tables
        and commit.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            now: 기준 시각, 기본값 현재 UTC (Reference time, defaults to now)

        Returns:
            PurgeResult: 삭제 건수 (Deleted row counts per table)
        """
        reference: datetime = now or datetime.now(timezone.utc)
        cutoff: datetime = reference - timedelta(days=settings.NOTIFICATION_RETENTION_DAYS)

        result = PurgeResult(
            notifications=await notification_repository.delete_created_before(db, cutoff),
            deliveries=await user_notification_repository.delete_created_before(db, cutoff),
        )
        await db.commit()

        logger.info(
            "Purged %d notifications and %d delivery records created before %s",
            result.notifications,
            result.deliveries,
            cutoff.isoformat(),
        )
        return result


# 싱글턴 인스턴스 — Singleton instance
retention_service: RetentionService = RetentionService()
