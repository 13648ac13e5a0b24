"""팬아웃 서비스 — 사용자별 수신 기록 일괄 생성.

Fan-out Service — Materializes per-user delivery records in bulk.

Fan-out is best effort. Each batch is an INSERT ... ON CONFLICT DO NOTHING
committed on its own; a failing batch is rolled back, logged, and skipped
while the remaining batches proceed. Nothing here raises to the caller: the
notification (or the new user) already exists by the time fan-out runs, and
missing records are reconciled by backfill.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Iterable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.models.notification import Notification
from app.repositories.notification_repository import notification_repository
from app.repositories.user_notification_repository import user_notification_repository
from app.services.recipient_resolver import recipient_resolver

logger = logging.getLogger(__name__)


@dataclass
class FanoutResult:
    """팬아웃 결과 요약.

    Outcome of one fan-out or backfill run.

    Attributes:
        requested: 삽입 시도한 기록 수 (Records attempted)
        inserted: 새로 생성된 기록 수 (Records actually created)
        failed: 실패한 배치에 포함된 기록 수 (Records in failed batches)
    """

    requested: int = 0
    inserted: int = 0
    failed: int = 0

    @property
    def skipped(self) -> int:
        """이미 존재하여 건너뛴 기록 수 (Rows dropped as duplicates)."""
        return self.requested - self.inserted - self.failed


def _delivery_rows(
    pairs: Iterable[tuple[uuid.UUID, uuid.UUID]],
) -> list[dict[str, Any]]:
    now: datetime = datetime.now(timezone.utc)
    return [
        {
            "id": uuid.uuid4(),
            "user_id": user_id,
            "notification_id": notification_id,
            "is_read": False,
            "created_at": now,
        }
        for user_id, notification_id in pairs
    ]


class FanoutService:
    """팬아웃 서비스.

    Creates delivery records for new notifications and for new users.
    """

    async def deliver(
        self,
        db: AsyncSession,
        notification: Notification,
    ) -> FanoutResult:
        """알림의 수신자를 결정하고 수신 기록을 생성합니다.

        Resolve recipients of a committed notification and bulk-create their
        delivery records. Resolver failures are logged and yield an empty result.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            notification: 커밋된 알림 (Committed notification)

        Returns:
            FanoutResult: 팬아웃 결과 (Fan-out outcome)
        """
        try:
            recipients = await recipient_resolver.resolve(db, notification)
        except SQLAlchemyError:
            await db.rollback()
            logger.exception("Recipient resolution failed for notification %s", notification.id)
            return FanoutResult()

        if not recipients:
            logger.info("Notification %s has no recipients", notification.id)
            return FanoutResult()

        rows = _delivery_rows((user_id, notification.id) for user_id in sorted(recipients, key=str))
        result = await self._insert_batches(db, rows)
        logger.info(
            "Fan-out for notification %s: requested=%d inserted=%d skipped=%d failed=%d",
            notification.id,
            result.requested,
            result.inserted,
            result.skipped,
            result.failed,
        )
        return result

    async def backfill_for_user(
        self,
        db: AsyncSession,
        user_id: uuid.UUID,
    ) -> FanoutResult:
        """신규 사용자에게 보존 기간 내 전체 알림의 수신 기록을 생성합니다.

        Create delivery records for ``user_id`` against every global
        notification still inside the retention window. Existing records are
        left untouched, so the call is safe to repeat or race with fan-out.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            user_id: 신규 사용자 UUID (New user's UUID)

        Returns:
            FanoutResult: 백필 결과 (Backfill outcome)
        """
        since: datetime = datetime.now(timezone.utc) - timedelta(days=settings.NOTIFICATION_RETENTION_DAYS)
        try:
            notification_ids = await notification_repository.get_global_ids_since(db, since)
        except SQLAlchemyError:
            await db.rollback()
            logger.exception("Could not list global notifications for backfill of user %s", user_id)
            return FanoutResult()

        if not notification_ids:
            return FanoutResult()

        rows = _delivery_rows((user_id, notification_id) for notification_id in notification_ids)
        result = await self._insert_batches(db, rows)
        logger.info(
            "Backfill for user %s: requested=%d inserted=%d skipped=%d failed=%d",
            user_id,
            result.requested,
            result.inserted,
            result.skipped,
            result.failed,
        )
        return result

    async def _insert_batches(
        self,
        db: AsyncSession,
        rows: list[dict[str, Any]],
    ) -> FanoutResult:
        """행을 배치 단위로 삽입하고 배치마다 커밋합니다.

        Insert rows in FANOUT_BATCH_SIZE chunks, committing each one. A failed
        chunk is rolled back and counted; later chunks still run.
        """
        result = FanoutResult(requested=len(rows))
        batch_size: int = max(settings.FANOUT_BATCH_SIZE, 1)

        for start in range(0, len(rows), batch_size):
            batch = rows[start:start + batch_size]
            try:
                result.inserted += await user_notification_repository.bulk_insert_ignore_conflicts(db, batch)
                await db.commit()
            except SQLAlchemyError:
                await db.rollback()
                result.failed += len(batch)
                logger.exception(
                    "Delivery batch %d-%d failed (%d rows dropped)",
                    start,
                    start + len(batch),
                    len(batch),
                )
        return result


# 싱글턴 인스턴스 — Singleton instance
fanout_service: FanoutService = FanoutService()
