"""보존 기간 만료 처리 테스트.

Retention tests — Both tables expire on their own created_at, and the
feed hides delivery records whose notification was purged.
"""

import uuid
from datetime import datetime, timedelta, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.models.notification import Notification, UserNotification
from app.repositories.notification_repository import notification_repository
from app.services.notification_service import notification_service
from app.services.retention_service import retention_service
from tests.conftest import records_for_user


def _days_ago(days: int) -> datetime:
    return datetime.now(timezone.utc) - timedelta(days=days)


class TestPurgeExpired:
    """만료 데이터 삭제 테스트."""

    async def test_removes_only_expired_rows(self, db: AsyncSession, users):
        user_id = users[0].id
        retention = settings.NOTIFICATION_RETENTION_DAYS

        old = Notification(type="system", title="Old", body="Body", created_at=_days_ago(retention + 5))
        fresh = Notification(type="system", title="Fresh", body="Body", created_at=_days_ago(1))
        db.add_all([old, fresh])
        await db.flush()
        db.add_all([
            UserNotification(user_id=user_id, notification_id=old.id, created_at=_days_ago(retention + 5)),
            UserNotification(user_id=user_id, notification_id=fresh.id, created_at=_days_ago(1)),
        ])
        await db.commit()
        old_id, fresh_id = old.id, fresh.id

        result = await retention_service.purge_expired(db)

        assert result.notifications == 1
        assert result.deliveries == 1
        assert await notification_repository.get_by_id(db, old_id) is None
        assert await notification_repository.get_by_id(db, fresh_id) is not None
        records = await records_for_user(db, user_id)
        assert [r.notification_id for r in records] == [fresh_id]

    async def test_tables_expire_independently(self, db: AsyncSession, users):
        user_id = users[0].id
        retention = settings.NOTIFICATION_RETENTION_DAYS

        # 알림은 만료, 수신 기록은 아직 유효 — Parent expired, record still inside its window
        parent = Notification(type="system", title="Parent", body="Body", created_at=_days_ago(retention + 1))
        db.add(parent)
        await db.flush()
        db.add(UserNotification(user_id=user_id, notification_id=parent.id, created_at=_days_ago(2)))
        await db.commit()

        result = await retention_service.purge_expired(db)

        assert (result.notifications, result.deliveries) == (1, 0)
        assert len(await records_for_user(db, user_id)) == 1

        feed = await notification_service.get_user_feed(db, user_id)
        assert feed.total == 0
        assert await notification_service.get_unread_count(db, user_id) == 0

    async def test_reference_time_is_configurable(self, db: AsyncSession):
        notification = Notification(type="system", title="Soon", body="Body", created_at=_days_ago(1))
        db.add(notification)
        await db.commit()

        unchanged = await retention_service.purge_expired(db)
        assert unchanged.notifications == 0

        later = datetime.now(timezone.utc) + timedelta(days=settings.NOTIFICATION_RETENTION_DAYS)
        purged = await retention_service.purge_expired(db, now=later)
        assert purged.notifications == 1

    async def test_nothing_to_purge(self, db: AsyncSession):
        result = await retention_service.purge_expired(db)
        assert (result.notifications, result.deliveries) == (0, 0)
        assert await records_for_user(db, uuid.uuid4()) == []
