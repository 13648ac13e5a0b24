"""읽음 상태 변경 테스트.

Read-state tests — Single and bulk transitions, idempotency, and
per-user isolation.
"""

import asyncio
import uuid

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from app.services.notification_service import notification_service
from app.utils.exceptions import BadRequestError
from tests.conftest import records_for_user


async def _record(db: AsyncSession, user_id, notification_id):
    db.expire_all()
    records = await records_for_user(db, user_id)
    return next(r for r in records if r.notification_id == notification_id)


class TestMarkAsRead:
    """단일 알림 읽음 처리 테스트."""

    async def test_transitions_once(self, db: AsyncSession, users):
        notification = await notification_service.create_notification(db, "system", "Read", "Me")
        user_id = users[0].id

        assert await notification_service.mark_as_read(db, user_id, notification.id) is True
        first = await _record(db, user_id, notification.id)
        assert first.is_read is True
        read_at = first.read_at
        assert read_at is not None

        assert await notification_service.mark_as_read(db, user_id, str(notification.id)) is False
        second = await _record(db, user_id, notification.id)
        assert second.is_read is True
        assert second.read_at == read_at

    async def test_unknown_notification_returns_false(self, db: AsyncSession, users):
        assert await notification_service.mark_as_read(db, users[0].id, uuid.uuid4()) is False

    async def test_cannot_touch_another_users_record(self, db: AsyncSession, users):
        owner, other = users[0], users[1]
        notification = await notification_service.create_notification(
            db, "system", "Mine", "Only", is_global=False, target_users=[owner.id],
        )

        assert await notification_service.mark_as_read(db, other.id, notification.id) is False
        record = await _record(db, owner.id, notification.id)
        assert record.is_read is False
        assert record.read_at is None

    async def test_reading_leaves_other_recipients_unread(self, db: AsyncSession, users):
        notification = await notification_service.create_notification(db, "system", "Shared", "Body")
        await notification_service.mark_as_read(db, users[0].id, notification.id)

        for user in users[1:]:
            assert await notification_service.get_unread_count(db, user.id) == 1
        assert await notification_service.get_unread_count(db, users[0].id) == 0

    async def test_malformed_ids_rejected(self, db: AsyncSession, users):
        with pytest.raises(BadRequestError) as exc_info:
            await notification_service.mark_as_read(db, users[0].id, "zzz")
        assert isinstance(exc_info.value.__cause__, ValueError)
        with pytest.raises(BadRequestError):
            await notification_service.mark_as_read(db, "zzz", uuid.uuid4())

    async def test_concurrent_calls_transition_once(self, db: AsyncSession, session_factory, users):
        notification = await notification_service.create_notification(db, "system", "Race", "Body")
        user_id = users[0].id

        async def mark():
            async with session_factory() as session:
                return await notification_service.mark_as_read(session, user_id, notification.id)

        results = await asyncio.gather(mark(), mark(), mark())

        assert sorted(results) == [False, False, True]
        record = await _record(db, user_id, notification.id)
        assert record.is_read is True
        assert record.read_at is not None
        assert await notification_service.get_unread_count(db, user_id) == 0


class TestMarkAllAsRead:
    """전체 읽음 처리 테스트."""

    async def test_counts_only_unread_records(self, db: AsyncSession, users):
        user_id = users[0].id
        notifications = [
            await notification_service.create_notification(db, "system", f"n{i}", "Body")
            for i in range(8)
        ]
        for notification in notifications[:3]:
            await notification_service.mark_as_read(db, user_id, notification.id)
        already_read = await _record(db, user_id, notifications[0].id)
        original_read_at = already_read.read_at

        assert await notification_service.mark_all_as_read(db, user_id) == 5
        assert await notification_service.get_unread_count(db, user_id) == 0

        # 이미 읽은 기록의 read_at은 유지 — read_at of earlier reads is kept
        assert (await _record(db, user_id, notifications[0].id)).read_at == original_read_at

        assert await notification_service.mark_all_as_read(db, user_id) == 0

    async def test_other_users_untouched(self, db: AsyncSession, users):
        await notification_service.create_notification(db, "system", "A", "Body")
        await notification_service.create_notification(db, "system", "B", "Body")

        assert await notification_service.mark_all_as_read(db, users[0].id) == 2
        assert await notification_service.get_unread_count(db, users[1].id) == 2

    async def test_concurrent_calls_count_each_record_once(
        self, db: AsyncSession, session_factory, users,
    ):
        user_id = users[0].id
        for i in range(4):
            await notification_service.create_notification(db, "system", f"n{i}", "Body")

        async def mark_all():
            async with session_factory() as session:
                return await notification_service.mark_all_as_read(session, user_id)

        results = await asyncio.gather(mark_all(), mark_all())

        assert sum(results) == 4
        assert await notification_service.get_unread_count(db, user_id) == 0

    async def test_user_without_records(self, db: AsyncSession):
        assert await notification_service.mark_all_as_read(db, uuid.uuid4()) == 0
