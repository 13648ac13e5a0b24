"""사용자 알림 피드 및 미읽음 수 테스트.

Feed tests — Pagination, ordering, orphan exclusion, and unread counts.
"""

import uuid
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import delete
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.notification import Notification, UserNotification
from app.repositories.user_notification_repository import user_notification_repository
from app.services.fanout_service import fanout_service
from app.services.notification_service import notification_service
from app.utils.exceptions import BadRequestError, StorageError
from tests.conftest import records_for_user

BASE_TIME = datetime.now(timezone.utc) - timedelta(days=1)


async def seed_notifications(
    db: AsyncSession,
    count: int,
    start: datetime = BASE_TIME,
) -> list[Notification]:
    """1분 간격으로 전체 대상 알림을 만들고 팬아웃합니다 (oldest first)."""
    created: list[Notification] = []
    for i in range(count):
        notification = Notification(
            type="system",
            title=f"n{i}",
            body=f"body {i}",
            meta={"seq": i},
            is_global=True,
            created_at=start + timedelta(minutes=i),
        )
        db.add(notification)
        await db.commit()
        await fanout_service.deliver(db, notification)
        created.append(notification)
    return created


class TestFeedPagination:
    """피드 페이지네이션 테스트."""

    async def test_pages_walk_the_whole_feed(self, db: AsyncSession, users):
        await seed_notifications(db, 12)
        user_id = users[0].id

        first = await notification_service.get_user_feed(db, user_id, page=1, limit=5)
        assert len(first.notifications) == 5
        assert first.total == 12
        assert first.has_more is True
        assert (first.page, first.limit) == (1, 5)

        second = await notification_service.get_user_feed(db, user_id, page=2, limit=5)
        assert len(second.notifications) == 5
        assert second.has_more is True

        third = await notification_service.get_user_feed(db, user_id, page=3, limit=5)
        assert len(third.notifications) == 2
        assert third.total == 12
        assert third.has_more is False

        titles = [item["title"] for feed in (first, second, third) for item in feed.notifications]
        assert len(set(titles)) == 12

    async def test_page_past_the_end_still_reports_total(self, db: AsyncSession, users):
        await seed_notifications(db, 3)

        feed = await notification_service.get_user_feed(db, users[0].id, page=4, limit=5)
        assert feed.notifications == []
        assert feed.total == 3
        assert feed.has_more is False

    async def test_empty_feed(self, db: AsyncSession, users):
        feed = await notification_service.get_user_feed(db, users[0].id)
        assert feed.notifications == []
        assert feed.total == 0
        assert feed.has_more is False
        assert feed.limit == 10

    async def test_exact_multiple_has_no_more(self, db: AsyncSession, users):
        await seed_notifications(db, 10)
        feed = await notification_service.get_user_feed(db, users[0].id, page=2, limit=5)
        assert len(feed.notifications) == 5
        assert feed.has_more is False

    @pytest.mark.parametrize("page,limit", [(0, 10), (-1, 10), (1, 0), (1, 51)])
    async def test_out_of_range_arguments_rejected(self, db: AsyncSession, users, page, limit):
        with pytest.raises(BadRequestError):
            await notification_service.get_user_feed(db, users[0].id, page=page, limit=limit)

    async def test_max_limit_accepted(self, db: AsyncSession, users):
        await seed_notifications(db, 3)
        feed = await notification_service.get_user_feed(db, users[0].id, page=1, limit=50)
        assert len(feed.notifications) == 3


class TestFeedContent:
    """피드 정렬 및 항목 내용 테스트."""

    async def test_newest_first(self, db: AsyncSession, users):
        await seed_notifications(db, 4)
        feed = await notification_service.get_user_feed(db, users[0].id)
        assert [item["title"] for item in feed.notifications] == ["n3", "n2", "n1", "n0"]

    async def test_items_merge_content_and_read_state(self, db: AsyncSession, users):
        notifications = await seed_notifications(db, 2)
        await notification_service.mark_as_read(db, users[0].id, notifications[0].id)

        feed = await notification_service.get_user_feed(db, users[0].id)
        newest, oldest = feed.notifications

        assert newest["id"] == notifications[1].id
        assert newest["type"] == "system"
        assert newest["body"] == "body 1"
        assert newest["metadata"] == {"seq": 1}
        assert newest["is_read"] is False
        assert newest["read_at"] is None

        assert oldest["id"] == notifications[0].id
        assert oldest["is_read"] is True
        assert oldest["read_at"] is not None

    async def test_only_own_records_are_listed(self, db: AsyncSession, users):
        await seed_notifications(db, 2)
        await notification_service.create_notification(
            db, "system", "Private", "Only for user1", is_global=False, target_users=[users[1].id],
        )

        mine = await notification_service.get_user_feed(db, users[0].id)
        theirs = await notification_service.get_user_feed(db, users[1].id)

        assert mine.total == 2
        assert theirs.total == 3
        assert theirs.notifications[0]["title"] == "Private"

    async def test_orphaned_records_are_hidden(self, db: AsyncSession, users):
        notifications = await seed_notifications(db, 3)
        await db.execute(delete(Notification).where(Notification.id == notifications[1].id))
        await db.commit()

        feed = await notification_service.get_user_feed(db, users[0].id)
        assert feed.total == 2
        assert [item["title"] for item in feed.notifications] == ["n2", "n0"]
        assert await notification_service.get_unread_count(db, users[0].id) == 2
        # 수신 기록 자체는 남아 있음 — The delivery record itself is still stored
        assert len(await records_for_user(db, users[0].id)) == 3

    async def test_same_timestamp_follows_delivery_order(self, db: AsyncSession, users):
        user_id = users[0].id
        # 먼저 전달된 알림이 더 큰 id를 가짐 — The earlier delivery holds the larger id
        earlier = Notification(
            id=uuid.UUID("ffffffff-ffff-4fff-bfff-ffffffffffff"),
            type="system", title="earlier", body="Body", created_at=BASE_TIME,
        )
        later = Notification(
            id=uuid.UUID("00000000-0000-4000-8000-000000000001"),
            type="system", title="later", body="Body", created_at=BASE_TIME,
        )
        db.add_all([earlier, later])
        await db.flush()
        db.add_all([
            UserNotification(
                user_id=user_id, notification_id=earlier.id, created_at=BASE_TIME + timedelta(seconds=1),
            ),
            UserNotification(
                user_id=user_id, notification_id=later.id, created_at=BASE_TIME + timedelta(seconds=2),
            ),
        ])
        await db.commit()

        feed = await notification_service.get_user_feed(db, user_id)
        assert [item["title"] for item in feed.notifications] == ["later", "earlier"]

    async def test_malformed_user_id_rejected(self, db: AsyncSession):
        with pytest.raises(BadRequestError) as exc_info:
            await notification_service.get_user_feed(db, "not-a-uuid")
        assert isinstance(exc_info.value.__cause__, ValueError)

    async def test_storage_failure_surfaces(self, db: AsyncSession, users, monkeypatch):
        async def broken(*args, **kwargs):
            raise OperationalError("SELECT", {}, Exception("connection reset"))

        monkeypatch.setattr(user_notification_repository, "get_feed", broken)
        with pytest.raises(StorageError) as exc_info:
            await notification_service.get_user_feed(db, users[0].id)
        assert exc_info.value.code == "storage_failure"


class TestUnreadCount:
    """미읽음 수 테스트."""

    async def test_matches_unread_items_in_feed(self, db: AsyncSession, users):
        notifications = await seed_notifications(db, 6)
        for notification in notifications[:2]:
            await notification_service.mark_as_read(db, users[0].id, notification.id)

        count = await notification_service.get_unread_count(db, users[0].id)
        feed = await notification_service.get_user_feed(db, users[0].id, limit=50)

        assert count == 4
        assert count == sum(1 for item in feed.notifications if not item["is_read"])

    async def test_zero_for_user_without_records(self, db: AsyncSession):
        assert await notification_service.get_unread_count(db, uuid.uuid4()) == 0
