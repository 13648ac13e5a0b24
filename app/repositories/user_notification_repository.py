"""사용자별 수신 기록 레포지토리 — 팬아웃, 피드, 읽음 상태 쿼리 담당.

User Notification Repository — Delivery-record queries: conflict-tolerant
bulk insert, the joined feed page, unread counts, and conditional read-state
updates. Every statement here is a single round trip.
"""

from datetime import datetime, timezone
from typing import Any
from uuid import UUID

from sqlalchemy import Select, delete, func, select, true, update
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.notification import Notification, UserNotification

# 고유 제약 컬럼 — Columns of the (user, notification) unique constraint
_CONFLICT_COLUMNS: list[str] = ["user_id", "notification_id"]


def _feed_select(user_id: UUID, *columns: Any) -> Select:
    """사용자의 수신 기록과 부모 알림을 내부 조인한 기본 쿼리.

    Select ``columns`` over the user's delivery records joined to their
    parent notifications. The inner join drops records whose parent was purged.
    """
    return (
        select(*columns)
        .select_from(UserNotification)
        .join(Notification, UserNotification.notification_id == Notification.id)
        .where(UserNotification.user_id == user_id)
    )


class UserNotificationRepository:
    """사용자별 수신 기록 레포지토리.

    Delivery-record repository. Not derived from BaseRepository: records
    are never created one at a time or fetched by id.
    """

    async def bulk_insert_ignore_conflicts(
        self,
        db: AsyncSession,
        rows: list[dict[str, Any]],
    ) -> int:
        """수신 기록을 일괄 삽입하며 (user_id, notification_id) 중복은 건너뜁니다.

        Insert delivery records in one statement, skipping rows that hit the
        (user_id, notification_id) unique constraint. The caller commits.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            rows: 삽입할 행 목록 (Row dicts with id, user_id, notification_id,
                  is_read, created_at)

        Returns:
            int: 실제 삽입된 행 수 (Number of rows actually inserted)

        Raises:
            NotImplementedError: ON CONFLICT 미지원 드라이버 (Dialect without ON CONFLICT support)
        """
        if not rows:
            return 0

        dialect: str = db.get_bind().dialect.name
        if dialect == "postgresql":
            stmt = postgresql_insert(UserNotification).values(rows).on_conflict_do_nothing(
                index_elements=_CONFLICT_COLUMNS
            )
        elif dialect == "sqlite":
            stmt = sqlite_insert(UserNotification).values(rows).on_conflict_do_nothing(
                index_elements=_CONFLICT_COLUMNS
            )
        else:
            raise NotImplementedError(f"Conflict-tolerant insert is not supported on {dialect}")

        result = await db.execute(stmt)
        return max(result.rowcount, 0)

    async def get_feed(
        self,
        db: AsyncSession,
        user_id: UUID,
        skip: int,
        limit: int,
    ) -> tuple[list[dict[str, Any]], int]:
        """사용자 피드 한 페이지와 전체 개수를 단일 쿼리로 조회합니다.

        Fetch one feed window and the user's total in a single statement.

        The total is a one-row COUNT subquery LEFT OUTER JOINed to the windowed
        page subquery, so both come from the same snapshot and the total is
        still returned when the window is past the end (one row of NULLs).

        Ordering: notification created_at desc; ties go to the most recently
        delivered record (delivery created_at desc), then notification id desc
        so the order stays total when both timestamps match.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            user_id: 사용자 UUID (User UUID)
            skip: 건너뛸 항목 수 (Rows to skip)
            limit: 페이지 크기 (Page size)

        Returns:
            tuple[list[dict], int]: (피드 항목 목록, 전체 개수) (Feed items, total)
        """
        totals = _feed_select(user_id, func.count().label("total")).subquery("feed_total")

        page = (
            _feed_select(
                user_id,
                Notification.id.label("id"),
                Notification.type.label("type"),
                Notification.title.label("title"),
                Notification.body.label("body"),
                Notification.meta.label("metadata"),
                Notification.created_at.label("created_at"),
                UserNotification.is_read.label("is_read"),
                UserNotification.read_at.label("read_at"),
                UserNotification.created_at.label("delivered_at"),
            )
            .order_by(
                Notification.created_at.desc(),
                UserNotification.created_at.desc(),
                Notification.id.desc(),
            )
            .offset(skip)
            .limit(limit)
            .subquery("feed_page")
        )

        query: Select = (
            select(totals.c.total, *page.c)
            .select_from(totals.outerjoin(page, true()))
            .order_by(page.c.created_at.desc(), page.c.delivered_at.desc(), page.c.id.desc())
        )
        rows = [row._mapping for row in (await db.execute(query)).all()]

        total: int = rows[0]["total"] if rows else 0
        items: list[dict[str, Any]] = [
            {
                "id": row["id"],
                "type": row["type"],
                "title": row["title"],
                "body": row["body"],
                "metadata": row["metadata"] or {},
                "created_at": row["created_at"],
                "is_read": row["is_read"],
                "read_at": row["read_at"],
            }
            for row in rows
            # 빈 페이지는 NULL 한 행으로 돌아옴 — An empty window comes back as one NULL row
            if row["id"] is not None
        ]
        return items, total

    async def get_unread_count(
        self,
        db: AsyncSession,
        user_id: UUID,
    ) -> int:
        """사용자의 읽지 않은 알림 수를 조회합니다.

        Count the user's unread delivery records whose parent still exists,
        using the same join as the feed so both always agree.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            user_id: 사용자 UUID (User UUID)

        Returns:
            int: 읽지 않은 알림 수 (Count of unread notifications)
        """
        query: Select = _feed_select(user_id, func.count()).where(
            UserNotification.is_read.is_(False)
        )
        count: int = (await db.execute(query)).scalar() or 0
        return count

    async def mark_read(
        self,
        db: AsyncSession,
        user_id: UUID,
        notification_id: UUID,
    ) -> bool:
        """단일 수신 기록을 조건부로 읽음 처리합니다.

        Conditionally transition one record from unread to read.
        Match and mutation happen in one UPDATE, so concurrent calls cannot
        both succeed and read_at is stamped once. The caller commits.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            user_id: 사용자 UUID (User UUID)
            notification_id: 알림 UUID (Notification UUID)

        Returns:
            bool: 전환 발생 여부 (True iff a row transitioned)
        """
        result = await db.execute(
            update(UserNotification)
            .where(
                UserNotification.user_id == user_id,
                UserNotification.notification_id == notification_id,
                UserNotification.is_read.is_(False),
            )
            .values(is_read=True, read_at=datetime.now(timezone.utc))
            .execution_options(synchronize_session=False)
        )
        return result.rowcount > 0

    async def mark_all_read(
        self,
        db: AsyncSession,
        user_id: UUID,
    ) -> int:
        """사용자의 모든 읽지 않은 수신 기록을 읽음 처리합니다.

        Transition every unread record of a user in one UPDATE.
        The caller commits.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            user_id: 사용자 UUID (User UUID)

        Returns:
            int: 전환된 기록 수 (Count of records transitioned)
        """
        result = await db.execute(
            update(UserNotification)
            .where(
                UserNotification.user_id == user_id,
                UserNotification.is_read.is_(False),
            )
            .values(is_read=True, read_at=datetime.now(timezone.utc))
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    async def delete_created_before(
        self,
        db: AsyncSession,
        cutoff: datetime,
    ) -> int:
        """보존 기간이 지난 수신 기록을 삭제합니다.

        Delete delivery records created before ``cutoff``.

        Returns:
            int: 삭제된 행 수 (Number of deleted rows)
        """
        result = await db.execute(
            delete(UserNotification)
            .where(UserNotification.created_at < cutoff)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount


# 싱글턴 인스턴스 — Singleton instance
user_notification_repository: UserNotificationRepository = UserNotificationRepository()
