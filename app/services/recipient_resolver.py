"""수신자 결정 서비스 — 알림의 대상 사용자 집합을 계산.

Recipient Resolver — Computes the set of users a notification is addressed to.
Global notifications take a point-in-time snapshot of the identity store;
targeted ones use their stored list.
"""

import logging
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.notification import Notification
from app.repositories.user_repository import user_repository

logger = logging.getLogger(__name__)


def normalize_user_ids(raw_ids: list[str | UUID]) -> tuple[list[UUID], list[str]]:
    """사용자 ID 목록을 UUID로 정규화하고 중복을 제거합니다.

    Normalize ids to ``uuid.UUID`` and drop duplicates, keeping first-seen
    order. Returns the normalized ids and the raw values that failed to parse.
    """
    seen: set[UUID] = set()
    normalized: list[UUID] = []
    invalid: list[str] = []
    for raw in raw_ids:
        try:
            user_id = raw if isinstance(raw, UUID) else UUID(str(raw).strip())
        except ValueError:
            invalid.append(str(raw))
            continue
        if user_id not in seen:
            seen.add(user_id)
            normalized.append(user_id)
    return normalized, invalid


class RecipientResolver:
    """수신자 결정기.

    Resolves a notification's addressing fields into recipient user ids.
    """

    async def resolve(
        self,
        db: AsyncSession,
        notification: Notification,
    ) -> set[UUID]:
        """알림의 수신자 집합을 반환합니다.

        Return the recipients of ``notification``.

        - 전체 대상: 신원 저장소의 모든 사용자 (Every known user, snapshot)
        - 지정 대상: target_users 정규화/중복 제거 (Stored targets, deduplicated)

        Must only be called after the notification is committed.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            notification: 저장된 알림 (Persisted notification)

        Returns:
            set[UUID]: 수신자 ID 집합 (Recipient user ids, possibly empty)
        """
        if notification.is_global:
            return set(await user_repository.list_all_ids(db))

        recipients, invalid = normalize_user_ids(notification.target_users or [])
        if invalid:
            logger.warning(
                "Skipping %d malformed target ids on notification %s",
                len(invalid),
                notification.id,
            )
        return set(recipients)


# 싱글턴 인스턴스 — Singleton instance
recipient_resolver: RecipientResolver = RecipientResolver()
