"""사용자 레포지토리 — 신원 저장소 조회 어댑터.

User Repository — Read-only adapter over the identity store.
Used by the recipient resolver to enumerate users and by the auth
dependency to load the caller.
"""

from uuid import UUID

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user import User
from app.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """사용자 테이블에 대한 데이터베이스 쿼리를 담당하는 레포지토리.

    Repository handling database queries for the users table.
    """

    def __init__(self) -> None:
        """UserRepository를 초기화합니다.

        Initialize the UserRepository with the User model.
        """
        super().__init__(User)

    async def list_all_ids(self, db: AsyncSession) -> list[UUID]:
        """신원 저장소에 등록된 모든 사용자의 ID를 조회합니다.

        Return the id of every user known to the identity store, active or
        not. No page ceiling: global fan-out needs the full point-in-time
        snapshot. Inactive users are kept out at authentication instead.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)

        Returns:
            list[UUID]: 사용자 ID 목록 (All user ids)
        """
        query: Select = select(User.id)
        result = await db.execute(query)
        return list(result.scalars().all())


# 싱글턴 인스턴스 — Singleton instance
user_repository: UserRepository = UserRepository()
