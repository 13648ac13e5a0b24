"""테스트 인프라 — 임시 SQLite DB, 세션, httpx 클라이언트 픽스처.

Test infrastructure — Per-test SQLite database (aiosqlite), session, and
httpx client fixtures. Each test gets a fresh file-backed database under
tmp_path, so no cleanup between tests is needed.
"""

import os

# 앱 임포트 전에 기본 엔진을 SQLite로 — Keep the app's default engine off PostgreSQL
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

from collections.abc import AsyncGenerator  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy import func, select  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from app.database import Base, get_db  # noqa: E402
from app.main import app  # noqa: E402
# 모든 모델을 메타데이터에 등록 (Register every model with the metadata)
from app.models import *  # noqa: F401,F403,E402
from app.models.notification import UserNotification  # noqa: E402
from app.models.user import User  # noqa: E402
from app.utils.jwt import create_access_token  # noqa: E402


# ---------------------------------------------------------------------------
# Function-scoped: 엔진, 세션, 클라이언트
# ---------------------------------------------------------------------------
@pytest_asyncio.fixture
async def engine(tmp_path) -> AsyncGenerator[AsyncEngine, None]:
    """테스트용 async 엔진. 테스트마다 새 SQLite 파일에 스키마를 생성합니다."""
    eng = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'notifications.db'}")
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """테스트 엔진에 묶인 세션 팩토리."""
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory: async_sessionmaker[AsyncSession]) -> AsyncGenerator[AsyncSession, None]:
    """각 테스트에 격리된 DB 세션을 제공합니다."""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(db: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """FastAPI 테스트 클라이언트 — DB 세션을 오버라이드합니다."""
    async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db

    app.dependency_overrides[get_db] = _override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# 헬퍼 픽스처: 테스트용 데이터 생성
# ---------------------------------------------------------------------------
async def make_user(db: AsyncSession, username: str, **kwargs) -> User:
    """테스트 사용자를 생성하고 커밋합니다."""
    user = User(username=username, **kwargs)
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


@pytest_asyncio.fixture
async def admin_user(db: AsyncSession) -> User:
    """관리자 사용자를 생성합니다."""
    return await make_user(db, "admin", is_admin=True)


@pytest_asyncio.fixture
async def users(db: AsyncSession) -> list[User]:
    """일반 사용자 4명을 생성합니다."""
    return [await make_user(db, f"user{i}") for i in range(4)]


@pytest_asyncio.fixture
async def inactive_user(db: AsyncSession) -> User:
    """비활성 사용자를 생성합니다."""
    return await make_user(db, "inactive", is_active=False)


def make_token(user: User) -> str:
    """테스트용 JWT 액세스 토큰을 생성합니다."""
    return create_access_token({"sub": str(user.id)})


@pytest.fixture
def admin_token(admin_user: User) -> str:
    return make_token(admin_user)


@pytest.fixture
def user_token(users: list[User]) -> str:
    return make_token(users[0])


def auth_header(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


# ---------------------------------------------------------------------------
# 검증용 조회 헬퍼 — Raw delivery-record lookups (no join, orphans included)
# ---------------------------------------------------------------------------
async def records_for_user(db: AsyncSession, user_id) -> list[UserNotification]:
    """사용자의 모든 수신 기록을 조회합니다."""
    result = await db.execute(
        select(UserNotification).where(UserNotification.user_id == user_id)
    )
    return list(result.scalars().all())


async def count_records(db: AsyncSession, notification_id) -> int:
    """알림 하나에 대해 생성된 수신 기록 수를 조회합니다."""
    result = await db.execute(
        select(func.count())
        .select_from(UserNotification)
        .where(UserNotification.notification_id == notification_id)
    )
    return result.scalar() or 0
