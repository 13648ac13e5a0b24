"""관리자 사용자 라우터 — 신규 사용자 알림 백필 API.

Admin User Router — Hook for the user-provisioning workflow to extend
existing global notifications to a newly created user.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import require_admin
from app.database import get_db
from app.models.user import User
from app.schemas.notification import BackfillResponse
from app.services.notification_service import notification_service

router: APIRouter = APIRouter()


@router.post("/{user_id}/notification-backfill", response_model=BackfillResponse)
async def backfill_user_notifications(
    user_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> dict:
    """신규 사용자에게 기존 전체 알림의 수신 기록을 생성합니다.

    Backfill delivery records of existing global notifications for a user.
    Safe to call repeatedly; records that already exist are skipped.

    Args:
        user_id: 대상 사용자 UUID (User to backfill)
        db: 비동기 데이터베이스 세션 (Async database session)
        current_user: 인증된 관리자 (Authenticated admin)

    Returns:
        dict: 백필 결과 (Inserted/skipped/failed counts)
    """
    result = await notification_service.backfill_for_new_user(db, user_id)
    return {
        "user_id": str(user_id),
        "inserted": result.inserted,
        "skipped": result.skipped,
        "failed": result.failed,
    }
