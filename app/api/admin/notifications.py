"""관리자 알림 라우터 — 알림 작성 API.

Admin Notification Router — Creates notifications and fans them out.
Creation responds once the notification is stored; fan-out problems are
logged server-side and never turn into an error response.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import require_admin
from app.database import get_db
from app.models.notification import Notification
from app.models.user import User
from app.schemas.notification import (
    NewVideoNotificationCreate,
    NotificationCreate,
    NotificationResponse,
)
from app.services.notification_service import notification_service

router: APIRouter = APIRouter()


def _to_response(notification: Notification) -> dict:
    """알림 ORM 객체를 응답 딕셔너리로 변환합니다 (Serialize a notification)."""
    return {
        "id": str(notification.id),
        "type": notification.type,
        "title": notification.title,
        "body": notification.body,
        "metadata": notification.meta or {},
        "is_global": notification.is_global,
        "target_users": list(notification.target_users or []),
        "created_at": notification.created_at,
    }


@router.post("", response_model=NotificationResponse, status_code=status.HTTP_201_CREATED)
async def create_notification(
    data: NotificationCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> dict:
    """알림을 생성하고 대상 사용자에게 팬아웃합니다.

    Create a notification and fan it out to its recipients.

    Args:
        data: 알림 생성 요청 (Notification creation payload)
        db: 비동기 데이터베이스 세션 (Async database session)
        current_user: 인증된 관리자 (Authenticated admin)

    Returns:
        dict: 생성된 알림 (Created notification)
    """
    notification: Notification = await notification_service.create_notification(
        db,
        notification_type=data.type,
        title=data.title,
        body=data.body,
        metadata=data.metadata,
        is_global=data.is_global,
        target_users=list(data.target_users),
    )
    return _to_response(notification)


@router.post("/new-video", response_model=NotificationResponse, status_code=status.HTTP_201_CREATED)
async def create_new_video_notification(
    data: NewVideoNotificationCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> dict:
    """새 영상 등록 알림을 전체 사용자에게 생성합니다.

    Announce a new course video to every user.
    """
    notification: Notification = await notification_service.create_for_new_video(
        db,
        course_id=data.course_id,
        course_name=data.course_name,
        video_id=data.video_id,
        video_title=data.video_title,
    )
    return _to_response(notification)
