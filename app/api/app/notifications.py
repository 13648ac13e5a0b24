"""앱 알림 라우터 — 내 알림 피드 및 읽음 처리 API.

App Notification Router — The caller's notification feed, unread count,
and read-state mutations. Every operation is scoped to the authenticated
user; there is no way to touch another user's records.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user
from app.config import settings
from app.database import get_db
from app.models.user import User
from app.schemas.common import ErrorResponse, MessageResponse
from app.schemas.notification import FeedResponse, MarkAllReadResponse, UnreadCountResponse
from app.services.notification_service import notification_service
from app.utils.exceptions import NotFoundError

router: APIRouter = APIRouter()


@router.get("", response_model=FeedResponse)
async def list_my_notifications(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=settings.FEED_MAX_LIMIT)] = settings.FEED_DEFAULT_LIMIT,
) -> dict:
    """내 알림 피드를 최신순으로 조회합니다.

    List the caller's notifications, newest first, with read state.

    Args:
        db: 비동기 데이터베이스 세션 (Async database session)
        current_user: 인증된 사용자 (Authenticated user)
        page: 페이지 번호 (Page number, >= 1)
        limit: 페이지 크기 (Page size, 1..50)

    Returns:
        dict: 피드 페이지 (notifications, total, has_more, page, limit)
    """
    feed = await notification_service.get_user_feed(
        db,
        user_id=current_user.id,
        page=page,
        limit=limit,
    )

    items: list[dict] = [
        {**item, "id": str(item["id"])}
        for item in feed.notifications
    ]

    return {
        "notifications": items,
        "total": feed.total,
        "has_more": feed.has_more,
        "page": feed.page,
        "limit": feed.limit,
    }


@router.get("/unread-count", response_model=UnreadCountResponse)
async def get_my_unread_count(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> dict:
    """내 읽지 않은 알림 수를 조회합니다.

    Get the caller's unread notification count.
    """
    count: int = await notification_service.get_unread_count(db, user_id=current_user.id)
    return {"count": count}


@router.patch("/read-all", response_model=MarkAllReadResponse)
async def mark_all_my_notifications_read(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> dict:
    """내 모든 읽지 않은 알림을 읽음 처리합니다.

    Mark all of the caller's unread notifications as read.

    Returns:
        dict: 처리 결과 메시지와 건수 (Message and transitioned count)
    """
    count: int = await notification_service.mark_all_as_read(db, user_id=current_user.id)
    return {
        "message": f"{count} notifications marked as read",
        "updated_count": count,
    }


@router.patch(
    "/{notification_id}/read",
    response_model=MessageResponse,
    responses={404: {"model": ErrorResponse}},
)
async def mark_my_notification_read(
    notification_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> dict:
    """단일 알림을 읽음 처리합니다.

    Mark one of the caller's notifications as read.

    Args:
        notification_id: 알림 UUID (Notification UUID)
        db: 비동기 데이터베이스 세션 (Async database session)
        current_user: 인증된 사용자 (Authenticated user)

    Returns:
        dict: 처리 결과 메시지 (Result message)

    Raises:
        NotFoundError: 수신 기록이 없거나 이미 읽음 (No record, or already read)
    """
    success: bool = await notification_service.mark_as_read(
        db,
        user_id=current_user.id,
        notification_id=notification_id,
    )
    if not success:
        raise NotFoundError("Notification not found or already read")

    return {"message": "Notification marked as read"}
