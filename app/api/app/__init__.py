"""앱 API 라우터 패키지 — 모든 앱(사용자용) 엔드포인트 통합.

App API Router package — Aggregates all user-facing endpoints
into a single router for inclusion in the FastAPI application.

Included routers:
    - notifications: 내 알림 피드 및 읽음 처리 (My notification feed and read state)
"""

from fastapi import APIRouter

from app.api.app.notifications import router as notifications_router

app_router: APIRouter = APIRouter()

# 내 알림: /my/notifications 하위 (My notifications)
app_router.include_router(notifications_router, prefix="/my/notifications", tags=["My Notifications"])
