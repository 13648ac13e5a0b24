"""관리자 API 라우터 패키지 — 모든 관리자 엔드포인트 통합.

Admin API Router package — Aggregates all admin-facing endpoints
into a single router for inclusion in the FastAPI application.

Included routers:
    - notifications: 알림 작성 및 팬아웃 (Notification authoring and fan-out)
    - users: 신규 사용자 알림 백필 (New-user notification backfill)
"""

from fastapi import APIRouter

from app.api.admin.notifications import router as notifications_router
from app.api.admin.users import router as users_router

admin_router: APIRouter = APIRouter()

admin_router.include_router(notifications_router, prefix="/notifications", tags=["Admin Notifications"])
admin_router.include_router(users_router, prefix="/users", tags=["Admin Users"])
