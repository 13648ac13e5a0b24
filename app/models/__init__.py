"""SQLAlchemy ORM 모델 패키지 — 모든 도메인 모델의 중앙 임포트 지점.

SQLAlchemy ORM models package — Central import point for all domain models.
Importing from this package ensures all models are registered with the
SQLAlchemy metadata, which is required for Alembic migrations and
create_all in tests.

Modules:
    user: 사용자 (Identity records consulted for recipients)
    notification: 알림 본문 및 사용자별 수신 기록 (Notification content and delivery records)
"""

from app.models.user import User
from app.models.notification import Notification, UserNotification

__all__ = [
    "User",
    "Notification", "UserNotification",
]
