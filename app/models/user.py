"""사용자 SQLAlchemy ORM 모델 정의.

User SQLAlchemy ORM model definition.
The users table belongs to the identity system; this service only reads it
to enumerate recipients and to authenticate callers.

Tables:
    - users: 사용자 계정 (User accounts)
"""

import uuid
from datetime import datetime, timezone
from sqlalchemy import String, Boolean, DateTime, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class User(Base):
    """사용자 모델 — 알림 수신자 식별 정보.

    User model — Identity record consulted for recipient enumeration.

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        username: 로그인 아이디 (Unique username)
        is_active: 활성 여부 (Inactive users still receive fan-out but cannot log in)
        is_admin: 관리자 여부 (May author notifications and trigger backfill)
        created_at: 생성 일시 UTC (Creation timestamp)
    """

    __tablename__ = "users"

    # 사용자 고유 식별자 — User unique identifier (UUID v4, auto-generated)
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # 로그인 아이디 — Unique username
    username: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    # 활성 여부 — Soft-disable flag
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    # 관리자 여부 — Notification authoring privilege
    is_admin: Mapped[bool] = mapped_column(Boolean, default=False)
    # 생성 일시 — Record creation timestamp (UTC)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
