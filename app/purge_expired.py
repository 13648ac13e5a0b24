"""보존 기간 만료 정리 스크립트 — 오래된 알림과 수신 기록 삭제.

Retention sweep — Deletes notifications and delivery records older than
NOTIFICATION_RETENTION_DAYS. Schedule it from cron (e.g. hourly).

Usage:
    python -m app.purge_expired
"""

import asyncio
import logging

from app.config import settings
from app.database import async_session, engine
from app.services.retention_service import retention_service


async def purge() -> None:
    """만료된 행을 삭제합니다.

    Run one retention sweep and dispose of the engine.
    """
    async with async_session() as db:
        result = await retention_service.purge_expired(db)
    await engine.dispose()
    print(f"Purged {result.notifications} notifications, {result.deliveries} delivery records.")


if __name__ == "__main__":
    logging.basicConfig(level=settings.LOG_LEVEL)
    asyncio.run(purge())
