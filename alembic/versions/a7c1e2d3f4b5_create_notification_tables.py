"""create_notification_tables

Revision ID: a7c1e2d3f4b5
Revises:
Create Date: 2026-10-18 10:00:00.000000

알림 테이블 생성: notifications, user_notifications.
Add notification content and per-user delivery tables.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB, UUID


# revision identifiers, used by Alembic.
revision: str = 'a7c1e2d3f4b5'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # notifications — 알림 본문 (written once, never updated)
    # Notification content shared by every recipient
    op.create_table(
        'notifications',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('type', sa.String(30), nullable=False),
        sa.Column('title', sa.String(200), nullable=False),
        sa.Column('body', sa.String(1000), nullable=False),
        sa.Column('metadata', JSONB(), server_default=sa.text("'{}'::jsonb"), nullable=False),
        sa.Column('is_global', sa.Boolean(), server_default=sa.text('true'), nullable=False),
        sa.Column('target_users', JSONB(), server_default=sa.text("'[]'::jsonb"), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )

    # 알림 인덱스 — Ordering, type filter, and retention scans
    op.create_index('ix_notifications_created_at', 'notifications', ['created_at'])
    op.create_index('ix_notifications_type_created_at', 'notifications', ['type', 'created_at'])
    op.create_index('ix_notifications_is_global_created_at', 'notifications', ['is_global', 'created_at'])

    # user_notifications — 사용자별 수신/읽음 기록
    # No FK to notifications or users: each table expires on its own created_at
    op.create_table(
        'user_notifications',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('user_id', UUID(as_uuid=True), nullable=False),
        sa.Column('notification_id', UUID(as_uuid=True), nullable=False),
        sa.Column('is_read', sa.Boolean(), server_default=sa.text('false'), nullable=False),
        sa.Column('read_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )

    # 유니크 제약 — 사용자+알림 쌍당 하나 (fan-out and backfill rely on ON CONFLICT)
    op.create_unique_constraint(
        'uq_user_notifications_user_notification',
        'user_notifications',
        ['user_id', 'notification_id'],
    )

    # 수신 기록 인덱스 — Unread count, feed window, and per-notification lookups
    op.create_index('ix_user_notifications_user_is_read', 'user_notifications', ['user_id', 'is_read'])
    op.create_index('ix_user_notifications_user_created_at', 'user_notifications', ['user_id', 'created_at'])
    op.create_index('ix_user_notifications_notification_id', 'user_notifications', ['notification_id'])


def downgrade() -> None:
    op.drop_index('ix_user_notifications_notification_id', table_name='user_notifications')
    op.drop_index('ix_user_notifications_user_created_at', table_name='user_notifications')
    op.drop_index('ix_user_notifications_user_is_read', table_name='user_notifications')
    op.drop_constraint('uq_user_notifications_user_notification', 'user_notifications', type_='unique')
    op.drop_table('user_notifications')

    op.drop_index('ix_notifications_is_global_created_at', table_name='notifications')
    op.drop_index('ix_notifications_type_created_at', table_name='notifications')
    op.drop_index('ix_notifications_created_at', table_name='notifications')
    op.drop_table('notifications')
