"""initial schema: users, reports, webhooks, endpoints, templates, logs

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-19 00:00:00.000000
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '0001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade():
    # -----------------------
    # users
    # -----------------------
    op.create_table(
        'users',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('hashed_password', sa.String(255), nullable=False),
        sa.Column('role', sa.String(20), nullable=False, server_default='USER'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_role', 'users', ['role'])
    op.create_index('ix_users_created_at', 'users', ['created_at'])
    op.create_index('idx_user_role_active', 'users', ['role', 'is_active'])

    # -----------------------
    # reports
    # -----------------------
    op.create_table(
        'daily_reports',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('user_id', sa.String(36), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('tickets_resolved', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('chats_handled', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('github_issues', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('emails_processed', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('calls_attended', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('notes', sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_daily_reports_user_id', 'daily_reports', ['user_id'])
    op.create_index('ix_daily_reports_date', 'daily_reports', ['date'])
    op.create_index('ix_daily_reports_created_at', 'daily_reports', ['created_at'])
    op.create_index('idx_daily_report_user_date', 'daily_reports', ['user_id', 'date'])

    op.create_table(
        'meeting_reports',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('user_id', sa.String(36), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('outcome', sa.String(30), nullable=False, server_default='COMPLETED'),
        sa.Column('notes', sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_meeting_reports_user_id', 'meeting_reports', ['user_id'])
    op.create_index('ix_meeting_reports_outcome', 'meeting_reports', ['outcome'])
    op.create_index('ix_meeting_reports_created_at', 'meeting_reports', ['created_at'])

    # -----------------------
    # webhooks
    # -----------------------
    op.create_table(
        'incoming_webhooks',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('created_by', sa.String(36), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('url', sa.String(255), nullable=False, unique=True),
        sa.Column('type', sa.String(50), nullable=False, server_default='GENERIC'),
        sa.Column('secret', sa.String(255), nullable=True),
        sa.Column('status', sa.String(20), nullable=False, server_default='ACTIVE'),
        *_timestamps(),
    )
    op.create_index('ix_incoming_webhooks_created_by', 'incoming_webhooks', ['created_by'])
    op.create_index('ix_incoming_webhooks_status', 'incoming_webhooks', ['status'])
    op.create_index('ix_incoming_webhooks_created_at', 'incoming_webhooks', ['created_at'])
    op.create_index('idx_incoming_webhook_owner_status', 'incoming_webhooks', ['created_by', 'status'])

    op.create_table(
        'outgoing_endpoints',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('incoming_webhook_id', sa.String(36),
                  sa.ForeignKey('incoming_webhooks.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('url', sa.String(1024), nullable=False),
        sa.Column('method', sa.String(10), nullable=False, server_default='POST'),
        sa.Column('headers', sa.JSON(), nullable=False),
        sa.Column('retry_attempts', sa.Integer(), nullable=False, server_default='3'),
        sa.Column('retry_delay_ms', sa.Integer(), nullable=False, server_default='1000'),
        sa.Column('timeout_ms', sa.Integer(), nullable=False, server_default='30000'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_index('ix_outgoing_endpoints_incoming_webhook_id', 'outgoing_endpoints', ['incoming_webhook_id'])
    op.create_index('ix_outgoing_endpoints_is_active', 'outgoing_endpoints', ['is_active'])
    op.create_index('ix_outgoing_endpoints_created_at', 'outgoing_endpoints', ['created_at'])

    op.create_table(
        'message_templates',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('endpoint_id', sa.String(36),
                  sa.ForeignKey('outgoing_endpoints.id', ondelete='CASCADE'), nullable=False, unique=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('body', sa.Text(), nullable=False),
        sa.Column('content_type', sa.String(100), nullable=False, server_default='application/json'),
        *_timestamps(),
    )

    # -----------------------
    # logs (append-only)
    # -----------------------
    op.create_table(
        'payload_logs',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('incoming_webhook_id', sa.String(36),
                  sa.ForeignKey('incoming_webhooks.id', ondelete='CASCADE'), nullable=False),
        sa.Column('payload', sa.Text(), nullable=False),
        sa.Column('headers', sa.JSON(), nullable=False),
        sa.Column('source_ip', sa.String(45), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_payload_logs_incoming_webhook_id', 'payload_logs', ['incoming_webhook_id'])
    op.create_index('ix_payload_logs_created_at', 'payload_logs', ['created_at'])

    op.create_table(
        'delivery_logs',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('endpoint_id', sa.String(36),
                  sa.ForeignKey('outgoing_endpoints.id', ondelete='CASCADE'), nullable=False),
        sa.Column('payload_log_id', sa.String(36),
                  sa.ForeignKey('payload_logs.id', ondelete='SET NULL'), nullable=True),
        sa.Column('attempt', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('status', sa.String(20), nullable=False, server_default='PENDING'),
        sa.Column('response_status', sa.Integer(), nullable=True),
        sa.Column('response_body', sa.Text(), nullable=True),
        sa.Column('error', sa.Text(), nullable=True),
        sa.Column('duration_ms', sa.Integer(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_delivery_logs_endpoint_id', 'delivery_logs', ['endpoint_id'])
    op.create_index('ix_delivery_logs_payload_log_id', 'delivery_logs', ['payload_log_id'])
    op.create_index('ix_delivery_logs_status', 'delivery_logs', ['status'])
    op.create_index('ix_delivery_logs_created_at', 'delivery_logs', ['created_at'])
    op.create_index('idx_delivery_endpoint_status', 'delivery_logs', ['endpoint_id', 'status'])


def downgrade():
    op.drop_table('delivery_logs')
    op.drop_table('payload_logs')
    op.drop_table('message_templates')
    op.drop_table('outgoing_endpoints')
    op.drop_table('incoming_webhooks')
    op.drop_table('meeting_reports')
    op.drop_table('daily_reports')
    op.drop_table('users')
