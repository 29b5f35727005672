"""create users, issues, upvotes, responses and status history

Initial schema for campus issue reporting.

Revision ID: create_campus_issue_tables
Revises:
Create Date: 2026-10-19 10:00:00.000000

"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'create_campus_issue_tables'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('hashed_password', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=120), nullable=True),
        sa.Column('is_active', sa.Boolean(), server_default='true', nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('last_login', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'issues',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('description', sa.String(length=4000), nullable=False),
        sa.Column('category', sa.String(length=120), nullable=False),
        sa.Column('status', sa.String(length=20), server_default='Reported', nullable=False),
        sa.Column('priority', sa.String(length=20), nullable=False),
        sa.Column('location', sa.String(length=300), server_default='Not specified', nullable=False),
        sa.Column('contact_email', sa.String(length=255), nullable=True),
        sa.Column('contact_phone', sa.String(length=30), nullable=True),
        sa.Column('latitude', sa.Float(), nullable=True),
        sa.Column('longitude', sa.Float(), nullable=True),
        sa.Column('image_url', sa.String(length=1000), nullable=True),
        sa.Column('upvote_count', sa.Integer(), server_default='0', nullable=False),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('reported_date', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint('upvote_count >= 0', name='ck_issues_upvote_count_non_negative'),
        sa.CheckConstraint(
            '(latitude IS NULL AND longitude IS NULL) OR (latitude IS NOT NULL AND longitude IS NOT NULL)',
            name='ck_issues_coordinates_paired',
        ),
    )
    op.create_index('ix_issues_title', 'issues', ['title'])
    op.create_index('ix_issues_category', 'issues', ['category'])
    op.create_index('ix_issues_status', 'issues', ['status'])
    op.create_index('ix_issues_priority', 'issues', ['priority'])
    op.create_index('ix_issues_upvote_count', 'issues', ['upvote_count'])
    op.create_index('ix_issues_user_id', 'issues', ['user_id'])
    op.create_index('ix_issues_reported_date', 'issues', ['reported_date'])
    op.create_index('ix_issues_latitude_longitude', 'issues', ['latitude', 'longitude'])

    op.create_table(
        'issue_upvotes',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('issue_id', sa.Integer(), sa.ForeignKey('issues.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint('issue_id', 'user_id', name='uq_issue_upvote'),
    )
    op.create_index('ix_issue_upvotes_issue_id', 'issue_upvotes', ['issue_id'])
    op.create_index('ix_issue_upvotes_user_id', 'issue_upvotes', ['user_id'])

    op.create_table(
        'issue_responses',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('issue_id', sa.Integer(), sa.ForeignKey('issues.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('response_text', sa.String(length=4000), nullable=False),
        sa.Column('response_type', sa.String(length=20), server_default='update', nullable=False),
        sa.Column('is_admin_response', sa.Boolean(), server_default='false', nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_issue_responses_issue_id', 'issue_responses', ['issue_id'])
    op.create_index('ix_issue_responses_created_at', 'issue_responses', ['created_at'])

    op.create_table(
        'issue_status_history',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('issue_id', sa.Integer(), sa.ForeignKey('issues.id', ondelete='CASCADE'), nullable=False),
        sa.Column('old_status', sa.String(length=20), nullable=True),
        sa.Column('new_status', sa.String(length=20), nullable=False),
        sa.Column('changed_by', sa.Integer(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('change_reason', sa.String(length=500), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_issue_status_history_issue_id', 'issue_status_history', ['issue_id'])
    op.create_index('ix_issue_status_history_created_at', 'issue_status_history', ['created_at'])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('issue_status_history')
    op.drop_table('issue_responses')
    op.drop_table('issue_upvotes')
    op.drop_table('issues')
    op.drop_table('users')
