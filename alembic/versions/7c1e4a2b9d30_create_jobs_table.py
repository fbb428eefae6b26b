"""create_jobs_table

Revision ID: 7c1e4a2b9d30
Revises: 
Create Date: 2026-10-19 09:12:44.118203

Production-safe migration: only creates the jobs table if it is missing.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect


# revision identifiers, used by Alembic.
revision: str = '7c1e4a2b9d30'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def table_exists(table_name: str) -> bool:
    """Check if a table exists in the database."""
    bind = op.get_bind()
    inspector = inspect(bind)
    return table_name in inspector.get_table_names()


def upgrade() -> None:
    if not table_exists('jobs'):
        op.create_table('jobs',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('title', sa.String(), nullable=False),
            sa.Column('company_name', sa.String(), nullable=False),
            sa.Column('company_logo', sa.String(), nullable=True),
            sa.Column('location', sa.String(), nullable=False),
            sa.Column('salary_min', sa.BigInteger(), nullable=True),
            sa.Column('salary_max', sa.BigInteger(), nullable=True),
            sa.Column('salary_text', sa.String(), nullable=False),
            sa.Column('job_type_id', sa.String(), nullable=False),
            sa.Column('category_id', sa.String(), nullable=False),
            sa.Column('category_method', sa.String(), nullable=True),
            sa.Column('description', sa.Text(), nullable=False),
            sa.Column('requirements', sa.JSON(), nullable=False),
            sa.Column('benefits', sa.JSON(), nullable=False),
            sa.Column('skills', sa.JSON(), nullable=False),
            sa.Column('source', sa.String(), nullable=False),
            sa.Column('external_url', sa.String(), nullable=True),
            sa.Column('poster_id', sa.String(), nullable=True),
            sa.Column('contact_info', sa.JSON(), nullable=True),
            sa.Column('dedup_key', sa.String(), nullable=False),
            sa.Column('status', sa.String(), nullable=False),
            sa.Column('is_verified', sa.Boolean(), nullable=False),
            sa.Column('spam_score', sa.Integer(), nullable=True),
            sa.Column('moderation_note', sa.Text(), nullable=True),
            sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
            sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
            sa.Column('expires_at', sa.DateTime(timezone=True), nullable=True),
            sa.PrimaryKeyConstraint('id'),
            sa.UniqueConstraint('external_url')
        )
        op.create_index('idx_status_created', 'jobs', ['status', 'created_at'], unique=False)
        op.create_index('idx_source_status', 'jobs', ['source', 'status'], unique=False)
        op.create_index(op.f('ix_jobs_id'), 'jobs', ['id'], unique=False)
        op.create_index(op.f('ix_jobs_title'), 'jobs', ['title'], unique=False)
        op.create_index(op.f('ix_jobs_company_name'), 'jobs', ['company_name'], unique=False)
        op.create_index(op.f('ix_jobs_category_id'), 'jobs', ['category_id'], unique=False)
        op.create_index(op.f('ix_jobs_source'), 'jobs', ['source'], unique=False)
        op.create_index(op.f('ix_jobs_poster_id'), 'jobs', ['poster_id'], unique=False)
        op.create_index(op.f('ix_jobs_dedup_key'), 'jobs', ['dedup_key'], unique=False)
        op.create_index(op.f('ix_jobs_status'), 'jobs', ['status'], unique=False)
        op.create_index(op.f('ix_jobs_created_at'), 'jobs', ['created_at'], unique=False)


def downgrade() -> None:
    if table_exists('jobs'):
        op.drop_table('jobs')
