"""create_marketplace_tables

Creates the skills catalog, job postings, job seeker profiles and the two
skill association tables.

Revision ID: 3f1c2a9d7e41
Revises:
Create Date: 2026-10-18 09:12:40.512318

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1c2a9d7e41'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'skills',
        sa.Column('id', sa.Uuid(as_uuid=True), primary_key=True, nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('category', sa.String(length=100), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_skills_id', 'skills', ['id'])
    op.create_index('ix_skills_name', 'skills', ['name'])
    op.create_index('ix_skills_category', 'skills', ['category'])
    # Case-insensitive uniqueness backstop for the router's name check
    op.create_index('uq_skills_name_lower', 'skills', [sa.text('lower(name)')], unique=True)

    op.create_table(
        'jobs',
        sa.Column('id', sa.Uuid(as_uuid=True), primary_key=True, nullable=False),
        sa.Column('employer_id', sa.String(), nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('location', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_jobs_id', 'jobs', ['id'])
    op.create_index('ix_jobs_employer_id', 'jobs', ['employer_id'])
    op.create_index('ix_jobs_title', 'jobs', ['title'])
    op.create_index('ix_jobs_created_at', 'jobs', ['created_at'])

    op.create_table(
        'jobseekers',
        sa.Column('id', sa.Uuid(as_uuid=True), primary_key=True, nullable=False),
        sa.Column('user_id', sa.String(), nullable=False),
        sa.Column('full_name', sa.String(length=200), nullable=False),
        sa.Column('headline', sa.String(length=200), nullable=True),
        sa.Column('photo_path', sa.String(), nullable=True),
        sa.Column('resume_path', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_jobseekers_id', 'jobseekers', ['id'])
    op.create_index('ix_jobseekers_user_id', 'jobseekers', ['user_id'], unique=True)

    # Association tables: composite primary key allows one link per pair.
    # skill_id has no ON DELETE: deleting a referenced skill must fail.
    op.create_table(
        'jobseeker_skills',
        sa.Column('jobseeker_id', sa.Uuid(as_uuid=True), sa.ForeignKey('jobseekers.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('skill_id', sa.Uuid(as_uuid=True), sa.ForeignKey('skills.id'), primary_key=True),
    )
    op.create_index('ix_jobseeker_skills_skill_id', 'jobseeker_skills', ['skill_id'])

    op.create_table(
        'job_skills',
        sa.Column('job_id', sa.Uuid(as_uuid=True), sa.ForeignKey('jobs.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('skill_id', sa.Uuid(as_uuid=True), sa.ForeignKey('skills.id'), primary_key=True),
    )
    op.create_index('ix_job_skills_skill_id', 'job_skills', ['skill_id'])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('job_skills')
    op.drop_table('jobseeker_skills')
    op.drop_table('jobseekers')
    op.drop_table('jobs')
    op.drop_table('skills')
