"""
Association tables linking skills to jobs and job seekers.

Pure link rows with no attributes of their own. The composite primary key
allows at most one link per (owner, skill) pair.
"""

from sqlalchemy import Column, ForeignKey, Table, Uuid
from app.core.database import Base


jobseeker_skills = Table(
    "jobseeker_skills",
    Base.metadata,
    Column("jobseeker_id", Uuid(as_uuid=True), ForeignKey("jobseekers.id", ondelete="CASCADE"), primary_key=True),
    Column("skill_id", Uuid(as_uuid=True), ForeignKey("skills.id"), primary_key=True, index=True),
)

job_skills = Table(
    "job_skills",
    Base.metadata,
    Column("job_id", Uuid(as_uuid=True), ForeignKey("jobs.id", ondelete="CASCADE"), primary_key=True),
    Column("skill_id", Uuid(as_uuid=True), ForeignKey("skills.id"), primary_key=True, index=True),
)
