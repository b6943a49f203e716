"""
Database models package.
"""

from app.models.associations import job_skills, jobseeker_skills
from app.models.skill import Skill
from app.models.job import Job
from app.models.job_seeker import JobSeeker

__all__ = ["Skill", "Job", "JobSeeker", "job_skills", "jobseeker_skills"]
