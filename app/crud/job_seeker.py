"""
CRUD operations for JobSeeker profiles.

Profiles are keyed by the identity provider subject (user_id); skill lists are
resolved to Skill rows by the caller before they reach this layer.
"""

from typing import List, Optional
from sqlalchemy.orm import Session
from app.models.job_seeker import JobSeeker
from app.models.skill import Skill
from app.schemas.job_seeker import JobSeekerCreate, JobSeekerUpdate


def create(db: Session, user_id: str, data: JobSeekerCreate, skills: List[Skill]) -> JobSeeker:
    """
    Create a profile for the given user.

    Args:
        db: Database session
        user_id: Identity provider subject
        data: Validated profile data
        skills: Resolved skills to link

    Returns:
        Created JobSeeker instance with id
    """
    db_job_seeker = JobSeeker(
        user_id=user_id,
        full_name=data.full_name,
        headline=data.headline,
        skills=skills,
    )

    db.add(db_job_seeker)
    db.commit()
    db.refresh(db_job_seeker)

    return db_job_seeker


def get_by_user_id(db: Session, user_id: str) -> Optional[JobSeeker]:
    """Retrieve the profile owned by user_id, or None."""
    return db.query(JobSeeker).filter(JobSeeker.user_id == user_id).first()


def update(
    db: Session,
    job_seeker: JobSeeker,
    data: JobSeekerUpdate,
    skills: Optional[List[Skill]] = None
) -> JobSeeker:
    """
    Apply a partial profile update.

    Args:
        db: Database session
        job_seeker: Profile to update
        data: Only fields set in the request are applied
        skills: Replacement skill set, or None to keep the current one

    Returns:
        Updated JobSeeker instance
    """
    changes = data.model_dump(exclude_unset=True, exclude={"skill_ids"})
    if not changes and skills is None:
        return job_seeker

    for field, value in changes.items():
        setattr(job_seeker, field, value)
    if skills is not None:
        job_seeker.skills = skills

    db.commit()
    db.refresh(job_seeker)

    return job_seeker


def set_file_path(db: Session, job_seeker: JobSeeker, field: str, path: Optional[str]) -> JobSeeker:
    """
    Store an uploaded file location on the profile.

    Args:
        field: "photo_path" or "resume_path"
    """
    if field not in ("photo_path", "resume_path"):
        raise ValueError(f"Unknown file field: {field}")

    setattr(job_seeker, field, path)
    db.commit()
    db.refresh(job_seeker)

    return job_seeker


def delete(db: Session, job_seeker: JobSeeker) -> None:
    """Delete a profile; its skill links are removed with it."""
    db.delete(job_seeker)
    db.commit()
