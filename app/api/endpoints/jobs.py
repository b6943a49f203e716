import logging
from typing import List
from uuid import UUID
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.database import get_db
from app.core.deps import Principal, get_employer
from app.core.errors import ForbiddenError, NotFoundError
from app.models.job import Job
from app.schemas.job import JobCreate, JobResponse, JobUpdate
from app.schemas.response import ApiResponse, success
from app.services.job_service import job_service

router = APIRouter(prefix="/jobs", tags=["Jobs"])
logger = logging.getLogger(__name__)


def _get_owned_job(db: Session, job_id: UUID, principal: Principal) -> Job:
    job = job_service.get(db, job_id)
    if not job:
        raise NotFoundError("Job not found")
    if job.employer_id != principal.subject:
        raise ForbiddenError("Only the employer who posted this job can change it")
    return job


@router.get("/", response_model=ApiResponse[List[JobResponse]])
def list_jobs(
    skip: int = Query(0, ge=0),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1),
    db: Session = Depends(get_db)
):
    """
    List job postings, newest first.

    Args:
        skip: Number of records to skip (default: 0)
        limit: Maximum number of records to return (capped at MAX_PAGE_SIZE)
    """
    limit = min(limit, settings.MAX_PAGE_SIZE)

    jobs = job_service.get_multi(db, skip=skip, limit=limit)
    return success([JobResponse.model_validate(j) for j in jobs], message="Jobs retrieved")


@router.get("/mine", response_model=ApiResponse[List[JobResponse]])
def list_my_jobs(
    skip: int = Query(0, ge=0),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1),
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_employer)
):
    """List the calling employer's job postings."""
    limit = min(limit, settings.MAX_PAGE_SIZE)

    jobs = job_service.get_multi_for_employer(db, principal.subject, skip=skip, limit=limit)
    return success([JobResponse.model_validate(j) for j in jobs], message="Jobs retrieved")


@router.get("/{job_id}", response_model=ApiResponse[JobResponse])
def get_job(job_id: UUID, db: Session = Depends(get_db)):
    """Retrieve a job posting by ID."""
    job = job_service.get(db, job_id)
    if not job:
        raise NotFoundError("Job not found")

    return success(JobResponse.model_validate(job), message="Job retrieved")


@router.post("/", status_code=201, response_model=ApiResponse[JobResponse])
def create_job(
    request: JobCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_employer)
):
    """
    Create a job posting owned by the calling employer.

    Every id in `skill_ids` must name an existing skill.
    """
    job = job_service.create_for_employer(db, obj_in=request, employer_id=principal.subject)
    logger.info(f"Created job {job.id}: {job.title} (employer {principal.subject})")

    return success(JobResponse.model_validate(job), message="Job created", status=201)


@router.put("/{job_id}", response_model=ApiResponse[JobResponse])
def update_job(
    job_id: UUID,
    request: JobUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_employer)
):
    """Partially update one of the caller's job postings."""
    job = _get_owned_job(db, job_id, principal)

    job = job_service.update(db, db_obj=job, obj_in=request)
    logger.info(f"Updated job {job_id}")

    return success(JobResponse.model_validate(job), message="Job updated")


@router.delete("/{job_id}", response_model=ApiResponse[None])
def delete_job(
    job_id: UUID,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_employer)
):
    """Delete one of the caller's job postings; its skill links go with it."""
    _get_owned_job(db, job_id, principal)

    job_service.remove(db, id=job_id)
    logger.info(f"Deleted job {job_id}")

    return success(None, message="Job deleted")
