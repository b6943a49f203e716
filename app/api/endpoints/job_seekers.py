"""
API endpoints for the calling job seeker's profile.

Handles profile creation, partial updates (including the skill set), and
profile photo / resume uploads through the storage backend.
"""

import logging
import os
from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.database import get_db
from app.core.deps import Principal, get_job_seeker
from app.core.errors import ConflictError, NotFoundError, ValidationError
from app.core.storage import StorageBackend, StorageError, get_storage
from app.crud import job_seeker as job_seeker_crud
from app.models.job_seeker import JobSeeker
from app.schemas.job_seeker import JobSeekerCreate, JobSeekerResponse, JobSeekerUpdate
from app.schemas.response import ApiResponse, success
from app.services.skill_service import skill_service

router = APIRouter(prefix="/jobseekers", tags=["Job Seekers"])
logger = logging.getLogger(__name__)

PHOTO_CONTENT_TYPES = {"image/jpeg", "image/png", "image/webp"}
PHOTO_EXTENSIONS = {".jpg", ".jpeg", ".png", ".webp"}

RESUME_CONTENT_TYPES = {
    "application/pdf",
    "application/msword",  # .doc
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document"  # .docx
}
RESUME_EXTENSIONS = {".pdf", ".doc", ".docx"}


def _get_own_profile(db: Session, principal: Principal) -> JobSeeker:
    job_seeker = job_seeker_crud.get_by_user_id(db, principal.subject)
    if not job_seeker:
        raise NotFoundError("Job seeker profile not found")
    return job_seeker


def _validate_upload(file: UploadFile, content_types: set, extensions: set, label: str) -> None:
    """
    Reject files with the wrong type or over MAX_UPLOAD_SIZE_MB.

    The extension and the declared content type must both be acceptable.
    """
    file_ext = os.path.splitext(file.filename or "")[1].lower()
    if file.content_type not in content_types or file_ext not in extensions:
        raise ValidationError(
            f"Unsupported {label} file type",
            detail=[{"field": "file", "message": f"Allowed extensions: {', '.join(sorted(extensions))}", "type": "file_type"}]
        )

    file.file.seek(0, os.SEEK_END)
    size = file.file.tell()
    file.file.seek(0)

    if size == 0:
        raise ValidationError(
            f"Empty {label} file",
            detail=[{"field": "file", "message": "File is empty", "type": "file_size"}]
        )
    if size > settings.MAX_UPLOAD_SIZE_MB * 1024 * 1024:
        raise ValidationError(
            f"{label.capitalize()} file too large",
            detail=[{"field": "file", "message": f"Maximum size is {settings.MAX_UPLOAD_SIZE_MB} MB", "type": "file_size"}]
        )


def _replace_file(
    db: Session,
    storage: StorageBackend,
    job_seeker: JobSeeker,
    file: UploadFile,
    field: str,
    folder: str
) -> JobSeeker:
    """Upload the new file, point the profile at it, then drop the old one."""
    previous = getattr(job_seeker, field)

    try:
        path = storage.upload_file(file.file, file.filename, folder)
    except StorageError:
        logger.error(f"Failed to store {folder} for job seeker {job_seeker.id}", exc_info=True)
        raise

    job_seeker = job_seeker_crud.set_file_path(db, job_seeker, field, path)
    logger.info(f"Stored {folder} for job seeker {job_seeker.id}: {path}")

    if previous and not storage.delete_file(previous):
        logger.warning(f"Could not delete previous {folder} file {previous}")

    return job_seeker


@router.post("/", status_code=201, response_model=ApiResponse[JobSeekerResponse])
def create_profile(
    request: JobSeekerCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_job_seeker)
):
    """Create the caller's profile. Each job seeker has at most one."""
    if job_seeker_crud.get_by_user_id(db, principal.subject):
        raise ConflictError("Job seeker profile already exists")

    skills = skill_service.get_many(db, request.skill_ids)
    job_seeker = job_seeker_crud.create(db, principal.subject, request, skills)
    logger.info(f"Created job seeker profile {job_seeker.id} for {principal.subject}")

    return success(JobSeekerResponse.from_model(job_seeker), message="Profile created", status=201)


@router.get("/me", response_model=ApiResponse[JobSeekerResponse])
def get_profile(
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_job_seeker)
):
    """Return the caller's profile."""
    job_seeker = _get_own_profile(db, principal)
    return success(JobSeekerResponse.from_model(job_seeker), message="Profile retrieved")


@router.put("/me", response_model=ApiResponse[JobSeekerResponse])
def update_profile(
    request: JobSeekerUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_job_seeker)
):
    """
    Partially update the caller's profile.

    `skill_ids`, when sent, replaces the whole skill set.
    """
    job_seeker = _get_own_profile(db, principal)

    skills = None
    if request.skill_ids is not None:
        skills = skill_service.get_many(db, request.skill_ids)

    job_seeker = job_seeker_crud.update(db, job_seeker, request, skills)
    return success(JobSeekerResponse.from_model(job_seeker), message="Profile updated")


@router.post("/me/photo", response_model=ApiResponse[JobSeekerResponse])
def upload_photo(
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    storage: StorageBackend = Depends(get_storage),
    principal: Principal = Depends(get_job_seeker)
):
    """Upload or replace the caller's profile photo (JPEG, PNG or WebP)."""
    job_seeker = _get_own_profile(db, principal)
    _validate_upload(file, PHOTO_CONTENT_TYPES, PHOTO_EXTENSIONS, "photo")

    job_seeker = _replace_file(db, storage, job_seeker, file, "photo_path", "photos")
    return success(JobSeekerResponse.from_model(job_seeker), message="Photo uploaded")


@router.post("/me/resume", response_model=ApiResponse[JobSeekerResponse])
def upload_resume(
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    storage: StorageBackend = Depends(get_storage),
    principal: Principal = Depends(get_job_seeker)
):
    """Upload or replace the caller's resume (PDF, DOC or DOCX)."""
    job_seeker = _get_own_profile(db, principal)
    _validate_upload(file, RESUME_CONTENT_TYPES, RESUME_EXTENSIONS, "resume")

    job_seeker = _replace_file(db, storage, job_seeker, file, "resume_path", "resumes")
    return success(JobSeekerResponse.from_model(job_seeker), message="Resume uploaded")


@router.delete("/me", response_model=ApiResponse[None])
def delete_profile(
    db: Session = Depends(get_db),
    storage: StorageBackend = Depends(get_storage),
    principal: Principal = Depends(get_job_seeker)
):
    """Delete the caller's profile and its stored files."""
    job_seeker = _get_own_profile(db, principal)
    files = [p for p in (job_seeker.photo_path, job_seeker.resume_path) if p]

    job_seeker_crud.delete(db, job_seeker)
    for path in files:
        storage.delete_file(path)

    logger.info(f"Deleted job seeker profile for {principal.subject}")
    return success(None, message="Profile deleted")
