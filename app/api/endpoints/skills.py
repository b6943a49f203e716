import logging
from typing import List, Optional
from uuid import UUID
from fastapi import APIRouter, Depends, Query
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.database import get_db
from app.core.deps import Principal, get_elevated_principal
from app.core.errors import ConflictError, NotFoundError
from app.schemas.response import ApiResponse, success
from app.schemas.skill import SkillCreate, SkillResponse, SkillUpdate
from app.services.skill_service import skill_service

router = APIRouter(prefix="/skills", tags=["Skills"])
logger = logging.getLogger(__name__)


def _ensure_unique_name(db: Session, name: str, exclude_id: Optional[UUID] = None) -> None:
    existing = skill_service.get_by_name(db, name, exclude_id=exclude_id)
    if existing:
        raise ConflictError(f"Skill '{existing.name}' already exists")


def _duplicate_name(db: Session, name: str) -> ConflictError:
    # A concurrent writer took the name between the check and the commit
    db.rollback()
    logger.warning(f"Skill name collision on commit: {name}")
    return ConflictError(f"Skill '{name}' already exists")


@router.get("/", response_model=ApiResponse[List[SkillResponse]])
def list_skills(
    skip: int = Query(0, ge=0),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1),
    db: Session = Depends(get_db)
):
    """
    List skills ordered by category, then name.

    Public endpoint, used for skill pickers and autocomplete.
    """
    limit = min(limit, settings.MAX_PAGE_SIZE)

    skills = skill_service.get_multi(db, skip=skip, limit=limit)
    return success([SkillResponse.model_validate(s) for s in skills], message="Skills retrieved")


@router.post("/", status_code=201, response_model=ApiResponse[SkillResponse])
def create_skill(
    request: SkillCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_elevated_principal)
):
    """
    Create a skill.

    Names are unique case-insensitively: "go" is rejected when "Go" exists.
    """
    _ensure_unique_name(db, request.name)

    try:
        skill = skill_service.create(db, obj_in=request)
    except IntegrityError:
        raise _duplicate_name(db, request.name)
    logger.info(f"Created skill {skill.id}: {skill.name} (by {principal.subject})")

    return success(SkillResponse.model_validate(skill), message="Skill created", status=201)


@router.put("/{skill_id}", response_model=ApiResponse[SkillResponse])
def update_skill(
    skill_id: UUID,
    request: SkillUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_elevated_principal)
):
    """
    Partially update a skill. Fields missing from the body are left unchanged.
    """
    skill = skill_service.get(db, skill_id)
    if not skill:
        raise NotFoundError("Skill not found")

    if request.name is not None:
        _ensure_unique_name(db, request.name, exclude_id=skill_id)

    try:
        skill = skill_service.update(db, db_obj=skill, obj_in=request)
    except IntegrityError:
        raise _duplicate_name(db, request.name)
    logger.info(f"Updated skill {skill_id} (by {principal.subject})")

    return success(SkillResponse.model_validate(skill), message="Skill updated")


@router.delete("/{skill_id}", response_model=ApiResponse[None])
def delete_skill(
    skill_id: UUID,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_elevated_principal)
):
    """
    Delete a skill.

    Refused with 400 while any job seeker or job references it.
    """
    removed = skill_service.remove(db, id=skill_id)
    if removed is None:
        raise NotFoundError("Skill not found")

    logger.info(f"Deleted skill {skill_id} (by {principal.subject})")
    return success(None, message="Skill deleted")
