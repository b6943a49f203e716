"""
Skill service: catalog ordering and referential-integrity checks on top of the
generic CRUD base.
"""

import logging
from typing import Any, List, Optional, Sequence
from uuid import UUID

from sqlalchemy import exists, func, select
from sqlalchemy.orm import Session

from app.core.errors import ConflictError, NotFoundError
from app.crud.base import CRUDBase
from app.models.associations import job_skills, jobseeker_skills
from app.models.skill import Skill
from app.schemas.skill import SkillCreate, SkillUpdate

logger = logging.getLogger(__name__)


class SkillService(CRUDBase[Skill, SkillCreate, SkillUpdate]):

    def get_multi(self, db: Session, *, skip: int = 0, limit: int = 100) -> List[Skill]:
        """List skills ordered by category, then name."""
        return (
            db.query(Skill)
            .order_by(Skill.category, Skill.name)
            .offset(skip)
            .limit(limit)
            .all()
        )

    def get_by_name(self, db: Session, name: str, exclude_id: Optional[UUID] = None) -> Optional[Skill]:
        """
        Find a skill whose name matches case-insensitively.

        Args:
            exclude_id: Skip this record (the skill being updated)
        """
        query = db.query(Skill).filter(func.lower(Skill.name) == name.strip().lower())
        if exclude_id is not None:
            query = query.filter(Skill.id != exclude_id)
        return query.first()

    def get_many(self, db: Session, ids: Sequence[UUID]) -> List[Skill]:
        """
        Resolve skill ids to rows, preserving request order and dropping repeats.

        Raises:
            NotFoundError: If any id does not exist
        """
        unique_ids = list(dict.fromkeys(ids))
        if not unique_ids:
            return []

        found = {s.id: s for s in db.query(Skill).filter(Skill.id.in_(unique_ids)).all()}
        missing = [str(i) for i in unique_ids if i not in found]
        if missing:
            raise NotFoundError("Skill not found", detail={"skill_ids": missing})

        return [found[i] for i in unique_ids]

    def is_referenced(self, db: Session, id: UUID) -> bool:
        """True when any job seeker or job links to the skill."""
        stmt = select(
            exists().where(jobseeker_skills.c.skill_id == id)
            | exists().where(job_skills.c.skill_id == id)
        )
        return bool(db.execute(stmt).scalar())

    def remove(self, db: Session, *, id: Any) -> Optional[Skill]:
        """
        Delete a skill unless something references it.

        Returns None when absent.

        Raises:
            ConflictError: If the skill is linked to a job seeker or job
        """
        skill = self.get(db, id)
        if skill is None:
            return None

        if self.is_referenced(db, id):
            logger.info(f"Refusing to delete referenced skill {id}")
            raise ConflictError("Skill is referenced by job seekers or jobs and cannot be deleted")

        return super().remove(db, id=id)


skill_service = SkillService(Skill)
