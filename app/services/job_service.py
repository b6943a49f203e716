"""
Job posting service built on the generic CRUD base.
"""

from typing import Any, Dict, List, Union

from sqlalchemy.orm import Session

from app.crud.base import CRUDBase
from app.models.job import Job
from app.schemas.job import JobCreate, JobUpdate
from app.services.skill_service import skill_service


class JobService(CRUDBase[Job, JobCreate, JobUpdate]):

    def get_multi(self, db: Session, *, skip: int = 0, limit: int = 100) -> List[Job]:
        """List jobs, newest first."""
        return (
            db.query(Job)
            .order_by(Job.created_at.desc(), Job.id)
            .offset(skip)
            .limit(limit)
            .all()
        )

    def get_multi_for_employer(self, db: Session, employer_id: str, *, skip: int = 0, limit: int = 100) -> List[Job]:
        """List the jobs owned by one employer, newest first."""
        return (
            db.query(Job)
            .filter(Job.employer_id == employer_id)
            .order_by(Job.created_at.desc(), Job.id)
            .offset(skip)
            .limit(limit)
            .all()
        )

    def create_for_employer(self, db: Session, *, obj_in: JobCreate, employer_id: str) -> Job:
        """
        Create a job owned by employer_id.

        Raises:
            NotFoundError: If a skill id does not exist
        """
        data = obj_in.model_dump(exclude={"skill_ids"})
        data["employer_id"] = employer_id
        data["skills"] = skill_service.get_many(db, obj_in.skill_ids)
        return self.create(db, obj_in=data)

    def update(self, db: Session, *, db_obj: Job, obj_in: Union[JobUpdate, Dict[str, Any]]) -> Job:
        """
        Partial update; `skill_ids`, when present, replaces the skill set.

        Raises:
            NotFoundError: If a skill id does not exist
        """
        if isinstance(obj_in, dict):
            update_data = dict(obj_in)
        else:
            update_data = obj_in.model_dump(exclude_unset=True)

        if "skill_ids" in update_data:
            update_data["skills"] = skill_service.get_many(db, update_data.pop("skill_ids") or [])

        return super().update(db, db_obj=db_obj, obj_in=update_data)


job_service = JobService(Job)
