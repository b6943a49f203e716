import uuid
from sqlalchemy import Column, String, Text, DateTime, Uuid, func
from sqlalchemy.orm import relationship
from app.core.database import Base
from app.models.associations import job_skills


class Job(Base):
    """
    Job posting created by an employer.

    employer_id is the identity provider subject of the employer who owns it.
    """
    __tablename__ = "jobs"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
    employer_id = Column(String, nullable=False, index=True)
    title = Column(String(200), nullable=False, index=True)
    description = Column(Text, nullable=False)
    location = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    skills = relationship("Skill", secondary=job_skills, back_populates="jobs", order_by="Skill.name")

    def __repr__(self):
        return f"<Job(id={self.id}, title='{self.title}', employer_id='{self.employer_id}')>"
