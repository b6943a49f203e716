import uuid
from sqlalchemy import Column, String, DateTime, Index, Uuid, func
from sqlalchemy.orm import relationship
from app.core.database import Base
from app.models.associations import job_skills, jobseeker_skills


class Skill(Base):
    """
    A skill in the shared catalog (e.g. "Python", category "Programming Language").

    Names are unique case-insensitively. The router checks first so it can
    exclude the record itself on update; the lower(name) index is the backstop
    for concurrent writers.
    """
    __tablename__ = "skills"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
    name = Column(String(100), nullable=False, index=True)
    category = Column(String(100), nullable=True, index=True)

    __table_args__ = (
        Index("uq_skills_name_lower", func.lower(name), unique=True),
    )

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships (no cascade: a referenced skill cannot be deleted)
    job_seekers = relationship("JobSeeker", secondary=jobseeker_skills, back_populates="skills")
    jobs = relationship("Job", secondary=job_skills, back_populates="skills")

    def __repr__(self):
        return f"<Skill(id={self.id}, name='{self.name}', category='{self.category}')>"
