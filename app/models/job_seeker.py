"""
Job seeker profile model.

One profile per identity provider subject. Photo and resume paths point into
the configured storage backend (local path or s3:// URI).
"""

import uuid
from sqlalchemy import Column, String, DateTime, Uuid, func
from sqlalchemy.orm import relationship
from app.core.database import Base
from app.models.associations import jobseeker_skills


class JobSeeker(Base):
    __tablename__ = "jobseekers"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
    user_id = Column(String, unique=True, nullable=False, index=True)

    # Profile
    full_name = Column(String(200), nullable=False)
    headline = Column(String(200), nullable=True)

    # File Storage
    photo_path = Column(String, nullable=True)
    resume_path = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    skills = relationship("Skill", secondary=jobseeker_skills, back_populates="job_seekers", order_by="Skill.name")

    def __repr__(self):
        return f"<JobSeeker(id={self.id}, user_id='{self.user_id}')>"
