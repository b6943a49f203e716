"""
Pydantic schemas for job seeker profiles.
"""

from pydantic import BaseModel, ConfigDict, Field, UUID4, field_validator
from typing import List, Optional
from datetime import datetime

from app.schemas.skill import SkillResponse


class JobSeekerCreate(BaseModel):
    """Request schema for creating the caller's profile."""
    full_name: str = Field(..., min_length=1, max_length=200)
    headline: Optional[str] = Field(None, max_length=200)
    skill_ids: List[UUID4] = Field(default_factory=list)


class JobSeekerUpdate(BaseModel):
    """
    Partial profile update.

    `skill_ids`, when present, replaces the whole skill set.
    """
    full_name: Optional[str] = Field(None, min_length=1, max_length=200)
    headline: Optional[str] = Field(None, max_length=200)
    skill_ids: Optional[List[UUID4]] = None

    @field_validator("full_name")
    @classmethod
    def full_name_not_null(cls, v: Optional[str]) -> str:
        if v is None:
            raise ValueError("Full name cannot be null")
        return v


class JobSeekerResponse(BaseModel):
    """Profile response."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID4
    user_id: str
    full_name: str
    headline: Optional[str] = None
    has_photo: bool = False
    has_resume: bool = False
    skills: List[SkillResponse] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_model(cls, job_seeker) -> "JobSeekerResponse":
        response = cls.model_validate(job_seeker)
        response.has_photo = job_seeker.photo_path is not None
        response.has_resume = job_seeker.resume_path is not None
        return response
