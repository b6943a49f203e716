from pydantic import BaseModel, ConfigDict, Field, UUID4, field_validator
from typing import List, Optional
from datetime import datetime

from app.schemas.skill import SkillResponse


class JobCreate(BaseModel):
    """Schema for creating a job posting"""
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=10)
    location: Optional[str] = None
    skill_ids: List[UUID4] = Field(default_factory=list)


class JobUpdate(BaseModel):
    """Schema for partially updating a job posting; unset fields are left unchanged"""
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, min_length=10)
    location: Optional[str] = None
    skill_ids: Optional[List[UUID4]] = None

    @field_validator("title", "description")
    @classmethod
    def required_fields_not_null(cls, v: Optional[str]) -> str:
        if v is None:
            raise ValueError("Field cannot be null")
        return v


class JobResponse(BaseModel):
    """Schema for job response"""
    model_config = ConfigDict(from_attributes=True)

    id: UUID4
    employer_id: str
    title: str
    description: str
    location: Optional[str] = None
    skills: List[SkillResponse] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
