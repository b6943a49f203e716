from pydantic import BaseModel, ConfigDict, Field, UUID4, field_validator
from typing import Optional


class SkillCreate(BaseModel):
    """Schema for creating a skill"""
    name: str = Field(..., min_length=1, max_length=100)
    category: Optional[str] = Field(None, max_length=100)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name cannot be blank")
        return v


class SkillUpdate(BaseModel):
    """
    Schema for partially updating a skill.

    Only fields present in the request body are applied. `category` may be
    explicitly set to null to clear it; `name` may not.
    """
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    category: Optional[str] = Field(None, max_length=100)

    @field_validator("name")
    @classmethod
    def name_not_null(cls, v: Optional[str]) -> str:
        if v is None or not v.strip():
            raise ValueError("Name cannot be blank")
        return v.strip()


class SkillResponse(BaseModel):
    """Schema for skill response"""
    model_config = ConfigDict(from_attributes=True)

    id: UUID4
    name: str
    category: Optional[str] = None
