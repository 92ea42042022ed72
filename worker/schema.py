from datetime import datetime
from typing import Optional, List
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from station.schema import normalize_skills
from .models import WorkerRole


class WorkerSchema(BaseModel):
    id: int
    name: str
    email: EmailStr
    role: WorkerRole
    skills: List[str] = []
    phone: Optional[str] = None
    is_active: bool
    created_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)


class WorkerCreate(BaseModel):
    name: str = Field(..., min_length=1)
    email: EmailStr
    role: WorkerRole = WorkerRole.WORKER
    skills: List[str] = []
    phone: Optional[str] = None
    is_active: bool = True
    model_config = ConfigDict(extra="forbid")

    @field_validator("skills", mode="before")
    @classmethod
    def clean_skills(cls, v):
        return normalize_skills(v)


class WorkerUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    role: Optional[WorkerRole] = None
    skills: Optional[List[str]] = None
    phone: Optional[str] = None
    is_active: Optional[bool] = None

    @field_validator("skills", mode="before")
    @classmethod
    def clean_skills(cls, v):
        return None if v is None else normalize_skills(v)
