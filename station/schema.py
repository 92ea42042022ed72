from __future__ import annotations
from typing import Optional, List, Iterable
from pydantic import BaseModel, ConfigDict, Field, field_validator
from .models import StationStatus


def normalize_skills(values: Optional[Iterable[str]]) -> List[str]:
    """Strip, drop blanks, de-duplicate and sort a skill list before it is stored."""
    if values is None:
        return []
    if isinstance(values, str):
        raise ValueError("skills must be a list of strings")
    out = set()
    for v in values:
        if not isinstance(v, str):
            raise ValueError("skills must be a list of strings")
        v = v.strip()
        if v:
            out.add(v)
    return sorted(out)


class StationSchema(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    category: str
    capacity: int
    location: Optional[str] = None
    status: StationStatus
    required_skills: List[str] = []
    model_config = ConfigDict(from_attributes=True)


class StationCreate(BaseModel):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    category: str = Field(..., min_length=1)
    capacity: int = Field(1, ge=1)
    location: Optional[str] = None
    status: StationStatus = StationStatus.ACTIVE
    required_skills: List[str] = []
    model_config = ConfigDict(extra="forbid")

    @field_validator("required_skills", mode="before")
    @classmethod
    def clean_skills(cls, v):
        return normalize_skills(v)


class StationUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    category: Optional[str] = Field(None, min_length=1)
    capacity: Optional[int] = Field(None, ge=1)
    location: Optional[str] = None
    status: Optional[StationStatus] = None
    required_skills: Optional[List[str]] = None

    @field_validator("required_skills", mode="before")
    @classmethod
    def clean_skills(cls, v):
        return None if v is None else normalize_skills(v)
