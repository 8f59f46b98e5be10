from pydantic import BaseModel, validator
from typing import List, Optional
from datetime import datetime


class HostCreate(BaseModel):
    name: str
    bio: Optional[str] = None

    @validator('name', pre=True)
    def name_must_not_be_empty(cls, v):
        if not isinstance(v, str) or not v.strip():
            raise ValueError('Name is required and must be a non-empty string')
        return v.strip()

    @validator('bio')
    def strip_bio(cls, v):
        return v.strip() if v else ""


class HostUpdate(HostCreate):
    """Name is mandatory on every update; a missing bio keeps the stored one"""

    @validator('bio')
    def strip_bio(cls, v):
        return v.strip() if v else None


class HostSummary(BaseModel):
    id: int
    name: str
    bio: str = ""

    class Config:
        from_attributes = True


class Host(HostSummary):
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    movies: List["MovieSummary"] = []


from .movie import MovieSummary  # noqa: E402

Host.model_rebuild()
