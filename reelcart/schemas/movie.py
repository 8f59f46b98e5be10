from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime


class MovieSummary(BaseModel):
    """Movie without nested relations, used inside category and host payloads"""
    id: int
    title: str
    description: str
    video_url: str
    thumbnail_url: str
    duration: Optional[str] = None
    release_year: Optional[int] = None
    rating: Optional[str] = None
    cast: Optional[str] = None
    director: Optional[str] = None
    show: Optional[str] = None
    products_reviewed: Optional[str] = None
    key_highlights: Optional[str] = None
    additional_context: Optional[str] = None
    category_id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class Movie(MovieSummary):
    """Canonical movie shape: scalar category plus a flat hosts array"""
    category: Optional["CategorySummary"] = None
    hosts: List["HostSummary"] = []


class MovieUpdate(BaseModel):
    """Scalar fields accepted by PUT /movie/{id}; None means leave untouched"""
    title: Optional[str] = None
    description: Optional[str] = None
    video_url: Optional[str] = None
    duration: Optional[str] = None
    release_year: Optional[int] = None
    rating: Optional[str] = None
    cast: Optional[str] = None
    director: Optional[str] = None
    show: Optional[str] = None
    products_reviewed: Optional[str] = None
    key_highlights: Optional[str] = None
    additional_context: Optional[str] = None
    category_id: Optional[int] = None


class MovieCreate(MovieUpdate):
    title: str
    description: str
    video_url: str
    category_id: int
    host_ids: List[int] = []


from .category import CategorySummary  # noqa: E402
from .host import HostSummary  # noqa: E402

Movie.model_rebuild()
