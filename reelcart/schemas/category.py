from pydantic import BaseModel, validator
from typing import List, Optional
from datetime import datetime


def _required_text(value: str, field: str) -> str:
    if value is None or not str(value).strip():
        raise ValueError(f"{field} is required")
    return str(value).strip()


class CategoryCreate(BaseModel):
    name: str
    description: str

    @validator('name')
    def name_must_not_be_empty(cls, v):
        return _required_text(v, "Name")

    @validator('description')
    def description_must_not_be_empty(cls, v):
        return _required_text(v, "Description")


class CategoryUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None

    @validator('name')
    def name_must_not_be_empty(cls, v):
        return _required_text(v, "Name") if v is not None else v

    @validator('description')
    def description_must_not_be_empty(cls, v):
        return _required_text(v, "Description") if v is not None else v


class CategorySummary(BaseModel):
    id: int
    name: str
    description: str

    class Config:
        from_attributes = True


class Category(CategorySummary):
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    movies: List["MovieSummary"] = []


from .movie import MovieSummary  # noqa: E402

Category.model_rebuild()
