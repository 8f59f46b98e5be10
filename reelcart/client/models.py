"""
Wire models for the catalog client.

They mirror the JSON the API sends; unknown keys are ignored so the client
keeps working when the server grows new fields.
"""
from pydantic import BaseModel, ConfigDict
from typing import List, Optional
from datetime import date, datetime
from enum import Enum


class Role(str, Enum):
    USER = "USER"
    ADMIN = "ADMIN"


class WireModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


class CategoryRef(WireModel):
    id: int
    name: str
    description: str = ""


class HostRef(WireModel):
    id: int
    name: str
    bio: str = ""


class Movie(WireModel):
    id: int
    title: str
    description: str = ""
    video_url: str
    thumbnail_url: str = ""
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
    category: Optional[CategoryRef] = None
    hosts: List[HostRef] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def host_ids(self) -> List[int]:
        return [h.id for h in self.hosts]

    @property
    def is_adaptive(self) -> bool:
        """HLS manifests need the adaptive player, anything else plays natively"""
        return self.video_url.split("?")[0].lower().endswith(".m3u8")


class Category(CategoryRef):
    movies: List[Movie] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class Host(HostRef):
    movies: List[Movie] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class User(WireModel):
    id: int
    name: str
    email: str
    phone_number: Optional[str] = None
    date_born: Optional[date] = None
    role: Role = Role.USER
    last_session: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


class LoginResult(WireModel):
    user: User
    token: str
    token_type: str = "bearer"
    expires_in: int = 0
