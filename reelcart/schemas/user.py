from pydantic import BaseModel, EmailStr, validator
from typing import Optional
from datetime import date, datetime

from ..models.user import UserRole


class UserBase(BaseModel):
    name: str
    email: EmailStr
    phone_number: Optional[str] = None
    date_born: Optional[date] = None
    role: UserRole = UserRole.USER


class UserCreate(UserBase):
    password: str
    last_session: Optional[datetime] = None

    @validator('password')
    def password_must_not_be_empty(cls, v):
        if not v:
            raise ValueError('Password cannot be empty')
        return v


class UserUpdate(BaseModel):
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    phone_number: Optional[str] = None
    date_born: Optional[date] = None
    password: Optional[str] = None
    role: Optional[UserRole] = None


class User(UserBase):
    id: int
    last_session: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class LoginRequest(BaseModel):
    email: str
    password: str
    type: UserRole = UserRole.USER


class LoginResponse(BaseModel):
    user: User
    token: str
    token_type: str = "bearer"
    expires_in: int
