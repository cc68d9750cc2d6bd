from pydantic import BaseModel, EmailStr, Field
from typing import Literal, Optional
from datetime import datetime

from jarimae.models.user import UserRole


class UserBase(BaseModel):
    email: EmailStr
    name: str = Field(min_length=2, max_length=100)
    phone: Optional[str] = None


class UserCreate(UserBase):
    password: str = Field(min_length=8, max_length=72)
    # Admins are provisioned out of band
    role: Literal["CUSTOMER", "OWNER"] = "CUSTOMER"


class UserLogin(BaseModel):
    email: EmailStr
    password: str


class UserResponse(UserBase):
    id: int
    role: UserRole
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class UserProfileUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    phone: Optional[str] = Field(None, pattern=r"^010-\d{4}-\d{4}$")


class UserStats(BaseModel):
    total_reservations: int
    completed_reservations: int
    unread_notifications: int


class UserProfileResponse(UserResponse):
    stats: UserStats
