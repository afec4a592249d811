# backend/messenger/users/schemas.py
from datetime import date
from typing import Optional

from pydantic import BaseModel, Field, field_serializer


class UserSummary(BaseModel):
    id: str
    username: str

    class Config:
        from_attributes = True


class UserProfile(BaseModel):
    id: str
    username: str
    birthdate: Optional[date] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    avatar_url: Optional[str] = Field(default=None, alias="avatarUrl")

    class Config:
        from_attributes = True
        populate_by_name = True

    @field_serializer("birthdate")
    def serialize_birthdate(self, value: Optional[date]):
        return value.strftime("%d-%m-%Y") if value else None


class UserCount(BaseModel):
    count: int


class CurrentUserId(BaseModel):
    id: str
