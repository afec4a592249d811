# backend/messenger/auth/schemas.py
from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class UserCreate(BaseModel):
    username: Optional[str] = None
    password: Optional[str] = None
    birthdate: Optional[date] = None  # dd-MM-yyyy on the wire
    email: Optional[str] = None
    phone: Optional[str] = None
    avatar_url: Optional[str] = Field(default=None, alias="avatarUrl")

    class Config:
        populate_by_name = True

    @field_validator("birthdate", mode="before")
    @classmethod
    def parse_birthdate(cls, value):
        if isinstance(value, str) and value:
            return datetime.strptime(value, "%d-%m-%Y").date()
        return value or None


class UserLogin(BaseModel):
    username: Optional[str] = None
    password: Optional[str] = None


class UserRegistered(BaseModel):
    message: str = "User registered successfully"
    id: str
    username: str
    email: Optional[str] = None


class Token(BaseModel):
    token: str
