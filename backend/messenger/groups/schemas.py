# backend/messenger/groups/schemas.py
from typing import List, Optional

from pydantic import BaseModel, Field


class GroupCreate(BaseModel):
    name: Optional[str] = None
    member_ids: List[str] = Field(default_factory=list, alias="memberIds")

    class Config:
        populate_by_name = True


class GroupCreated(BaseModel):
    message: str = "Group created successfully"
    id: str
    name: str


class GroupSummary(BaseModel):
    id: str
    name: str

    class Config:
        from_attributes = True
