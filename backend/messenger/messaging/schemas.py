# backend/messenger/messaging/schemas.py
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


# --- input ---

class MessageDraft(BaseModel):
    """
    Message as submitted by a client. Every field is optional here so the
    assembler can name whichever required one is missing. Anything else the
    client sends (id, chatType, timestamp) is ignored.
    """
    content: Optional[str] = None
    sender_id: Optional[str] = Field(default=None, alias="senderId")
    recipient_id: Optional[str] = Field(default=None, alias="recipientId")
    group_id: Optional[str] = Field(default=None, alias="groupId")

    class Config:
        populate_by_name = True


# --- output ---

class MessageOut(BaseModel):
    id: str
    content: str
    sender_id: str = Field(alias="senderId")
    recipient_id: Optional[str] = Field(default=None, alias="recipientId")
    group_id: Optional[str] = Field(default=None, alias="groupId")
    chat_type: str = Field(alias="chatType")
    timestamp: datetime

    class Config:
        from_attributes = True
        populate_by_name = True


class MessageSentResponse(BaseModel):
    message: str = "Message sent successfully"
    id: str


def to_payload(message) -> dict:
    """JSON-ready dict in the same shape the HTTP API returns."""
    return MessageOut.model_validate(message).model_dump(mode="json", by_alias=True)
