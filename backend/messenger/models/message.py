# backend/messenger/models/message.py
import enum

from sqlalchemy import Column, DateTime, ForeignKey, String, Text

from backend.messenger.database.session import Base


class ChatType(str, enum.Enum):
    PRIVATE = "PRIVATE"
    GROUP = "GROUP"


class Message(Base):
    """
    One chat message. Rows are only ever inserted, never updated.

    Exactly one of recipient_id / group_id is set, depending on chat_type.
    """
    __tablename__ = "chat_message"

    id = Column(String(36), primary_key=True)
    content = Column(Text, nullable=False)
    sender_id = Column(
        String(36),
        ForeignKey("chat_user.id"),
        nullable=False,
        index=True,
    )
    recipient_id = Column(
        String(36),
        ForeignKey("chat_user.id"),
        nullable=True,
        index=True,
    )
    group_id = Column(
        String(36),
        ForeignKey("chat_group.id"),
        nullable=True,
        index=True,
    )
    chat_type = Column(String(16), nullable=False)
    # naive local wall-clock time, assigned by the server
    timestamp = Column(DateTime, nullable=False, index=True)
