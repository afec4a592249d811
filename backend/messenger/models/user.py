# backend/messenger/models/user.py
import uuid

from sqlalchemy import Column, Date, DateTime, String, func
from sqlalchemy.orm import relationship

from backend.messenger.database.session import Base


def new_id() -> str:
    return str(uuid.uuid4())


class ChatUser(Base):
    __tablename__ = "chat_user"

    id = Column(String(36), primary_key=True, default=new_id)
    username = Column(String(50), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    # optional profile fields
    birthdate = Column(Date, nullable=True)
    email = Column(String(255), unique=True, nullable=True)
    phone = Column(String(32), nullable=True)
    avatar_url = Column(String(512), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    memberships = relationship(
        "ChatUserGroup",
        back_populates="user",
        cascade="all, delete-orphan",
    )
