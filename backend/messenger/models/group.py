# backend/messenger/models/group.py
from sqlalchemy import Column, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from backend.messenger.database.session import Base
from backend.messenger.models.user import new_id


class ChatGroup(Base):
    __tablename__ = "chat_group"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(255), unique=True, index=True, nullable=False)

    memberships = relationship(
        "ChatUserGroup",
        back_populates="group",
        cascade="all, delete-orphan",
    )


class ChatUserGroup(Base):
    """
    Membership of a user in a group. Only search visibility reads it.
    """
    __tablename__ = "chat_user_groups"
    __table_args__ = (UniqueConstraint("user_id", "group_id"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(
        String(36),
        ForeignKey("chat_user.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    group_id = Column(
        String(36),
        ForeignKey("chat_group.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    user = relationship("ChatUser", back_populates="memberships")
    group = relationship("ChatGroup", back_populates="memberships")
