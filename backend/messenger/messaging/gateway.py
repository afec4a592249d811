# backend/messenger/messaging/gateway.py
"""
Persistence gateway over the SQLAlchemy session.

The messaging core only talks to storage through this interface. Every write
inserts exactly one row and commits it on its own; SQLAlchemy errors are left
to propagate so the calling service can report them as storage failures.
"""
from datetime import datetime
from typing import List, Optional, Protocol, Type, TypeVar

from sqlalchemy import and_, func, or_, select
from sqlalchemy.orm import Session

from backend.messenger.models.group import ChatGroup, ChatUserGroup
from backend.messenger.models.message import ChatType, Message
from backend.messenger.models.user import ChatUser

M = TypeVar("M")


class PersistenceGateway(Protocol):
    def save(self, entity: M) -> M: ...

    def find_by_id(self, model: Type[M], entity_id: str) -> Optional[M]: ...

    def find_all(self, model: Type[M]) -> List[M]: ...

    def count(self, model: Type[M]) -> int: ...

    def find_user_by_username(self, username: str) -> Optional[ChatUser]: ...

    def find_conversation(
        self, user_id: str, other_user_id: str, since: datetime
    ) -> List[Message]: ...

    def find_history(self, user_id: str, other_user_id: str) -> List[Message]: ...

    def find_group_messages(self, group_id: str) -> List[Message]: ...

    def search(
        self,
        user_id: str,
        keyword: Optional[str],
        start: Optional[datetime],
        end: Optional[datetime],
    ) -> List[Message]: ...


def _between(user_id: str, other_user_id: str):
    return and_(
        Message.chat_type == ChatType.PRIVATE.value,
        or_(
            and_(Message.sender_id == user_id, Message.recipient_id == other_user_id),
            and_(Message.sender_id == other_user_id, Message.recipient_id == user_id),
        ),
    )


class SqlAlchemyGateway:
    def __init__(self, db: Session):
        self.db = db

    # --- generic ---

    def save(self, entity: M) -> M:
        self.db.add(entity)
        self.db.commit()
        self.db.refresh(entity)
        return entity

    def find_by_id(self, model: Type[M], entity_id: str) -> Optional[M]:
        return self.db.get(model, entity_id)

    def find_all(self, model: Type[M]) -> List[M]:
        return self.db.query(model).all()

    def count(self, model: Type[M]) -> int:
        return self.db.query(func.count(model.id)).scalar() or 0

    def rollback(self) -> None:
        self.db.rollback()

    # --- lookups ---

    def find_user_by_username(self, username: str) -> Optional[ChatUser]:
        return self.db.query(ChatUser).filter(ChatUser.username == username).first()

    def find_user_by_email(self, email: str) -> Optional[ChatUser]:
        return self.db.query(ChatUser).filter(ChatUser.email == email).first()

    def find_group_by_name(self, name: str) -> Optional[ChatGroup]:
        return self.db.query(ChatGroup).filter(ChatGroup.name == name).first()

    def create_group(self, group: ChatGroup, member_ids: List[str]) -> ChatGroup:
        """Group row and its membership rows are committed together."""
        self.db.add(group)
        self.db.flush()
        for user_id in member_ids:
            self.db.add(ChatUserGroup(user_id=user_id, group_id=group.id))
        self.db.commit()
        self.db.refresh(group)
        return group

    # --- message reads, all ascending by timestamp ---

    def _ordered(self, query):
        return query.order_by(Message.timestamp.asc(), Message.id.asc())

    def find_conversation(
        self, user_id: str, other_user_id: str, since: datetime
    ) -> List[Message]:
        query = self.db.query(Message).filter(
            _between(user_id, other_user_id),
            Message.timestamp > since,
        )
        return self._ordered(query).all()

    def find_history(self, user_id: str, other_user_id: str) -> List[Message]:
        query = self.db.query(Message).filter(_between(user_id, other_user_id))
        return self._ordered(query).all()

    def find_group_messages(self, group_id: str) -> List[Message]:
        query = self.db.query(Message).filter(
            Message.group_id == group_id,
            Message.chat_type == ChatType.GROUP.value,
        )
        return self._ordered(query).all()

    def search(
        self,
        user_id: str,
        keyword: Optional[str],
        start: Optional[datetime],
        end: Optional[datetime],
    ) -> List[Message]:
        member_of = select(ChatUserGroup.group_id).where(
            ChatUserGroup.user_id == user_id
        )
        query = self.db.query(Message).filter(
            or_(
                Message.sender_id == user_id,
                Message.recipient_id == user_id,
                Message.group_id.in_(member_of),
            )
        )
        if keyword:
            # LIKE narrows the rows; it ignores case on some engines
            query = query.filter(Message.content.contains(keyword, autoescape=True))
        if start is not None:
            query = query.filter(Message.timestamp >= start)
        if end is not None:
            query = query.filter(Message.timestamp <= end)

        messages = self._ordered(query).all()
        if keyword:
            messages = [m for m in messages if keyword in m.content]
        return messages
