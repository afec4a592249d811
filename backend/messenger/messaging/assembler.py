# backend/messenger/messaging/assembler.py
"""
Builds the server-trusted Message from a client draft.

Only construction happens here. Saving and fanout are the caller's job, so
a rejected draft never touches storage or the live channels.
"""
from datetime import datetime
from typing import Callable, Optional
import logging
import uuid

from backend.messenger.messaging.gateway import PersistenceGateway
from backend.messenger.messaging.identity import IdentityVerifier
from backend.messenger.messaging.schemas import MessageDraft
from backend.messenger.models.group import ChatGroup
from backend.messenger.models.message import ChatType, Message
from backend.messenger.models.user import ChatUser
from backend.messenger.utils.errors import (
    Result,
    authorization_error,
    not_found,
    validation_error,
)

logger = logging.getLogger(__name__)

# draft attribute -> name reported back to the client
_TARGET_FIELD = {
    ChatType.PRIVATE: ("recipient_id", "recipientId"),
    ChatType.GROUP: ("group_id", "groupId"),
}


class MessageAssembler:
    def __init__(
        self,
        gateway: PersistenceGateway,
        identity: IdentityVerifier,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.gateway = gateway
        self.identity = identity
        self.clock = clock

    def assemble(
        self,
        draft: MessageDraft,
        principal: Optional[str],
        kind: ChatType,
    ) -> Result[Message]:
        return (
            self.identity.resolve(principal)
            .then(lambda sender: self._check_required(draft, sender, kind))
            .then(lambda sender: self._check_sender(draft, sender))
            .then(lambda sender: self._build(draft, sender, kind))
        )

    def _check_required(
        self, draft: MessageDraft, sender: ChatUser, kind: ChatType
    ) -> Result[ChatUser]:
        target_attr, target_name = _TARGET_FIELD[kind]
        required = (
            ("content", "content"),
            ("sender_id", "senderId"),
            (target_attr, target_name),
        )
        for attr, name in required:
            if not getattr(draft, attr):
                return validation_error(f"Invalid message JSON: missing {name}")
        return Result.success(sender)

    def _check_sender(self, draft: MessageDraft, sender: ChatUser) -> Result[ChatUser]:
        if draft.sender_id != sender.id:
            logger.error(
                f"[Assembler] Sender ID mismatch: expected {sender.id}, got {draft.sender_id}"
            )
            return authorization_error("Sender ID does not match authenticated user")
        return Result.success(sender)

    def _build(self, draft: MessageDraft, sender: ChatUser, kind: ChatType) -> Result[Message]:
        message = Message(
            id=str(uuid.uuid4()),
            content=draft.content,
            sender_id=sender.id,
            chat_type=kind.value,
            # client-supplied timestamps are never used
            timestamp=self.clock(),
        )
        if kind is ChatType.PRIVATE:
            recipient = self.gateway.find_by_id(ChatUser, draft.recipient_id)
            if recipient is None:
                return not_found(f"Recipient not found: {draft.recipient_id}")
            message.recipient_id = recipient.id
        else:
            group = self.gateway.find_by_id(ChatGroup, draft.group_id)
            if group is None:
                return not_found(f"Group not found: {draft.group_id}")
            message.group_id = group.id
        return Result.success(message)
