# backend/messenger/messaging/service.py
from datetime import datetime
from typing import Callable, List, Optional
import logging

from sqlalchemy.exc import SQLAlchemyError

from backend.messenger.messaging.assembler import MessageAssembler
from backend.messenger.messaging.fanout import FanoutPublisher
from backend.messenger.messaging.gateway import PersistenceGateway
from backend.messenger.messaging.identity import IdentityVerifier
from backend.messenger.messaging.query import ConversationQueryEngine
from backend.messenger.messaging.schemas import MessageDraft
from backend.messenger.models.message import ChatType, Message
from backend.messenger.utils.errors import Result, storage_error

logger = logging.getLogger(__name__)


class MessagingService:
    """
    Write path: identity -> assemble -> save -> fanout.
    Read path: identity -> query engine -> gateway.

    Collaborators are passed in explicitly; nothing is looked up globally.
    """

    def __init__(
        self,
        gateway: PersistenceGateway,
        identity: IdentityVerifier,
        publisher: FanoutPublisher,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.gateway = gateway
        self.identity = identity
        self.publisher = publisher
        self.assembler = MessageAssembler(gateway, identity, clock=clock)
        self.queries = ConversationQueryEngine(gateway, identity, clock=clock)

    def _guarded(self, operation: str, step: Callable[[], Result]) -> Result:
        try:
            return step()
        except SQLAlchemyError as e:
            logger.error(f"[Messages] Storage failure during {operation}: {e}", exc_info=True)
            rollback = getattr(self.gateway, "rollback", None)
            if rollback is not None:
                rollback()
            return storage_error(str(e))

    # --- write path ---

    def send(self, draft: MessageDraft, principal: Optional[str], kind: ChatType) -> Result[Message]:
        result = self._guarded(
            f"send {kind.value}",
            lambda: self.assembler.assemble(draft, principal, kind).then(
                lambda message: Result.success(self.gateway.save(message))
            ),
        )
        if not result.ok:
            return result

        message = result.value
        logger.info(f"[Messages] Saved {kind.value} message {message.id} from {message.sender_id}")
        # the row is committed; a fanout failure must not change the outcome
        try:
            self.publisher.publish(message)
        except Exception as e:
            logger.error(f"[Messages] Fanout failed for {message.id}: {e}", exc_info=True)
        return result

    def send_private(self, draft: MessageDraft, principal: Optional[str]) -> Result[Message]:
        return self.send(draft, principal, ChatType.PRIVATE)

    def send_group(self, draft: MessageDraft, principal: Optional[str]) -> Result[Message]:
        return self.send(draft, principal, ChatType.GROUP)

    # --- read path ---

    def conversation(
        self, principal: Optional[str], other_user_id: str, since: Optional[str] = None
    ) -> Result[List[Message]]:
        return self._guarded(
            "conversation",
            lambda: self.queries.conversation(principal, other_user_id, since),
        )

    def history(self, principal: Optional[str], other_user_id: str) -> Result[List[Message]]:
        return self._guarded(
            "history",
            lambda: self.queries.history(principal, other_user_id),
        )

    def group_feed(self, group_id: str) -> Result[List[Message]]:
        return self._guarded("group feed", lambda: self.queries.group_feed(group_id))

    def search(
        self,
        principal: Optional[str],
        keyword: Optional[str] = None,
        start: Optional[str] = None,
        end: Optional[str] = None,
    ) -> Result[List[Message]]:
        return self._guarded(
            "search",
            lambda: self.queries.search(principal, keyword, start, end),
        )
