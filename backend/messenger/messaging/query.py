# backend/messenger/messaging/query.py
"""
The four read shapes over stored messages.

Every shape returns messages ascending by timestamp. The requester is always
the authenticated principal resolved through the IdentityVerifier; the group
feed is the one shape with no requester at all.
"""
from datetime import datetime, timedelta
from typing import Callable, List, Optional
import logging
import re

from backend.messenger.config.settings import settings
from backend.messenger.messaging.gateway import PersistenceGateway
from backend.messenger.messaging.identity import IdentityVerifier
from backend.messenger.models.message import Message
from backend.messenger.models.user import ChatUser
from backend.messenger.utils.errors import Result, not_found, validation_error

logger = logging.getLogger(__name__)

# yyyy-MM-ddTHH:mm[:ss[.fraction]], no offset
_LOCAL_DATETIME = re.compile(
    r"^(\d{4})-(\d{2})-(\d{2})T(\d{2}):(\d{2})(?::(\d{2})(?:\.(\d{1,9}))?)?$"
)


def parse_local_datetime(value: str) -> Optional[datetime]:
    """
    Parses an ISO-8601 local date-time. Returns None when the text does not
    match the format or names an impossible date.
    """
    match = _LOCAL_DATETIME.match(value.strip())
    if not match:
        return None
    year, month, day, hour, minute, second, fraction = match.groups()
    micros = int((fraction or "0").ljust(6, "0")[:6])
    try:
        return datetime(
            int(year), int(month), int(day),
            int(hour), int(minute), int(second or 0), micros,
        )
    except ValueError:
        return None


class ConversationQueryEngine:
    def __init__(
        self,
        gateway: PersistenceGateway,
        identity: IdentityVerifier,
        clock: Callable[[], datetime] = datetime.now,
        lookback: Optional[timedelta] = None,
    ):
        self.gateway = gateway
        self.identity = identity
        self.clock = clock
        self.lookback = lookback or timedelta(hours=settings.CONVERSATION_LOOKBACK_HOURS)

    def _with_other_user(self, principal: Optional[str], other_user_id: str) -> Result[ChatUser]:
        def check_other(user: ChatUser) -> Result[ChatUser]:
            # existence only, the other user's record is not used further
            if self.gateway.find_by_id(ChatUser, other_user_id) is None:
                return not_found(f"Other user not found: {other_user_id}")
            return Result.success(user)

        return self.identity.resolve(principal).then(check_other)

    def _since(self, since: Optional[str]) -> datetime:
        if since:
            parsed = parse_local_datetime(since)
            if parsed is not None:
                return parsed
            logger.warning(f"[Query] Unparsable 'since' value {since!r}, using default window")
        return self.clock() - self.lookback

    def conversation(
        self,
        principal: Optional[str],
        other_user_id: str,
        since: Optional[str] = None,
    ) -> Result[List[Message]]:
        return self._with_other_user(principal, other_user_id).then(
            lambda user: Result.success(
                self.gateway.find_conversation(user.id, other_user_id, self._since(since))
            )
        )

    def history(self, principal: Optional[str], other_user_id: str) -> Result[List[Message]]:
        return self._with_other_user(principal, other_user_id).then(
            lambda user: Result.success(self.gateway.find_history(user.id, other_user_id))
        )

    def group_feed(self, group_id: str) -> Result[List[Message]]:
        # no membership check: whoever knows the group id can read its feed
        return Result.success(self.gateway.find_group_messages(group_id))

    def search(
        self,
        principal: Optional[str],
        keyword: Optional[str] = None,
        start: Optional[str] = None,
        end: Optional[str] = None,
    ) -> Result[List[Message]]:
        return self.identity.resolve(principal).then(
            lambda user: self._search_as(user, keyword, start, end)
        )

    def _search_as(
        self,
        user: ChatUser,
        keyword: Optional[str],
        start: Optional[str],
        end: Optional[str],
    ) -> Result[List[Message]]:
        bounds = {}
        for name, raw in (("start", start), ("end", end)):
            if raw:
                parsed = parse_local_datetime(raw)
                if parsed is None:
                    return validation_error(f"Invalid '{name}' timestamp format: {raw}")
                bounds[name] = parsed
            else:
                bounds[name] = None

        keyword = keyword.strip() if keyword else None
        return Result.success(
            self.gateway.search(user.id, keyword or None, bounds["start"], bounds["end"])
        )
