# backend/messenger/messaging/identity.py
from typing import Optional
import logging

from backend.messenger.messaging.gateway import PersistenceGateway
from backend.messenger.models.user import ChatUser
from backend.messenger.utils.errors import Result, authorization_error, not_found

logger = logging.getLogger(__name__)


class IdentityVerifier:
    """
    Maps the authenticated principal (a username) to the stored user.

    Authorization checks compare internal user ids, so every request that
    acts on behalf of someone goes through here exactly once.
    """

    def __init__(self, gateway: PersistenceGateway):
        self.gateway = gateway

    def resolve(self, principal: Optional[str]) -> Result[ChatUser]:
        if not principal:
            return authorization_error("No authenticated user found")
        user = self.gateway.find_user_by_username(principal)
        if user is None:
            logger.warning(f"[Identity] Principal has no user record: {principal}")
            return not_found(f"User not found: {principal}")
        logger.debug(f"[Identity] {principal} -> {user.id}")
        return Result.success(user)
