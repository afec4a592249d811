# backend/messenger/groups/service.py
import logging

from sqlalchemy.exc import SQLAlchemyError

from backend.messenger.groups.schemas import GroupCreate
from backend.messenger.messaging.gateway import SqlAlchemyGateway
from backend.messenger.models.group import ChatGroup
from backend.messenger.models.user import ChatUser, new_id
from backend.messenger.utils.errors import Result, not_found, storage_error, validation_error

logger = logging.getLogger(__name__)


def create_group(gateway: SqlAlchemyGateway, group_in: GroupCreate) -> Result[ChatGroup]:
    """
    Creates a uniquely named group and enrolls the listed members.
    """
    name = (group_in.name or "").strip()
    if not name:
        return validation_error("Missing group name")

    try:
        if gateway.find_group_by_name(name):
            return validation_error("Group name already exists")
        member_ids = list(dict.fromkeys(group_in.member_ids))
        for user_id in member_ids:
            if gateway.find_by_id(ChatUser, user_id) is None:
                return not_found(f"Member not found: {user_id}")
        group = gateway.create_group(ChatGroup(id=new_id(), name=name), member_ids)
    except SQLAlchemyError as e:
        logger.error(f"[Groups] Failed to create group {name}: {e}", exc_info=True)
        gateway.rollback()
        return storage_error(str(e))

    logger.info(f"[Groups] Created group {group.name} ({group.id}) with {len(member_ids)} member(s)")
    return Result.success(group)
