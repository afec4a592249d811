# backend/messenger/groups/routes.py
from typing import List
import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backend.messenger.database.session import get_db
from backend.messenger.groups import schemas as group_schemas
from backend.messenger.groups import service as group_service
from backend.messenger.messaging.gateway import SqlAlchemyGateway
from backend.messenger.models.group import ChatGroup
from backend.messenger.utils.errors import ChatError, ErrorKind, error_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/groups", tags=["groups"])


@router.post("/create", response_model=group_schemas.GroupCreated)
def create_group(
    payload: group_schemas.GroupCreate,
    db: Session = Depends(get_db),
):
    logger.info(f"[Groups] Create request: {payload.model_dump()}")
    result = group_service.create_group(SqlAlchemyGateway(db), payload)
    if not result.ok:
        return error_response(result.error, status.HTTP_400_BAD_REQUEST)
    return group_schemas.GroupCreated(id=result.value.id, name=result.value.name)


@router.get("", response_model=List[group_schemas.GroupSummary])
def list_groups(db: Session = Depends(get_db)):
    try:
        groups = SqlAlchemyGateway(db).find_all(ChatGroup)
    except SQLAlchemyError as e:
        logger.error(f"[Groups] Storage failure: {e}", exc_info=True)
        return error_response(
            ChatError(ErrorKind.STORAGE, str(e)),
            status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
    logger.info(f"[Groups] Retrieved {len(groups)} groups")
    return groups
