# backend/messenger/users/routes.py
from typing import List, Optional
import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backend.messenger.auth.deps import get_current_principal
from backend.messenger.database.session import get_db
from backend.messenger.messaging.gateway import SqlAlchemyGateway
from backend.messenger.messaging.identity import IdentityVerifier
from backend.messenger.models.user import ChatUser
from backend.messenger.users import schemas as user_schemas
from backend.messenger.utils.errors import ChatError, ErrorKind, error_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users", tags=["users"])


def _storage_failure(e: SQLAlchemyError, default_status: int):
    logger.error(f"[Users] Storage failure: {e}", exc_info=True)
    return error_response(ChatError(ErrorKind.STORAGE, str(e)), default_status)


@router.get("", response_model=List[user_schemas.UserSummary])
def list_users(db: Session = Depends(get_db)):
    try:
        users = SqlAlchemyGateway(db).find_all(ChatUser)
    except SQLAlchemyError as e:
        return _storage_failure(e, status.HTTP_500_INTERNAL_SERVER_ERROR)
    logger.info(f"[Users] Retrieved {len(users)} users")
    return users


@router.get("/count", response_model=user_schemas.UserCount)
def count_users(db: Session = Depends(get_db)):
    try:
        count = SqlAlchemyGateway(db).count(ChatUser)
    except SQLAlchemyError as e:
        return _storage_failure(e, status.HTTP_500_INTERNAL_SERVER_ERROR)
    return user_schemas.UserCount(count=count)


@router.get("/myInfo", response_model=user_schemas.CurrentUserId)
def read_my_info(
    principal: Optional[str] = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    """
    Internal id of the authenticated user. Clients need it to fill `senderId`.
    """
    try:
        result = IdentityVerifier(SqlAlchemyGateway(db)).resolve(principal)
    except SQLAlchemyError as e:
        return _storage_failure(e, status.HTTP_400_BAD_REQUEST)
    if not result.ok:
        return error_response(result.error, status.HTTP_400_BAD_REQUEST)
    return user_schemas.CurrentUserId(id=result.value.id)


@router.get("/{user_id}", response_model=user_schemas.UserProfile)
def get_user(user_id: str, db: Session = Depends(get_db)):
    logger.info(f"[Users] Fetching user {user_id}")
    try:
        user = SqlAlchemyGateway(db).find_by_id(ChatUser, user_id)
    except SQLAlchemyError as e:
        return _storage_failure(e, status.HTTP_404_NOT_FOUND)
    if user is None:
        return error_response(
            ChatError(ErrorKind.NOT_FOUND, f"User not found: {user_id}"),
            status.HTTP_404_NOT_FOUND,
        )
    return user
