# backend/messenger/auth/routes.py
import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from backend.messenger.auth.schemas import Token, UserCreate, UserLogin, UserRegistered
from backend.messenger.auth import service as auth_service
from backend.messenger.database.session import get_db
from backend.messenger.messaging.gateway import SqlAlchemyGateway
from backend.messenger.utils.errors import error_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["auth"])


@router.post("/users/register", response_model=UserRegistered)
def register(
    user_in: UserCreate,
    db: Session = Depends(get_db),
):
    logger.info(f"[Auth] Registration request for {user_in.username}")
    result = auth_service.register_user(SqlAlchemyGateway(db), user_in)
    if not result.ok:
        return error_response(result.error, status.HTTP_400_BAD_REQUEST)
    user = result.value
    return UserRegistered(id=user.id, username=user.username, email=user.email)


@router.post("/auth/login", response_model=Token)
def login(
    user_in: UserLogin,
    db: Session = Depends(get_db),
):
    logger.info(f"[Auth] Login request for {user_in.username}")
    result = auth_service.login(SqlAlchemyGateway(db), user_in)
    if not result.ok:
        return error_response(result.error, status.HTTP_400_BAD_REQUEST)
    return Token(token=result.value)
