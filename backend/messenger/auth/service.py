# backend/messenger/auth/service.py
from typing import Optional
import logging

from sqlalchemy.exc import SQLAlchemyError

from backend.messenger.auth.schemas import UserCreate, UserLogin
from backend.messenger.messaging.gateway import SqlAlchemyGateway
from backend.messenger.models.user import ChatUser, new_id
from backend.messenger.utils.errors import Result, storage_error, validation_error
from backend.messenger.utils.security import (
    create_access_token,
    hash_password,
    verify_password,
)

logger = logging.getLogger(__name__)


def register_user(gateway: SqlAlchemyGateway, user_in: UserCreate) -> Result[ChatUser]:
    if not user_in.username or not user_in.username.strip():
        return validation_error("Missing username")
    if not user_in.password or not user_in.password.strip():
        return validation_error("Missing password")
    if user_in.email is not None and not user_in.email.strip():
        return validation_error("Email cannot be empty if provided")

    try:
        if gateway.find_user_by_username(user_in.username):
            return validation_error("Username already registered")
        if user_in.email is not None and gateway.find_user_by_email(user_in.email):
            return validation_error("Email already registered")

        user = ChatUser(
            id=new_id(),
            username=user_in.username,
            hashed_password=hash_password(user_in.password),
            birthdate=user_in.birthdate,
            email=user_in.email,
            phone=user_in.phone,
            avatar_url=user_in.avatar_url,
        )
        user = gateway.save(user)
    except SQLAlchemyError as e:
        logger.error(f"[Auth] Registration failed for {user_in.username}: {e}", exc_info=True)
        gateway.rollback()
        return storage_error(str(e))

    logger.info(f"[Auth] Registered {user.username} as {user.id}")
    return Result.success(user)


def authenticate_user(gateway: SqlAlchemyGateway, username: str, password: str) -> Optional[ChatUser]:
    user = gateway.find_user_by_username(username)
    if not user:
        return None
    if not verify_password(password, user.hashed_password):
        return None
    return user


def login(gateway: SqlAlchemyGateway, user_in: UserLogin) -> Result[str]:
    if not user_in.username or not user_in.password:
        return validation_error("Missing username or password")
    try:
        user = authenticate_user(gateway, user_in.username, user_in.password)
    except SQLAlchemyError as e:
        logger.error(f"[Auth] Login lookup failed for {user_in.username}: {e}", exc_info=True)
        return storage_error(str(e))
    if user is None:
        logger.warning(f"[Auth] Authentication failed for {user_in.username}")
        return validation_error("Invalid credentials")

    # the principal carried by the token is the username
    return Result.success(create_access_token(data={"sub": user.username}))
