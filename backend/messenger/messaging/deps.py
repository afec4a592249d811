# backend/messenger/messaging/deps.py
from fastapi import Depends
from sqlalchemy.orm import Session

from backend.messenger.database.session import get_db
from backend.messenger.messaging.fanout import FanoutPublisher, channel_hub
from backend.messenger.messaging.gateway import SqlAlchemyGateway
from backend.messenger.messaging.identity import IdentityVerifier
from backend.messenger.messaging.service import MessagingService


def get_publisher() -> FanoutPublisher:
    return channel_hub


def get_messaging_service(
    db: Session = Depends(get_db),
    publisher: FanoutPublisher = Depends(get_publisher),
) -> MessagingService:
    gateway = SqlAlchemyGateway(db)
    return MessagingService(
        gateway=gateway,
        identity=IdentityVerifier(gateway),
        publisher=publisher,
    )
