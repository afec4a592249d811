# backend/messenger/messaging/routes.py
from typing import List, Optional
import logging

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect, status
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.orm import sessionmaker

from backend.messenger.auth.deps import get_current_principal, principal_from_token
from backend.messenger.database.session import get_session_factory
from backend.messenger.messaging import schemas as message_schemas
from backend.messenger.messaging.deps import get_messaging_service
from backend.messenger.messaging.fanout import channel_hub, group_channel, private_channel
from backend.messenger.messaging.gateway import SqlAlchemyGateway
from backend.messenger.messaging.identity import IdentityVerifier
from backend.messenger.messaging.service import MessagingService
from backend.messenger.utils.errors import error_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/messages", tags=["messages"])
ws_router = APIRouter(prefix="/ws", tags=["realtime"])


def _sent(result, default_status: int):
    if not result.ok:
        return error_response(result.error, default_status)
    return message_schemas.MessageSentResponse(id=result.value.id)


def _listed(result, default_status: int):
    if not result.ok:
        return error_response(result.error, default_status)
    return result.value


@router.post("/private", response_model=message_schemas.MessageSentResponse)
def send_private_message(
    draft: message_schemas.MessageDraft,
    principal: Optional[str] = Depends(get_current_principal),
    service: MessagingService = Depends(get_messaging_service),
):
    """
    Send a message to one user. The new message is pushed to the
    recipient's private channel after it is saved.
    """
    logger.info(f"[Messages] Private message request from {principal}: {draft.model_dump()}")
    return _sent(service.send_private(draft, principal), status.HTTP_400_BAD_REQUEST)


@router.post("/group", response_model=message_schemas.MessageSentResponse)
def send_group_message(
    draft: message_schemas.MessageDraft,
    principal: Optional[str] = Depends(get_current_principal),
    service: MessagingService = Depends(get_messaging_service),
):
    logger.info(f"[Messages] Group message request from {principal}: {draft.model_dump()}")
    return _sent(service.send_group(draft, principal), status.HTTP_400_BAD_REQUEST)


@router.get(
    "/private/conversation/{other_user_id}",
    response_model=List[message_schemas.MessageOut],
)
def get_conversation(
    other_user_id: str,
    since: Optional[str] = None,
    principal: Optional[str] = Depends(get_current_principal),
    service: MessagingService = Depends(get_messaging_service),
):
    """
    Private messages between the caller and another user newer than `since`
    (yyyy-MM-ddTHH:mm:ss). Without a usable `since`, the last 24 hours.
    """
    logger.info(f"[Messages] Conversation {principal} <-> {other_user_id}, since={since}")
    return _listed(
        service.conversation(principal, other_user_id, since),
        status.HTTP_400_BAD_REQUEST,
    )


@router.get(
    "/private/history/{other_user_id}",
    response_model=List[message_schemas.MessageOut],
)
def get_history(
    other_user_id: str,
    principal: Optional[str] = Depends(get_current_principal),
    service: MessagingService = Depends(get_messaging_service),
):
    logger.info(f"[Messages] History {principal} <-> {other_user_id}")
    return _listed(service.history(principal, other_user_id), status.HTTP_400_BAD_REQUEST)


@router.get("/group/{group_id}", response_model=List[message_schemas.MessageOut])
def get_group_messages(
    group_id: str,
    service: MessagingService = Depends(get_messaging_service),
):
    """
    Full feed of a group. Open to any caller that knows the group id.
    """
    logger.info(f"[Messages] Group feed for {group_id}")
    return _listed(service.group_feed(group_id), status.HTTP_500_INTERNAL_SERVER_ERROR)


@router.get("/search", response_model=List[message_schemas.MessageOut])
def search_messages(
    keyword: Optional[str] = None,
    start: Optional[str] = None,
    end: Optional[str] = None,
    principal: Optional[str] = Depends(get_current_principal),
    service: MessagingService = Depends(get_messaging_service),
):
    """
    Messages the caller sent, received, or that belong to one of the caller's
    groups, filtered by keyword (case-sensitive) and an inclusive time range.
    """
    logger.info(f"[Messages] Search by {principal}: keyword={keyword}, start={start}, end={end}")
    return _listed(
        service.search(principal, keyword, start, end),
        status.HTTP_400_BAD_REQUEST,
    )


# --- live channels ---

def _resolve_user_id(session_factory: sessionmaker, principal: Optional[str]) -> Optional[str]:
    # short-lived session, closed before the socket is accepted
    with session_factory() as db:
        result = IdentityVerifier(SqlAlchemyGateway(db)).resolve(principal)
        return result.value.id if result.ok else None


async def _hold(channel: str, websocket: WebSocket) -> None:
    await websocket.accept()
    channel_hub.subscribe(channel, websocket)
    try:
        await websocket.send_json({"event": "subscribed", "channel": channel})
        while True:
            # inbound frames are ignored; receiving only detects disconnects
            await websocket.receive_text()
    except WebSocketDisconnect:
        pass
    finally:
        channel_hub.unsubscribe(channel, websocket)


@ws_router.websocket("/private/{user_id}")
async def private_channel_socket(
    websocket: WebSocket,
    user_id: str,
    token: Optional[str] = None,
    session_factory: sessionmaker = Depends(get_session_factory),
):
    """
    Live private messages for `user_id`. The token must belong to that user.
    """
    resolved_id = await run_in_threadpool(
        _resolve_user_id, session_factory, principal_from_token(token)
    )
    if resolved_id is None or resolved_id != user_id:
        logger.warning(f"[Messages] Refused private channel subscription for {user_id}")
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return
    await _hold(private_channel(user_id), websocket)


@ws_router.websocket("/group/{group_id}")
async def group_channel_socket(websocket: WebSocket, group_id: str):
    await _hold(group_channel(group_id), websocket)
