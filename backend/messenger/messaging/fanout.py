# backend/messenger/messaging/fanout.py
"""
Best-effort push of persisted messages to live WebSocket subscribers.

Channels are keyed ``private:<recipient id>`` or ``group:<group id>``.
Nothing is acknowledged, retried or queued: a message for a channel with
no subscribers is dropped, and a socket that fails on send is unsubscribed.
"""
from typing import Dict, Protocol, Tuple
import asyncio
import logging
import threading

from fastapi import WebSocket

from backend.messenger.messaging.schemas import to_payload
from backend.messenger.models.message import ChatType, Message

logger = logging.getLogger(__name__)


class FanoutPublisher(Protocol):
    def publish(self, message: Message) -> None: ...


def private_channel(user_id: str) -> str:
    return f"private:{user_id}"


def group_channel(group_id: str) -> str:
    return f"group:{group_id}"


def channel_for(message: Message) -> str:
    if message.chat_type == ChatType.GROUP.value:
        return group_channel(message.group_id)
    return private_channel(message.recipient_id)


class ChannelHub:
    """
    Registry of live sockets per channel.

    ``publish`` is called from the synchronous request handlers, which run in
    a worker thread, so sends are scheduled onto the event loop that owns the
    subscribed sockets and not awaited.
    """

    def __init__(self):
        # channel -> id(socket) -> (socket, event loop serving it)
        self._channels: Dict[str, Dict[int, Tuple[WebSocket, asyncio.AbstractEventLoop]]] = {}
        self._lock = threading.Lock()

    def subscribe(self, channel: str, websocket: WebSocket) -> None:
        with self._lock:
            self._channels.setdefault(channel, {})[id(websocket)] = (
                websocket,
                asyncio.get_running_loop(),
            )
        logger.info(f"[Fanout] Subscribed to {channel}")

    def unsubscribe(self, channel: str, websocket: WebSocket) -> None:
        with self._lock:
            sockets = self._channels.get(channel)
            if sockets is None:
                return
            sockets.pop(id(websocket), None)
            if not sockets:
                del self._channels[channel]
        logger.info(f"[Fanout] Unsubscribed from {channel}")

    def subscriber_count(self, channel: str) -> int:
        with self._lock:
            return len(self._channels.get(channel, ()))

    def publish(self, message: Message) -> None:
        channel = channel_for(message)
        try:
            with self._lock:
                sockets = list(self._channels.get(channel, {}).values())
            if not sockets:
                logger.debug(f"[Fanout] No subscribers on {channel}, dropping {message.id}")
                return

            payload = to_payload(message)
            for websocket, loop in sockets:
                if loop.is_closed():
                    self.unsubscribe(channel, websocket)
                    continue
                asyncio.run_coroutine_threadsafe(
                    self._send(channel, websocket, payload), loop
                )
            logger.info(f"[Fanout] Pushed {message.id} to {len(sockets)} socket(s) on {channel}")
        except Exception as e:
            # the message is already committed; fanout failures end here
            logger.error(f"[Fanout] Failed to push {message.id} to {channel}: {e}", exc_info=True)

    async def _send(self, channel: str, websocket: WebSocket, payload: dict) -> None:
        try:
            await websocket.send_json(payload)
        except Exception as e:
            logger.warning(f"[Fanout] Dropping dead socket on {channel}: {e}")
            self.unsubscribe(channel, websocket)


channel_hub = ChannelHub()
