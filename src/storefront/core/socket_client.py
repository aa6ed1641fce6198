"""
Socket.IO transport for the event channel.

Connects to the backend socket server with the current access token,
forwards every known server event into `EventChannel.dispatch` and becomes
the channel's sender for outbound events such as `join_conversation`.
Handlers run on the client's background thread.
"""

import logging
from typing import Any, Optional

import socketio

from storefront.models.identity import Identity
from .config import settings
from .realtime import PARSERS, EventChannel
from .storage import TokenStore

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S"
)
logger = logging.getLogger(__name__)


class SocketTransport:
    def __init__(
        self,
        channel: EventChannel,
        tokens: TokenStore,
        url: Optional[str] = None,
        client: Optional[socketio.Client] = None
    ):
        self.channel = channel
        self.tokens = tokens
        self.url = url or settings.ws_url
        self.sio = client or socketio.Client(reconnection=True)

        self.sio.on("connect", self._on_connect)
        self.sio.on("disconnect", self._on_disconnect)
        for event in PARSERS:
            self.sio.on(event, self._forwarder(event))

        channel.sender = self.send

    @property
    def connected(self) -> bool:
        return bool(self.sio.connected)

    def connect(self) -> bool:
        """
        Open the socket with the stored access token (none for guests).

        Returns False when the server cannot be reached; the app keeps
        working without live updates.
        """
        if self.connected:
            return True
        try:
            self.sio.connect(self.url, auth={"token": self.tokens.access_token})
        except socketio.exceptions.ConnectionError as e:
            logger.warning(f"[REALTIME] Cannot connect to {self.url}: {e}")
            return False
        return True

    def disconnect(self) -> None:
        if self.connected:
            self.sio.disconnect()

    def reconnect(self) -> bool:
        self.disconnect()
        return self.connect()

    def on_identity_change(self, old: Identity, new: Identity) -> None:
        # The server binds the socket to the token it was opened with.
        if self.connected:
            self.reconnect()

    def send(self, event: str, data: Any) -> None:
        if not self.connected:
            logger.warning(f"[REALTIME] Socket not connected, dropping {event}")
            return
        self.sio.emit(event, data)

    def _forwarder(self, event: str):
        def forward(*args):
            self.channel.dispatch(event, args[0] if args else None)
        return forward

    def _on_connect(self) -> None:
        logger.info(f"[REALTIME] Connected to {self.url}")

    def _on_disconnect(self, *args) -> None:
        logger.info("[REALTIME] Disconnected")
