"""WebSocket server for client connections."""

import json
import logging
import ssl
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Coroutine

import websockets
from websockets.asyncio.server import Server, ServerConnection, serve

logger = logging.getLogger(__name__)


@dataclass
class ClientConnection:
    """Represents a connected client."""

    websocket: ServerConnection
    address: str
    username: str | None = None
    authenticated: bool = False

    async def send(self, packet: dict) -> None:
        """Send a packet to this client."""
        try:
            await self.websocket.send(json.dumps(packet))
        except websockets.exceptions.ConnectionClosed:
            pass


class WebSocketServer:
    """
    Async WebSocket server for handling client connections.

    The server is async, but menu logic is synchronous. Packets are decoded
    here and handed to the callbacks, which send responses async.
    """

    def __init__(
        self,
        host: str = "0.0.0.0",
        port: int = 8000,
        on_connect: Callable[[ClientConnection], Coroutine] | None = None,
        on_disconnect: Callable[[ClientConnection], Coroutine] | None = None,
        on_message: Callable[[ClientConnection, dict], Coroutine] | None = None,
        ssl_cert: str | Path | None = None,
        ssl_key: str | Path | None = None,
    ):
        self.host = host
        self.port = port
        self._on_connect = on_connect
        self._on_disconnect = on_disconnect
        self._on_message = on_message
        self._clients: dict[str, ClientConnection] = {}
        self._server: Server | None = None
        self._ssl_context = None

        # Configure SSL if certificates provided
        if ssl_cert and ssl_key:
            self._ssl_context = ssl.SSLContext(ssl.PROTOCOL_TLS_SERVER)
            self._ssl_context.load_cert_chain(str(ssl_cert), str(ssl_key))

    async def start(self) -> None:
        """Start the WebSocket server."""
        self._server = await serve(
            self._handle_client,
            self.host,
            self.port,
            ssl=self._ssl_context,
        )
        protocol = "wss" if self._ssl_context else "ws"
        logger.info("WebSocket server started on %s://%s:%d", protocol, self.host, self.port)

    async def stop(self) -> None:
        """Stop the WebSocket server."""
        if self._server:
            self._server.close()
            await self._server.wait_closed()
        self._clients.clear()

    async def _handle_client(self, websocket: ServerConnection) -> None:
        """Handle a client connection."""
        address = f"{websocket.remote_address[0]}:{websocket.remote_address[1]}"
        client = ClientConnection(websocket=websocket, address=address)
        self._clients[address] = client

        try:
            if self._on_connect:
                await self._on_connect(client)

            async for message in websocket:
                try:
                    packet = json.loads(message)
                except json.JSONDecodeError:
                    logger.debug("Ignoring malformed packet from %s", address)
                    continue
                if isinstance(packet, dict) and self._on_message:
                    await self._on_message(client, packet)

        except websockets.exceptions.ConnectionClosed:
            pass
        finally:
            self._clients.pop(address, None)
            if self._on_disconnect:
                await self._on_disconnect(client)
