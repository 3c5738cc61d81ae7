"""Menu host that serves menus to players over websocket."""

import asyncio
import logging
from pathlib import Path

from .menu_manager import MenuManager
from ..menus.definitions import MAIN_MENU_ID
from ..network.websocket_server import WebSocketServer, ClientConnection
from ..query.protocol import RemoteServer
from ..users.network_session import NetworkSession

logger = logging.getLogger(__name__)

VERSION = "1.0.0"


class Server:
    """
    Websocket host for the menu layer.

    Each authorized client becomes a NetworkSession. Menu logic runs on a
    worker thread so blocking remote queries never stall the event loop;
    packets queued by the session are flushed back once the call returns.
    """

    def __init__(
        self,
        host: str = "0.0.0.0",
        port: int = 8000,
        data_dir: str | Path = "data",
        remote_server: RemoteServer | None = None,
        ssl_cert: str | Path | None = None,
        ssl_key: str | Path | None = None,
    ):
        self.host = host
        self.port = port
        self._ssl_cert = ssl_cert
        self._ssl_key = ssl_key
        self._remote_server = remote_server

        self._manager = MenuManager(
            data_dir,
            online_names=self.online_names,
            remote_server=lambda: self._remote_server,
        )
        self._ws_server: WebSocketServer | None = None

        # User tracking
        self._sessions: dict[str, NetworkSession] = {}  # username -> NetworkSession

    @property
    def manager(self) -> MenuManager:
        return self._manager

    def online_names(self) -> list[str]:
        """Names of all authorized players on this host."""
        return list(self._sessions)

    async def start(self) -> None:
        """Start the server."""
        print(f"Starting bmenus v{VERSION} server...")

        await asyncio.to_thread(self._manager.load_configuration)

        self._ws_server = WebSocketServer(
            host=self.host,
            port=self.port,
            on_connect=self._on_client_connect,
            on_disconnect=self._on_client_disconnect,
            on_message=self._on_client_message,
            ssl_cert=self._ssl_cert,
            ssl_key=self._ssl_key,
        )
        await self._ws_server.start()

        protocol = "wss" if self._ssl_cert else "ws"
        print(f"Server running on {protocol}://{self.host}:{self.port}")

    async def stop(self) -> None:
        """Stop the server."""
        print("Stopping server...")

        if self._ws_server:
            await self._ws_server.stop()

        await asyncio.to_thread(self._manager.shutdown)
        self._sessions.clear()

        print("Server stopped.")

    async def _flush_session(self, session: NetworkSession) -> None:
        """Send all queued packets for a session."""
        for packet in session.get_queued_messages():
            await session.connection.send(packet)

    async def _on_client_connect(self, client: ClientConnection) -> None:
        """Handle new client connection."""
        logger.info("Client connected: %s", client.address)

    async def _on_client_disconnect(self, client: ClientConnection) -> None:
        """Handle client disconnection."""
        logger.info("Client disconnected: %s", client.address)
        if client.username:
            session = self._sessions.get(client.username)
            if session is not None and session.connection is client:
                del self._sessions[client.username]

    async def _on_client_message(self, client: ClientConnection, packet: dict) -> None:
        """Handle incoming message from client."""
        packet_type = packet.get("type")

        if packet_type == "authorize":
            await self._handle_authorize(client, packet)
        elif not client.authenticated:
            # Ignore other packets until the client is authorized
            return
        elif packet_type == "open_menu":
            await self._handle_open_menu(client, packet)
        elif packet_type == "form_response":
            await self._handle_form_response(client, packet)
        elif packet_type == "ping":
            await self._handle_ping(client)

    async def _handle_authorize(self, client: ClientConnection, packet: dict) -> None:
        """Handle authorization packet."""
        username = packet.get("username")
        if not isinstance(username, str) or not username.strip():
            await client.send(
                {"type": "disconnect", "reason": "Missing username", "reconnect": False}
            )
            return
        player_uuid = packet.get("uuid")
        if not isinstance(player_uuid, str) or not player_uuid:
            player_uuid = None

        client.username = username
        client.authenticated = True
        session = NetworkSession(username, client, uuid=player_uuid)
        self._sessions[username] = session

        await client.send(
            {
                "type": "authorize_success",
                "username": username,
                "uuid": session.uuid,
                "version": VERSION,
            }
        )

    async def _handle_open_menu(self, client: ClientConnection, packet: dict) -> None:
        """Handle a menu request from the client."""
        session = self._sessions.get(client.username)
        if session is None:
            return
        menu_id = packet.get("menu_id") or MAIN_MENU_ID
        if not isinstance(menu_id, str):
            return
        await asyncio.to_thread(self._manager.open_menu, session, menu_id)
        await self._flush_session(session)

    async def _handle_form_response(self, client: ClientConnection, packet: dict) -> None:
        """Handle the client's answer to an open form."""
        session = self._sessions.get(client.username)
        if session is None:
            return
        form_id = packet.get("form_id")
        if not isinstance(form_id, int) or isinstance(form_id, bool):
            return
        handled = await asyncio.to_thread(
            session.handle_form_response, form_id, packet.get("response")
        )
        if not handled:
            logger.debug("Dropped response to form %s from %s", form_id, client.username)
        await self._flush_session(session)

    async def _handle_ping(self, client: ClientConnection) -> None:
        """Handle ping request - respond immediately with pong."""
        await client.send({"type": "pong"})


async def run_server(
    host: str = "0.0.0.0",
    port: int = 8000,
    data_dir: str | Path = "data",
    remote_server: RemoteServer | None = None,
    ssl_cert: str | Path | None = None,
    ssl_key: str | Path | None = None,
) -> None:
    """Run the server.

    Args:
        host: Host address to bind to
        port: Port number to listen on
        data_dir: Directory holding menus.yml and usage.yml
        remote_server: Game server to ask for its player list, if any
        ssl_cert: Path to SSL certificate file (for WSS support)
        ssl_key: Path to SSL private key file (for WSS support)
    """
    server = Server(
        host=host,
        port=port,
        data_dir=data_dir,
        remote_server=remote_server,
        ssl_cert=ssl_cert,
        ssl_key=ssl_key,
    )
    await server.start()

    try:
        # Run forever
        while True:
            await asyncio.sleep(1)
    except (KeyboardInterrupt, asyncio.CancelledError):
        pass
    finally:
        await server.stop()
