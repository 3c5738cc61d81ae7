"""Network session implementation for websocket clients."""

from __future__ import annotations

import itertools
import threading
from typing import Any, Callable, TYPE_CHECKING

from .base import Session, CustomFormHandler, SimpleFormHandler, player_uuid
from .forms import CustomForm, SimpleForm

if TYPE_CHECKING:
    from ..network.websocket_server import ClientConnection


class NetworkSession(Session):
    """
    Network implementation of Session for players connected via websocket.

    Queues packets to be sent asynchronously by the network layer, and keeps
    the open form's callback until the client answers it. A client shows one
    form at a time, so opening a form replaces any form still pending.
    """

    def __init__(
        self,
        username: str,
        connection: ClientConnection,
        uuid: str | None = None,
    ):
        self._uuid = uuid or player_uuid(username)
        self._username = username
        self._connection = connection
        self._lock = threading.Lock()
        self._message_queue: list[dict[str, Any]] = []
        self._pending_forms: dict[int, tuple[type, Callable[[Any], None]]] = {}
        self._form_ids = itertools.count(1)

    @property
    def uuid(self) -> str:
        return self._uuid

    @property
    def username(self) -> str:
        return self._username

    @property
    def connection(self) -> ClientConnection:
        return self._connection

    @property
    def pending_form_ids(self) -> list[int]:
        with self._lock:
            return list(self._pending_forms)

    def _queue_packet(self, packet: dict[str, Any]) -> None:
        """Queue a packet to be sent to the client."""
        with self._lock:
            self._message_queue.append(packet)

    def get_queued_messages(self) -> list[dict[str, Any]]:
        """Get and clear the message queue."""
        with self._lock:
            messages = self._message_queue
            self._message_queue = []
        return messages

    def _open_form(
        self,
        packet_type: str,
        body: dict[str, Any],
        response_type: type,
        on_response: Callable[[Any], None],
    ) -> None:
        with self._lock:
            form_id = next(self._form_ids)
            self._pending_forms.clear()
            self._pending_forms[form_id] = (response_type, on_response)
            self._message_queue.append({"type": packet_type, "form_id": form_id, **body})

    def send_simple_form(self, form: SimpleForm, on_response: SimpleFormHandler) -> None:
        self._open_form("simple_form", form.to_dict(), int, on_response)

    def send_custom_form(self, form: CustomForm, on_response: CustomFormHandler) -> None:
        self._open_form("custom_form", form.to_dict(), list, on_response)

    def send_command(self, command: str) -> None:
        self._queue_packet({"type": "command", "command": command})

    def handle_form_response(self, form_id: int, response: Any) -> bool:
        """
        Deliver a client's answer to an open form.

        A None response means the form was closed; its callback is dropped.
        Returns False if no such form is open or the response has the wrong
        shape for the form.
        """
        with self._lock:
            pending = self._pending_forms.pop(form_id, None)
        if pending is None or response is None:
            return False
        response_type, on_response = pending
        if isinstance(response, bool) or not isinstance(response, response_type):
            return False
        on_response(response)
        return True
