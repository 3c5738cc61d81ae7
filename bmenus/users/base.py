"""Abstract Session class that the menu layer interacts with."""

from abc import ABC, abstractmethod
from typing import Any, Callable
import uuid as uuid_module

from .forms import CustomForm, SimpleForm

SimpleFormHandler = Callable[[int], None]
CustomFormHandler = Callable[[list[Any]], None]

# Namespace for identities derived from usernames by hosts without accounts.
PLAYER_NAMESPACE = uuid_module.UUID("6f1d1a52-58d3-4b2e-9a4e-6c0c3e3c2b11")


class Session(ABC):
    """
    Abstract base class for a connected player session.

    The menu layer interacts with this interface, never with network code
    directly. Implementations include NetworkSession (websocket clients) and
    MockSession (for testing).
    """

    @property
    @abstractmethod
    def uuid(self) -> str:
        """The player's stable identity (UUID string)."""
        ...

    @property
    @abstractmethod
    def username(self) -> str:
        """The player's display name."""
        ...

    @abstractmethod
    def send_simple_form(self, form: SimpleForm, on_response: SimpleFormHandler) -> None:
        """
        Present a form of buttons.

        Args:
            form: The form to show.
            on_response: Called with the clicked button index. Not called if
                the player closes the form.
        """
        ...

    @abstractmethod
    def send_custom_form(self, form: CustomForm, on_response: CustomFormHandler) -> None:
        """
        Present a multi-field form.

        Args:
            form: The form to show.
            on_response: Called with one value per control, in control order.
                Not called if the player closes the form.
        """
        ...

    @abstractmethod
    def send_command(self, command: str) -> None:
        """
        Execute a command on behalf of the player.

        Args:
            command: Resolved command without the leading slash.
        """
        ...


def player_uuid(username: str) -> str:
    """Derive a stable identity for a username."""
    return str(uuid_module.uuid5(PLAYER_NAMESPACE, username))
