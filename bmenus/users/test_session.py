"""Test session implementation for unit tests."""

from dataclasses import dataclass
from typing import Any, Callable

from .base import Session, CustomFormHandler, SimpleFormHandler, player_uuid
from .forms import CustomForm, SimpleForm


@dataclass
class SentForm:
    """A captured form and the callback waiting for its response."""

    form: SimpleForm | CustomForm
    on_response: Callable[[Any], None]


class MockSession(Session):
    """
    Mock implementation of Session that captures forms and commands.

    Tests answer the most recent form with click() or submit().
    """

    def __init__(self, username: str, uuid: str | None = None):
        self._uuid = uuid or player_uuid(username)
        self._username = username
        self.forms: list[SentForm] = []
        self.commands: list[str] = []

    @property
    def uuid(self) -> str:
        return self._uuid

    @property
    def username(self) -> str:
        return self._username

    def send_simple_form(self, form: SimpleForm, on_response: SimpleFormHandler) -> None:
        self.forms.append(SentForm(form, on_response))

    def send_custom_form(self, form: CustomForm, on_response: CustomFormHandler) -> None:
        self.forms.append(SentForm(form, on_response))

    def send_command(self, command: str) -> None:
        self.commands.append(command)

    # Test helper methods

    @property
    def last_form(self) -> SimpleForm | CustomForm | None:
        """The most recently sent form."""
        return self.forms[-1].form if self.forms else None

    def click(self, index: int) -> None:
        """Answer the most recent simple form."""
        sent = self.forms[-1]
        assert isinstance(sent.form, SimpleForm)
        sent.on_response(index)

    def click_text(self, text: str) -> None:
        """Answer the most recent simple form by button text."""
        form = self.last_form
        assert isinstance(form, SimpleForm)
        self.click(form.buttons.index(text))

    def submit(self, values: list[Any] | None = None) -> None:
        """Answer the most recent custom form; None submits the defaults."""
        sent = self.forms[-1]
        assert isinstance(sent.form, CustomForm)
        if values is None:
            values = [control.default_response() for control in sent.form.controls]
        sent.on_response(values)

    def clear(self) -> None:
        """Forget captured forms and commands."""
        self.forms.clear()
        self.commands.clear()
