"""Player sessions and the forms shown to them."""

from .base import Session, player_uuid
from .forms import ControlKind, CustomForm, FormControl, SimpleForm

__all__ = [
    "Session",
    "player_uuid",
    "ControlKind",
    "CustomForm",
    "FormControl",
    "SimpleForm",
]
