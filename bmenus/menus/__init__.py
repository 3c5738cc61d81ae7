"""Menu definitions."""

from .definitions import (
    COMMON_MENU_ID,
    MAIN_MENU_ID,
    MenuButton,
    MenuDefinition,
    MenuKind,
)

__all__ = [
    "COMMON_MENU_ID",
    "MAIN_MENU_ID",
    "MenuButton",
    "MenuDefinition",
    "MenuKind",
]
