"""Menu definitions loaded from the menus section of the configuration."""

from dataclasses import dataclass, field
from enum import Enum

from mashumaro import DataClassDictMixin, field_options

COMMON_MENU_ID = "common"
MAIN_MENU_ID = "main"


class MenuKind(str, Enum):
    """How a menu is presented."""

    SIMPLE = "simple"  # Form of buttons
    CUSTOM = "custom"  # Single command form

    @classmethod
    def from_str(cls, value: str) -> "MenuKind | None":
        """Convert a config string (any case) to a kind, or None if unknown."""
        try:
            return cls(value.lower())
        except (AttributeError, ValueError):
            return None


@dataclass
class MenuButton(DataClassDictMixin):
    """A button on a simple menu. Opens a sub-menu or runs a command."""

    text: str = ""
    menu: str | None = None
    command: str | None = None

    def opens_common(self) -> bool:
        """Whether this button leads to the frequently used commands menu."""
        return self.menu is not None and self.menu.lower() == COMMON_MENU_ID


@dataclass
class MenuDefinition(DataClassDictMixin):
    """A menu as declared in menus.yml."""

    kind: str = field(default="", metadata=field_options(alias="type"))
    title: str = ""
    content: str | None = None
    command: str | None = None
    buttons: list[MenuButton] = field(default_factory=list)

    @property
    def menu_kind(self) -> MenuKind | None:
        return MenuKind.from_str(self.kind)

    def move_common_first(self) -> None:
        """Move the first button leading to the common menu to the top."""
        for index, button in enumerate(self.buttons):
            if button.opens_common():
                if index != 0:
                    del self.buttons[index]
                    self.buttons.insert(0, button)
                break
