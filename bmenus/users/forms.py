"""Form descriptions sent to a session for rendering."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from mashumaro.mixins.json import DataClassJSONMixin


class ControlKind(str, Enum):
    """Input widget shown on a custom form."""

    INPUT = "input"
    DROPDOWN = "dropdown"
    TOGGLE = "toggle"
    SLIDER = "slider"
    STEP_SLIDER = "step_slider"


@dataclass
class FormControl(DataClassJSONMixin):
    """
    One input widget on a custom form.

    Only the fields relevant to the kind are meaningful: options for
    dropdowns and step sliders, minimum/maximum/step for sliders, default
    for toggles and sliders.
    """

    kind: ControlKind
    label: str
    options: list[str] = field(default_factory=list)
    minimum: int = 0
    maximum: int = 0
    step: int = 1
    default: Any = None

    @classmethod
    def input(cls, label: str) -> "FormControl":
        return cls(ControlKind.INPUT, label)

    @classmethod
    def dropdown(cls, label: str, options: list[str]) -> "FormControl":
        return cls(ControlKind.DROPDOWN, label, options=list(options))

    @classmethod
    def toggle(cls, label: str, default: bool = False) -> "FormControl":
        return cls(ControlKind.TOGGLE, label, default=default)

    @classmethod
    def slider(
        cls, label: str, minimum: int, maximum: int, step: int, default: int
    ) -> "FormControl":
        return cls(
            ControlKind.SLIDER,
            label,
            minimum=minimum,
            maximum=maximum,
            step=step,
            default=default,
        )

    @classmethod
    def step_slider(cls, label: str, options: list[str]) -> "FormControl":
        return cls(ControlKind.STEP_SLIDER, label, options=list(options))

    def default_response(self) -> Any:
        """The value a client submits when the control is left untouched."""
        if self.kind == ControlKind.INPUT:
            return ""
        if self.kind == ControlKind.TOGGLE:
            return bool(self.default)
        if self.kind == ControlKind.SLIDER:
            return self.default if self.default is not None else self.minimum
        return 0  # first option


@dataclass
class SimpleForm(DataClassJSONMixin):
    """A form of buttons. The response is the clicked button index."""

    title: str
    buttons: list[str] = field(default_factory=list)
    content: str | None = None


@dataclass
class CustomForm(DataClassJSONMixin):
    """A multi-field form. The response is one value per control."""

    title: str
    controls: list[FormControl] = field(default_factory=list)
