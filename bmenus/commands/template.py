"""
Command templates with typed placeholder arguments.

A template is a command string containing placeholders such as
``{Target, player_list}`` or ``{Amount, slider, 1, 64, 1}``. Each placeholder
holds a label, an optional type keyword and type-specific parameters,
separated by commas (commas inside double quotes do not separate):

    /give {Player, player_list} {Item, dropdown, "diamond,emerald"} {Count, slider, 1, 64}
    /gamemode {Mode, step_slider, survival, creative} {Announce, toggle}
    /msg {Player, player_list} {Message}

Parsing yields the literal fragments between placeholders plus one Argument
per placeholder. A form is rendered from the arguments and the submitted
values are spliced back between the fragments in argument order.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable

from ..exceptions import TemplateError
from ..users.forms import CustomForm, FormControl

logger = logging.getLogger(__name__)

PLACEHOLDER_PATTERN = re.compile(r"\{[^}]+\}")
_LABEL_PATTERN = re.compile(r"\s*\{[^}]+\}\s*")
_OPTION_SEPARATOR = re.compile(r"\s*,\s*")


class ArgType(str, Enum):
    """Type tag of a placeholder argument."""

    INPUT = "INPUT"
    DROPDOWN = "DROPDOWN"
    PLAYER_LIST = "PLAYER_LIST"
    TOGGLE = "TOGGLE"
    SLIDER = "SLIDER"
    STEP_SLIDER = "STEP_SLIDER"

    @classmethod
    def from_keyword(cls, keyword: str) -> ArgType:
        """Convert a type keyword (any case), defaulting to INPUT if unknown."""
        try:
            return cls(keyword.strip().upper())
        except ValueError:
            logger.warning("Unknown argument type: %s, defaulting to INPUT", keyword)
            return cls.INPUT


def _split_fields(content: str) -> list[str]:
    """Split placeholder content on commas that are not inside double quotes."""
    parts: list[str] = []
    current: list[str] = []
    in_quotes = False
    for char in content:
        if char == '"':
            in_quotes = not in_quotes
        elif char == "," and not in_quotes:
            parts.append("".join(current).strip())
            current = []
            continue
        current.append(char)
    parts.append("".join(current).strip())
    return parts


def _strip_quotes(value: str) -> str:
    value = value.strip()
    if len(value) >= 2 and value.startswith('"') and value.endswith('"'):
        value = value[1:-1]
    return value


def _split_options(value: str) -> list[str]:
    options = _OPTION_SEPARATOR.split(value)
    while options and not options[-1]:
        options.pop()
    return options


@dataclass
class Argument:
    """A typed placeholder argument."""

    label: str
    type: ArgType = ArgType.INPUT
    options: list[str] = field(default_factory=list)
    min: int = 0
    max: int = 0
    step: int = 1

    @classmethod
    def parse(cls, content: str) -> Argument:
        """
        Parse the text between a placeholder's braces.

        Raises:
            TemplateError: If a slider bound is not an integer.
        """
        parts = _split_fields(content)
        label = _strip_quotes(parts[0])
        arg_type = ArgType.from_keyword(parts[1]) if len(parts) > 1 else ArgType.INPUT
        arg = cls(label=label, type=arg_type)

        if len(parts) <= 2:
            return arg

        extra = ",".join(parts[2:])
        if arg_type in (ArgType.DROPDOWN, ArgType.STEP_SLIDER):
            arg.options = _split_options(_strip_quotes(extra))
        elif arg_type == ArgType.SLIDER:
            bounds = _split_options(extra)
            try:
                if len(bounds) > 0:
                    arg.min = int(bounds[0])
                if len(bounds) > 1:
                    arg.max = int(bounds[1])
                if len(bounds) > 2:
                    arg.step = int(bounds[2])
            except ValueError:
                raise TemplateError(
                    f"Invalid slider bounds for '{label}': {extra}"
                ) from None
        return arg


@dataclass
class CommandForm:
    """
    A rendered command form.

    Keeps the option lists shown to the player so that selected indexes are
    resolved against exactly what was displayed, even if the live player
    list has changed since.
    """

    template: CommandTemplate
    form: CustomForm
    option_lists: list[list[str] | None]

    def values_from_response(self, response: list[Any]) -> list[str]:
        """
        Convert raw form response values to one string per argument.

        Raises:
            TemplateError: If the response does not match the form.
        """
        arguments = self.template.arguments
        if len(response) < len(arguments):
            raise TemplateError(
                f"Expected {len(arguments)} values, got {len(response)}"
            )

        values: list[str] = []
        for arg, raw, options in zip(arguments, response, self.option_lists):
            if arg.type == ArgType.INPUT:
                values.append("" if raw is None else str(raw))
            elif arg.type == ArgType.TOGGLE:
                values.append("true" if raw else "false")
            elif arg.type == ArgType.SLIDER:
                try:
                    values.append(str(int(float(raw))))
                except (TypeError, ValueError):
                    raise TemplateError(f"Invalid slider value: {raw!r}") from None
            else:
                try:
                    values.append(options[int(raw)])
                except (IndexError, TypeError, ValueError):
                    raise TemplateError(
                        f"Invalid selection {raw!r} for '{arg.label}'"
                    ) from None
        return values


class CommandTemplate:
    """A command string split into literal fragments and typed arguments."""

    def __init__(self, raw: str, fragments: list[str], arguments: list[Argument]):
        self.raw = raw
        self.fragments = fragments  # len(fragments) == len(arguments) + 1
        self.arguments = arguments

    @classmethod
    def parse(cls, raw: str) -> CommandTemplate:
        """
        Parse a command string.

        Raises:
            TemplateError: If an argument's parameters are malformed.
        """
        fragments: list[str] = []
        arguments: list[Argument] = []
        position = 0
        for match in PLACEHOLDER_PATTERN.finditer(raw):
            fragments.append(raw[position : match.start()])
            arguments.append(Argument.parse(match.group()[1:-1]))
            position = match.end()
        fragments.append(raw[position:])
        return cls(raw, fragments, arguments)

    def render(
        self, title: str, player_names: Callable[[], list[str]]
    ) -> CommandForm:
        """
        Build the input form for this template.

        Args:
            title: Form title.
            player_names: Provides the roster for player_list arguments. Called
                at most once per render.
        """
        controls: list[FormControl] = []
        option_lists: list[list[str] | None] = []
        roster: list[str] | None = None

        for arg in self.arguments:
            if arg.type == ArgType.INPUT:
                controls.append(FormControl.input(arg.label))
                option_lists.append(None)
            elif arg.type == ArgType.DROPDOWN:
                controls.append(FormControl.dropdown(arg.label, arg.options))
                option_lists.append(list(arg.options))
            elif arg.type == ArgType.PLAYER_LIST:
                if roster is None:
                    roster = list(player_names())
                controls.append(FormControl.dropdown(arg.label, roster))
                option_lists.append(roster)
            elif arg.type == ArgType.TOGGLE:
                controls.append(FormControl.toggle(arg.label, False))
                option_lists.append(None)
            elif arg.type == ArgType.SLIDER:
                controls.append(
                    FormControl.slider(arg.label, arg.min, arg.max, arg.step, arg.min)
                )
                option_lists.append(None)
            elif arg.type == ArgType.STEP_SLIDER:
                controls.append(FormControl.step_slider(arg.label, arg.options))
                option_lists.append(list(arg.options))

        return CommandForm(self, CustomForm(title=title, controls=controls), option_lists)

    def substitute(self, values: list[str]) -> str:
        """
        Fill in the placeholders, left to right, with the given values.

        Values are inserted verbatim and never re-scanned, so a value that
        looks like a placeholder stays as typed.

        Raises:
            TemplateError: If the number of values differs from the arguments.
        """
        if len(values) != len(self.arguments):
            raise TemplateError(
                f"Expected {len(self.arguments)} values, got {len(values)}"
            )
        parts = [self.fragments[0]]
        for value, fragment in zip(values, self.fragments[1:]):
            parts.append(value)
            parts.append(fragment)
        return "".join(parts)


def label_for(command: str) -> str:
    """Human-readable label for a command: placeholders collapsed to spaces."""
    return _LABEL_PATTERN.sub(" ", command).strip()
