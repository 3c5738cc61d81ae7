"""Command templates."""

from .template import ArgType, Argument, CommandForm, CommandTemplate, label_for

__all__ = ["ArgType", "Argument", "CommandForm", "CommandTemplate", "label_for"]
