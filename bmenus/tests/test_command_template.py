"""Tests for command template parsing, form rendering and substitution."""

import pytest

from bmenus.commands.template import ArgType, Argument, CommandTemplate, label_for
from bmenus.exceptions import TemplateError
from bmenus.users.forms import ControlKind


class TestArgumentParsing:
    """Unit tests for placeholder parsing."""

    def test_label_only_is_input(self):
        arg = Argument.parse("Message")
        assert arg.label == "Message"
        assert arg.type == ArgType.INPUT

    def test_type_keyword_is_case_insensitive(self):
        assert Argument.parse("Player, Player_List").type == ArgType.PLAYER_LIST
        assert Argument.parse("On, TOGGLE").type == ArgType.TOGGLE

    def test_unknown_type_falls_back_to_input(self):
        arg = Argument.parse("Thing, colour_picker")
        assert arg.type == ArgType.INPUT
        assert arg.label == "Thing"

    def test_dropdown_options(self):
        arg = Argument.parse("Mode, dropdown, survival, creative , adventure")
        assert arg.type == ArgType.DROPDOWN
        assert arg.options == ["survival", "creative", "adventure"]

    def test_quoted_options(self):
        arg = Argument.parse('Item, dropdown, "diamond,emerald, gold"')
        assert arg.options == ["diamond", "emerald", "gold"]

    def test_quoted_label(self):
        arg = Argument.parse('"Name, first", input')
        assert arg.label == "Name, first"

    def test_slider_bounds(self):
        arg = Argument.parse("Amount, slider, 1, 64, 2")
        assert (arg.min, arg.max, arg.step) == (1, 64, 2)

    def test_slider_partial_bounds(self):
        arg = Argument.parse("Amount, slider, 5")
        assert (arg.min, arg.max, arg.step) == (5, 0, 1)

    def test_slider_without_bounds(self):
        arg = Argument.parse("Amount, slider")
        assert (arg.min, arg.max, arg.step) == (0, 0, 1)

    def test_slider_bad_bounds(self):
        with pytest.raises(TemplateError):
            Argument.parse("Amount, slider, one, 10")

    def test_step_slider_options(self):
        arg = Argument.parse("Time, step_slider, day, night")
        assert arg.type == ArgType.STEP_SLIDER
        assert arg.options == ["day", "night"]


class TestCommandTemplate:
    """Tests for whole-template behavior."""

    def test_arguments_in_order(self):
        template = CommandTemplate.parse(
            "/give {Player, player_list} {Item, dropdown, a, b} {Count, slider, 1, 64}"
        )
        assert [a.label for a in template.arguments] == ["Player", "Item", "Count"]
        assert [a.type for a in template.arguments] == [
            ArgType.PLAYER_LIST,
            ArgType.DROPDOWN,
            ArgType.SLIDER,
        ]
        assert template.fragments == ["/give ", " ", " ", ""]

    def test_no_arguments(self):
        template = CommandTemplate.parse("/spawn")
        assert template.arguments == []
        assert template.substitute([]) == "/spawn"

    def test_substitute_fills_left_to_right(self):
        template = CommandTemplate.parse("/msg {Player, player_list} {Message}")
        assert template.substitute(["bob", "hi there"]) == "/msg bob hi there"

    def test_substitute_does_not_rescan_values(self):
        """A value that looks like a placeholder is inserted verbatim."""
        template = CommandTemplate.parse("/msg {Player} {Message}")
        assert template.substitute(["{Message}", "x"]) == "/msg {Message} x"

    def test_substitute_duplicate_placeholders(self):
        template = CommandTemplate.parse("/tp {Who} {Who}")
        assert template.substitute(["a", "b"]) == "/tp a b"

    def test_substitute_count_mismatch(self):
        template = CommandTemplate.parse("/msg {Player} {Message}")
        with pytest.raises(TemplateError):
            template.substitute(["bob"])

    def test_render_controls(self):
        template = CommandTemplate.parse(
            "/x {Text} {Pick, dropdown, a, b} {Who, player_list} {Flag, toggle} "
            "{N, slider, 2, 8, 2} {Step, step_slider, lo, hi}"
        )
        command_form = template.render("Title", lambda: ["alex", "bob"])
        controls = command_form.form.controls

        assert command_form.form.title == "Title"
        assert [c.kind for c in controls] == [
            ControlKind.INPUT,
            ControlKind.DROPDOWN,
            ControlKind.DROPDOWN,
            ControlKind.TOGGLE,
            ControlKind.SLIDER,
            ControlKind.STEP_SLIDER,
        ]
        assert controls[2].options == ["alex", "bob"]
        assert controls[3].default is False
        assert (controls[4].minimum, controls[4].maximum, controls[4].step) == (2, 8, 2)
        assert controls[4].default == 2
        assert controls[5].options == ["lo", "hi"]

    def test_render_queries_roster_once(self):
        calls = []

        def roster():
            calls.append(1)
            return ["alex"]

        template = CommandTemplate.parse("/tp {From, player_list} {To, player_list}")
        template.render("Teleport", roster)
        assert len(calls) == 1

    def test_render_without_player_list_skips_roster(self):
        def roster():
            raise AssertionError("roster should not be requested")

        CommandTemplate.parse("/say {Message}").render("Say", roster)


class TestFormResponse:
    """Tests for converting form responses back into a command."""

    def _form(self, roster=None):
        template = CommandTemplate.parse(
            "/x {Text} {Pick, dropdown, a, b} {Who, player_list} {Flag, toggle} "
            "{N, slider, 0, 10} {Step, step_slider, lo, hi}"
        )
        return template.render("T", lambda: roster or ["alex", "bob"])

    def test_values_from_response(self):
        command_form = self._form()
        values = command_form.values_from_response(["hello", 1, 0, True, 7.0, 1])
        assert values == ["hello", "b", "alex", "true", "7", "hi"]
        assert command_form.template.substitute(values) == "/x hello b alex true 7 hi"

    def test_defaults_round_trip(self):
        command_form = self._form()
        defaults = [c.default_response() for c in command_form.form.controls]
        assert command_form.values_from_response(defaults) == ["", "a", "alex", "false", "0", "lo"]

    def test_player_index_resolves_against_rendered_roster(self):
        roster = ["alex", "bob"]
        command_form = self._form(roster)
        roster.append("carol")
        roster.sort(reverse=True)
        values = command_form.values_from_response(["", 0, 1, False, 0, 0])
        assert values[2] == "bob"

    def test_short_response(self):
        with pytest.raises(TemplateError):
            self._form().values_from_response(["hello"])

    def test_index_out_of_range(self):
        with pytest.raises(TemplateError):
            self._form().values_from_response(["", 5, 0, False, 0, 0])

    def test_bad_slider_value(self):
        with pytest.raises(TemplateError):
            self._form().values_from_response(["", 0, 0, False, "lots", 0])


class TestLabelFor:
    def test_plain_command(self):
        assert label_for("/spawn") == "/spawn"

    def test_placeholders_collapse(self):
        assert label_for("/msg {Player, player_list} {Message}") == "/msg"
        assert label_for("/tp {Who} here") == "/tp here"
