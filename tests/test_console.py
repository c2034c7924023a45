"""Tests for the command-line tokenizer and dispatcher."""

from __future__ import annotations

import logging

import pytest

from accesscore import (
    AccessControl,
    CommandTable,
    ConditionKind,
    NumParam,
    StringParam,
    UnknownCommandError,
    UnknownPrincipalError,
    parse_args,
)


class TestParseArgs:
    """Tests for parse_args."""

    def test_quoted_spans(self) -> None:
        tokens, mismatched = parse_args('This is a "Cool sentence to" make "split up"')
        assert tokens == ["This", "is", "a", "Cool sentence to", "make", "split up"]
        assert mismatched is False

    def test_whitespace_outside_quotes_collapses(self) -> None:
        assert parse_args("  slap   bob\t50  ") == (["slap", "bob", "50"], False)

    def test_quoted_whitespace_is_kept(self) -> None:
        assert parse_args('say "  spaced  "') == (["say", "  spaced  "], False)

    def test_empty_quotes(self) -> None:
        assert parse_args('name ""') == (["name", ""], False)

    def test_mismatched_quote_groups_remainder(self) -> None:
        tokens, mismatched = parse_args('say "hello there world')
        assert tokens == ["say", "hello there world"]
        assert mismatched is True

    def test_adjacent_quote(self) -> None:
        assert parse_args('a"b c"d') == (["a", "b c", "d"], False)

    def test_empty_line(self) -> None:
        assert parse_args("") == ([], False)
        assert parse_args("   ") == ([], False)


@pytest.fixture
def console():
    control = AccessControl()
    admin = control.root.create_cloned_group("admin")
    slap = control.register("slap", admin)
    slap.add_param(NumParam(min_value=0, max_value=100))
    say = control.register("say", control.root, admin)
    say.add_param(StringParam(takes_rest_of_line=True))

    admin.create_cloned_user("admin1")
    control.root.create_cloned_user("guest")

    calls: list[tuple] = []
    table = CommandTable(control)
    table.add("slap", slap, lambda user, damage: calls.append(("slap", user.display_name, damage)) or damage)
    table.add("say", say, lambda user, text: calls.append(("say", user.display_name, text)) or text)
    return table, calls


class TestCommandTable:
    """Tests for CommandTable.run."""

    def test_allowed_command_runs_handler(self, console) -> None:
        table, calls = console
        outcome = table.run("admin1", "slap 50")
        assert outcome.allowed
        assert outcome.value == 50
        assert calls == [("slap", "admin1", 50)]

    def test_denied_command_skips_handler(self, console) -> None:
        table, calls = console
        outcome = table.run("guest", "slap 50")
        assert not outcome.allowed
        assert outcome.value is None
        assert outcome.result.condition.is_a(ConditionKind.ACCESS_DENIED)
        assert calls == []

    def test_parameter_denial(self, console) -> None:
        table, calls = console
        outcome = table.run("admin1", "slap 500")
        assert outcome.result.condition.is_a(ConditionKind.TOO_HIGH)
        assert calls == []

    def test_rest_of_line(self, console) -> None:
        table, _ = console
        assert table.run("guest", "say hello   world").value == "hello world"
        assert table.run("guest", 'say "hello   world"').value == "hello   world"

    def test_command_names_are_case_insensitive(self, console) -> None:
        table, _ = console
        assert "SLAP" in table
        assert table.run("admin1", "SLAP 1").allowed

    def test_unknown_command(self, console) -> None:
        table, _ = console
        with pytest.raises(UnknownCommandError):
            table.run("admin1", "ban bob")
        with pytest.raises(UnknownCommandError):
            table.run("admin1", "   ")

    def test_unknown_alias(self, console) -> None:
        table, _ = console
        with pytest.raises(UnknownPrincipalError):
            table.run("ghost", "say hi")

    def test_mismatched_quote_is_logged(self, console, caplog: pytest.LogCaptureFixture) -> None:
        table, _ = console
        with caplog.at_level(logging.WARNING, logger="accesscore"):
            outcome = table.run("guest", 'say "unterminated text')

        assert outcome.value == "unterminated text"
        assert any("mismatched quote" in r.getMessage() for r in caplog.records)
