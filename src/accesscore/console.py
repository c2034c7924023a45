"""Command-line boundary: tokenizer and access-checked command dispatch.

Provides:
- ``parse_args()``: split a command line, keeping double-quoted spans intact.
- ``CommandTable``: bind command words to accesses and handlers, then run lines.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable

from .exceptions import UnknownCommandError, UnknownPrincipalError
from .logging import safe_log_value
from .permissions import Access, AccessControl, AccessResult, Principal

logger = logging.getLogger(__name__)

Handler = Callable[..., Any]


def parse_args(line: str) -> tuple[list[str], bool]:
    """Split ``line`` on whitespace, except inside double quotes.

    Text outside quotes is trimmed and split; quoted text is kept verbatim,
    including empty quoted spans. An unmatched quote groups the remainder
    into one argument.

    Returns:
        ``(tokens, had_mismatched_quote)``

    Example::

        parse_args('This is a "Cool sentence to" make "split up"')
        # (['This', 'is', 'a', 'Cool sentence to', 'make', 'split up'], False)
    """
    argv: list[str] = []
    pos = 0
    in_quote = False

    while pos < len(line):
        quote_pos = line.find('"', pos)
        prefix = line[pos:] if quote_pos == -1 else line[pos:quote_pos]

        if in_quote:
            argv.append(prefix)
        else:
            argv.extend(prefix.split())

        if quote_pos == -1:
            break
        pos = quote_pos + 1
        in_quote = not in_quote

    return argv, in_quote


@dataclass(frozen=True)
class CommandOutcome:
    """Result of :meth:`CommandTable.run`. ``value`` is the handler's return value."""

    result: AccessResult
    value: Any = None

    @property
    def allowed(self) -> bool:
        return self.result.allowed


@dataclass(frozen=True)
class _Command:
    access: Access
    handler: Handler


class CommandTable:
    """Maps command words to an access and a handler.

    Handlers receive the calling principal followed by the parsed arguments::

        table = CommandTable(control)
        table.add("slap", slap, lambda user, damage: do_slap(user, damage))
        table.run("STEAM_0:1:123", "slap 50")
    """

    def __init__(self, control: AccessControl) -> None:
        self._control = control
        self._commands: dict[str, _Command] = {}

    def add(self, name: str, access: Access, handler: Handler) -> None:
        self._commands[name.lower()] = _Command(access=access.origin, handler=handler)

    def __contains__(self, name: str) -> bool:
        return name.lower() in self._commands

    def run(self, alias: str, line: str) -> CommandOutcome:
        """Tokenize ``line``, check access for ``alias`` and call the handler if allowed.

        Raises:
            UnknownCommandError: empty line or unbound command word.
            UnknownPrincipalError: no user is bound to ``alias``.
        """
        tokens, mismatched = parse_args(line)
        if mismatched:
            logger.warning(
                "mismatched quote in command line from %s: %s",
                alias,
                safe_log_value(line, redact=self._control.config.redact_args),
            )
        if not tokens:
            raise UnknownCommandError("empty command line", alias=alias)

        name, args = tokens[0], tokens[1:]
        command = self._commands.get(name.lower())
        if command is None:
            raise UnknownCommandError(f"unknown command {name!r}", command=name)

        user = self._control.user_from_id(alias)
        if user is None:
            raise UnknownPrincipalError(f"no user is bound to alias {alias!r}", alias=alias)

        result = user.check_access(command.access, *args)
        if not result.allowed:
            return CommandOutcome(result=result)
        return CommandOutcome(result=result, value=self._invoke(command, user, result))

    @staticmethod
    def _invoke(command: _Command, user: Principal, result: AccessResult) -> Any:
        logger.debug("running %s for %s", command.access.tag, user.display_name)
        return command.handler(user, *result.args)


__all__ = [
    "CommandOutcome",
    "CommandTable",
    "parse_args",
]
