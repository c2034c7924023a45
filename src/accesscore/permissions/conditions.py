"""Structured denial reasons returned by the evaluator.

Provides:
- ``ConditionKind``: the fixed set of denial kinds, each with a message template.
- ``DeniedLevel``: denial severity (no access / command parameters / user parameters).
- ``Condition``: one denial: kind, level, parameter index and rendered message.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from ..exceptions import InvariantError


class ConditionKind(str, Enum):
    """Denial kinds. ``template`` is a %-style format for the message."""

    ACCESS_DENIED = "access_denied"
    MISSING_REQUIRED_PARAM = "missing_required_param"
    TOO_MANY_PARAMS = "too_many_params"
    INVALID_NUMBER = "invalid_number"
    INVALID_STRING = "invalid_string"
    TOO_LOW = "too_low"
    TOO_HIGH = "too_high"

    @property
    def template(self) -> str:
        return _TEMPLATES[self]


_TEMPLATES: dict[ConditionKind, str] = {
    ConditionKind.ACCESS_DENIED: "access denied",
    ConditionKind.MISSING_REQUIRED_PARAM: "argument is required and was left unspecified",
    ConditionKind.TOO_MANY_PARAMS: "too many arguments specified, at most %s allowed",
    ConditionKind.INVALID_NUMBER: 'invalid number "%s" specified',
    ConditionKind.INVALID_STRING: 'invalid string "%s" specified',
    ConditionKind.TOO_LOW: "specified number %s is below your allowed minimum of %s",
    ConditionKind.TOO_HIGH: "specified number %s is above your allowed maximum of %s",
}


class DeniedLevel(str, Enum):
    """Why a check failed.

    NO_ACCESS: the principal holds no grant (or an explicit deny).
    PARAMETERS: an argument violates the access's own declaration.
    USER_PARAMETERS: an argument violates the principal's override.
    """

    NO_ACCESS = "no_access"
    PARAMETERS = "parameters"
    USER_PARAMETERS = "user_parameters"


_UNSET: Any = object()


class Condition:
    """A single denial reason.

    Built by parameters with :meth:`make`; the evaluator then stamps
    the level and the 1-based parameter index exactly once each before
    handing the condition back to the caller.

    Example::

        cond = Condition.make(ConditionKind.TOO_HIGH, 101, 100)
        cond.with_level(DeniedLevel.PARAMETERS).with_parameter_index(1)
        cond.message  # "specified number 101 is above your allowed maximum of 100"
    """

    __slots__ = ("kind", "message", "format_args", "_level", "_parameter_index")

    def __init__(self, kind: ConditionKind, message: str, format_args: tuple[Any, ...] = ()) -> None:
        self.kind = kind
        self.message = message
        self.format_args = format_args
        self._level: DeniedLevel | None = _UNSET
        self._parameter_index: int | None = _UNSET

    @classmethod
    def make(cls, kind: ConditionKind, *format_args: Any) -> Condition:
        """Render the kind's template with ``format_args`` (no arity check)."""
        template = kind.template
        message = template % format_args if format_args else template
        return cls(kind, message, format_args)

    @property
    def level(self) -> DeniedLevel | None:
        return None if self._level is _UNSET else self._level

    @property
    def parameter_index(self) -> int | None:
        return None if self._parameter_index is _UNSET else self._parameter_index

    def with_level(self, level: DeniedLevel) -> Condition:
        if self._level is not _UNSET:
            raise InvariantError(
                "condition level is already set",
                kind=self.kind.value,
                level=self._level,
            )
        self._level = level
        return self

    def with_parameter_index(self, index: int | None) -> Condition:
        if self._parameter_index is not _UNSET:
            raise InvariantError(
                "condition parameter index is already set",
                kind=self.kind.value,
                parameter_index=self._parameter_index,
            )
        if index is not None and index < 1:
            raise InvariantError("parameter index must be positive", parameter_index=index)
        self._parameter_index = index
        return self

    def is_a(self, kind: ConditionKind) -> bool:
        return self.kind is kind

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return (
            f"Condition(kind={self.kind.value!r}, level={self.level!r}, "
            f"parameter_index={self.parameter_index!r}, message={self.message!r})"
        )


__all__ = [
    "Condition",
    "ConditionKind",
    "DeniedLevel",
]
