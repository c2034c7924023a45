"""Positional parameter declarations: parse raw text, then validate.

Provides:
- ``Parameter``: base class: optionality, repetition, rest-of-line capture.
- ``NumParam``: decimal numbers with optional bounds and rounding.
- ``StringParam``: free text.
- ``round_half_up()``: the rounding rule shared by parsing and display.

Parameters are declared once at registration time and cloned when a
principal narrows them through an override::

    slap = control.register("slap", admin)
    slap.add_param(NumParam(min_value=0, max_value=100))
    slap.add_param(NumParam(min_value=0, max_value=10, default=1).optional())

    override = moderator.allow(slap)
    override.modify_param(1).with_min(0).with_max(50)
"""

from __future__ import annotations

import copy
import math
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Optional

from ..exceptions import ParameterDeclarationError
from .conditions import Condition, ConditionKind

if TYPE_CHECKING:
    from .principals import Principal

ParseResult = tuple[Any, Optional[Condition]]
ValidResult = tuple[bool, Optional[Condition]]


def round_half_up(value: int | float, places: int = 0) -> int | float:
    """Round half up to ``places`` decimals: ``floor(x * 10^p + 0.5) / 10^p``.

    Integers are returned unchanged, as is any float too large to scale
    (such a float has no fractional digits left to round).
    """
    if isinstance(value, int):
        return value
    try:
        scaled = value * 10**places + 0.5
    except OverflowError:
        return value
    if not math.isfinite(scaled):
        return value
    return math.floor(scaled) / 10**places


def _normalize_number(value: int | float) -> int | float:
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


class Parameter(ABC):
    """Base parse/validate rule for one positional argument.

    Attributes:
        min_repeats: Required occurrences. ``0`` makes the slot optional.
        max_repeats: Allowed occurrences. Above 1 only on the last parameter.
        default: Value used when an optional slot is left empty.
        takes_rest_of_line: Join every remaining raw argument into this slot.
        name: Label used in usage text.
    """

    label = "value"

    def __init__(
        self,
        *,
        min_repeats: int = 1,
        max_repeats: int = 1,
        default: Any = None,
        takes_rest_of_line: bool = False,
        name: str | None = None,
    ) -> None:
        self.min_repeats = min_repeats
        self.max_repeats = max_repeats
        self.default = default
        self.takes_rest_of_line = takes_rest_of_line
        self.name = name

    # ── Builders ────────────────────────────────────────

    def with_default(self, default: Any) -> Parameter:
        self.default = default
        return self

    def with_min_repeats(self, min_repeats: int) -> Parameter:
        self.min_repeats = min_repeats
        return self

    def with_max_repeats(self, max_repeats: int) -> Parameter:
        self.max_repeats = max_repeats
        return self

    def rest_of_line(self, takes_rest_of_line: bool = True) -> Parameter:
        self.takes_rest_of_line = takes_rest_of_line
        return self

    def optional(self) -> Parameter:
        """Shortcut for ``with_min_repeats(0)``."""
        return self.with_min_repeats(0)

    @property
    def is_repeating(self) -> bool:
        return self.max_repeats > 1

    # ── Parsing & validation ────────────────────────────

    def parse(self, principal: Principal | None, raw: Any) -> ParseResult:
        """Convert a raw argument, or resolve its absence.

        Returns ``(value, None)`` on success and ``(None, condition)`` on failure.
        """
        if raw is None:
            if self.min_repeats > 0:
                return None, Condition.make(ConditionKind.MISSING_REQUIRED_PARAM)
            return self.default, None
        return self._convert(principal, raw)

    @abstractmethod
    def _convert(self, principal: Principal | None, raw: Any) -> ParseResult:
        raise NotImplementedError

    def is_valid(self, principal: Principal | None, value: Any) -> ValidResult:
        """Check a parsed value. Subclasses call this first, then add their own checks."""
        if value is None and self.min_repeats > 0:
            return False, Condition.make(ConditionKind.MISSING_REQUIRED_PARAM)
        return True, None

    def to_string(self, value: Any) -> str:
        return "" if value is None else str(value)

    # ── Declaration helpers ─────────────────────────────

    def validate_declaration(self) -> None:
        """Raise :class:`ParameterDeclarationError` for an impossible declaration."""
        if self.min_repeats < 0:
            raise ParameterDeclarationError("min_repeats must be >= 0", min_repeats=self.min_repeats)
        if self.max_repeats < 1:
            raise ParameterDeclarationError("max_repeats must be >= 1", max_repeats=self.max_repeats)
        if self.min_repeats > self.max_repeats:
            raise ParameterDeclarationError(
                "min_repeats exceeds max_repeats",
                min_repeats=self.min_repeats,
                max_repeats=self.max_repeats,
            )
        if self.takes_rest_of_line and self.is_repeating:
            raise ParameterDeclarationError(
                "a rest-of-line parameter cannot repeat",
                max_repeats=self.max_repeats,
            )

    def clone(self) -> Parameter:
        """Independent copy; every field is a scalar so a shallow copy suffices."""
        return copy.copy(self)

    def _usage_label(self) -> str:
        return self.name or self.label

    def usage(self) -> str:
        """Short help token, e.g. ``<number 0..100>`` or ``[number=1]...``."""
        core = self._usage_label()
        if self.default is not None:
            core = f"{core}={self.to_string(self.default)}"
        token = f"<{core}>" if self.min_repeats > 0 else f"[{core}]"
        if self.is_repeating:
            token += "..."
        if self.takes_rest_of_line:
            token += " (rest of line)"
        return token

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.usage()})"


class NumParam(Parameter):
    """Decimal number with inclusive bounds and optional rounding.

    Raw numbers and numeric strings parse identically: ``"50"`` -> ``50``.
    Integral results are returned as ``int``.
    """

    label = "number"

    def __init__(
        self,
        *,
        min_value: float = -math.inf,
        max_value: float = math.inf,
        round_to: int | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.min_value = min_value
        self.max_value = max_value
        self.round_to = round_to

    def with_min(self, min_value: float) -> NumParam:
        self.min_value = min_value
        return self

    def with_max(self, max_value: float) -> NumParam:
        self.max_value = max_value
        return self

    def with_round_to(self, places: int | None) -> NumParam:
        self.round_to = places
        return self

    def _convert(self, principal: Principal | None, raw: Any) -> ParseResult:
        if isinstance(raw, bool):
            return None, Condition.make(ConditionKind.INVALID_NUMBER, raw)

        if isinstance(raw, (int, float)):
            number: int | float = raw
        else:
            text = str(raw).strip()
            try:
                number = int(text)
            except ValueError:
                try:
                    number = float(text)
                except ValueError:
                    return None, Condition.make(ConditionKind.INVALID_NUMBER, raw)

        if isinstance(number, float) and not math.isfinite(number):
            return None, Condition.make(ConditionKind.INVALID_NUMBER, raw)

        if self.round_to is not None:
            number = round_half_up(number, self.round_to)

        return _normalize_number(number), None

    def is_valid(self, principal: Principal | None, value: Any) -> ValidResult:
        ok, condition = super().is_valid(principal, value)
        if not ok or value is None:
            return ok, condition

        if value < self.min_value:
            return False, Condition.make(ConditionKind.TOO_LOW, value, _normalize_number(self.min_value))
        if value > self.max_value:
            return False, Condition.make(ConditionKind.TOO_HIGH, value, _normalize_number(self.max_value))
        return True, None

    def to_string(self, value: Any) -> str:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(_normalize_number(value))
        return super().to_string(value)

    def validate_declaration(self) -> None:
        super().validate_declaration()
        if self.min_value > self.max_value:
            raise ParameterDeclarationError(
                "min_value exceeds max_value",
                min_value=self.min_value,
                max_value=self.max_value,
            )
        if self.round_to is not None and self.round_to < 0:
            raise ParameterDeclarationError("round_to must be >= 0", round_to=self.round_to)

    def _usage_label(self) -> str:
        label = super()._usage_label()
        has_min = math.isfinite(self.min_value)
        has_max = math.isfinite(self.max_value)
        if has_min and has_max:
            return f"{label} {self.to_string(self.min_value)}..{self.to_string(self.max_value)}"
        if has_min:
            return f"{label} >={self.to_string(self.min_value)}"
        if has_max:
            return f"{label} <={self.to_string(self.max_value)}"
        return label


class StringParam(Parameter):
    """Free text. Numbers are accepted and rendered with ``str()``."""

    label = "string"

    def _convert(self, principal: Principal | None, raw: Any) -> ParseResult:
        if isinstance(raw, str):
            return raw, None
        if isinstance(raw, (int, float)) and not isinstance(raw, bool):
            return str(raw), None
        return None, Condition.make(ConditionKind.INVALID_STRING, raw)


__all__ = [
    "NumParam",
    "Parameter",
    "StringParam",
    "round_half_up",
]
