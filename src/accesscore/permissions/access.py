"""Named capabilities and their ordered parameter lists.

An :class:`Access` is created by :meth:`AccessControl.register` and is
looked up by object reference, never by tag, during evaluation. A
principal's override is a clone of the registered access that remembers
its origin and carries its own, independently tightened parameters.
"""

from __future__ import annotations

import logging

from ..exceptions import ParameterDeclarationError
from .parameters import Parameter

logger = logging.getLogger(__name__)


class Access:
    """A capability such as ``slap`` with its positional parameter layout.

    Attributes:
        tag: Registration name, unique within one AccessControl.
        description: Optional help text for hosts.
        params: Ordered default parameters. Position defines argument mapping.

    The parameter list is frozen (``sealed``) once the access is cloned
    into an override or evaluated for the first time.
    """

    def __init__(self, tag: str, *, description: str | None = None, origin: Access | None = None) -> None:
        self.tag = tag
        self.description = description
        self.params: list[Parameter] = []
        self._origin = origin
        self._sealed = False

    @property
    def origin(self) -> Access:
        """The registered access this one derives from (itself if registered)."""
        return self._origin if self._origin is not None else self

    @property
    def is_override(self) -> bool:
        return self._origin is not None

    @property
    def sealed(self) -> bool:
        return self.origin._sealed

    def seal(self) -> None:
        self.origin._sealed = True

    def add_param(self, param: Parameter) -> Access:
        """Append a parameter. Returns ``self`` for chaining.

        Raises:
            ParameterDeclarationError: on overrides, after sealing, when the
                list already ends in a repeating or rest-of-line parameter,
                or when ``param`` itself is inconsistent.
        """
        if self.is_override:
            raise ParameterDeclarationError(
                "parameters can only be added to a registered access",
                tag=self.tag,
            )
        if self._sealed:
            raise ParameterDeclarationError(
                "access is already in use, its parameters are frozen",
                tag=self.tag,
            )

        param.validate_declaration()

        if self.params:
            last = self.params[-1]
            if last.is_repeating or last.takes_rest_of_line:
                raise ParameterDeclarationError(
                    "a repeating or rest-of-line parameter must be the last one",
                    tag=self.tag,
                    index=len(self.params),
                )

        self.params.append(param)
        logger.debug("access %s: parameter %d = %r", self.tag, len(self.params), param)
        return self

    def modify_param(self, index: int) -> Parameter | None:
        """Replace the parameter at 1-based ``index`` with a clone and return it.

        Returns None when ``index`` is out of range.
        """
        if not 1 <= index <= len(self.params):
            return None
        clone = self.params[index - 1].clone()
        self.params[index - 1] = clone
        return clone

    def clone(self) -> Access:
        """Override copy: same tag and origin, independently owned parameters."""
        self.seal()
        new = Access(self.tag, description=self.description, origin=self.origin)
        new.params = [param.clone() for param in self.params]
        return new

    @property
    def max_args(self) -> int | None:
        """Most raw arguments accepted, None when the last parameter takes the rest of the line."""
        if not self.params:
            return 0
        last = self.params[-1]
        if last.takes_rest_of_line:
            return None
        return len(self.params) - 1 + last.max_repeats

    def usage(self) -> str:
        """``tag`` followed by each parameter's usage token."""
        return " ".join([self.tag, *(param.usage() for param in self.params)])

    def __repr__(self) -> str:
        kind = "override" if self.is_override else "access"
        return f"<{kind} {self.tag!r} params={len(self.params)}>"


__all__ = ["Access"]
