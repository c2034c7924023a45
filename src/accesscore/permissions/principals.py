"""Groups, users and the access evaluator.

A :class:`Principal` is a node in the group tree. Children are created
by cloning: they receive their own copies of the parent's grants and
denials, so later changes to the parent never reach existing children.
Users are leaf principals bound to one or more external aliases.

:meth:`Principal.check_access` is the evaluator. Denials come back as an
:class:`AccessResult` carrying a :class:`Condition`; they are never raised.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Iterable, Union

from ..exceptions import RegistrationError
from ..logging import get_access_logger, safe_log_value
from .access import Access
from .conditions import Condition, ConditionKind, DeniedLevel
from .parameters import Parameter

if TYPE_CHECKING:
    from .registry import AccessControl

logger = get_access_logger(__name__)


class _BlanketAllow:
    """Grant marker: the access's own declared bounds apply unmodified."""

    _instance: _BlanketAllow | None = None

    def __new__(cls) -> _BlanketAllow:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "BLANKET"


BLANKET = _BlanketAllow()

Grant = Union[_BlanketAllow, Access]


@dataclass(frozen=True)
class AccessResult:
    """Verdict of :meth:`Principal.check_access`.

    ``args`` holds the parsed values when allowed; ``condition`` explains a denial.
    """

    allowed: bool
    args: tuple[Any, ...] = ()
    condition: Condition | None = None

    @property
    def denied(self) -> bool:
        return not self.allowed

    def __bool__(self) -> bool:
        return self.allowed


def _slot_count(params: list[Parameter], arg_count: int) -> int:
    """Positional slots to evaluate: every argument, and at least every required slot."""
    if not params:
        return arg_count
    last = params[-1]
    required = len(params) - 1 + max(last.min_repeats, 1)
    return max(arg_count, required)


class Principal:
    """A group or user in the permission hierarchy.

    Do not construct directly; start from :attr:`AccessControl.root` and use
    :meth:`create_cloned_group` / :meth:`create_cloned_user`.
    """

    def __init__(
        self,
        control: AccessControl,
        *,
        name: str | None = None,
        parent: Principal | None = None,
        aliases: Iterable[str] = (),
    ) -> None:
        self._control = control
        self.name = name
        self.parent = parent
        self.aliases: tuple[str, ...] = tuple(aliases)
        self._allow: dict[Access, Grant] = {}
        self._deny: set[Access] = set()

    @property
    def is_user(self) -> bool:
        return bool(self.aliases)

    @property
    def display_name(self) -> str:
        if self.name:
            return self.name
        return self.aliases[0] if self.aliases else "<anonymous>"

    @property
    def group_name(self) -> str | None:
        """Name of the nearest named group, this principal included."""
        node: Principal | None = self
        while node is not None:
            if node.name:
                return node.name
            node = node.parent
        return None

    # ── Cloning ─────────────────────────────────────────

    def _clone(self, **kwargs: Any) -> Principal:
        if self.is_user:
            raise RegistrationError(
                "users are leaf principals and cannot be cloned",
                principal=self.display_name,
            )
        child = Principal(self._control, parent=self, **kwargs)
        child._allow = {
            access: grant if grant is BLANKET else grant.clone()
            for access, grant in self._allow.items()
        }
        child._deny = set(self._deny)
        return child

    def create_cloned_group(self, name: str) -> Principal:
        """New child group registered under ``name``."""
        child = self._clone(name=name)
        self._control._add_group(child)
        return child

    def create_cloned_user(self, *aliases: str) -> Principal:
        """New user bound to every alias in ``aliases`` (at least one)."""
        if not aliases:
            raise RegistrationError("a user needs at least one alias", group=self.display_name)
        child = self._clone(aliases=aliases)
        self._control._bind_aliases(child)
        return child

    # ── Grants ──────────────────────────────────────────

    def _grant(self, access: Access) -> None:
        self._allow[access.origin] = BLANKET
        self._deny.discard(access.origin)

    def allow(self, access: Access) -> Access:
        """Install an override clone of ``access`` and return it for tightening.

        An untouched override behaves exactly like a blanket grant. Clears an
        explicit :meth:`deny` of the same access.
        """
        override = access.clone()
        self._allow[access.origin] = override
        self._deny.discard(access.origin)
        return override

    def deny(self, access: Access) -> None:
        """Explicitly deny ``access``; dominates any grant."""
        self._deny.add(access.origin)

    def grant_for(self, access: Access) -> Grant | None:
        """``BLANKET``, the override access, or None when not granted."""
        return self._allow.get(access.origin)

    def is_denied(self, access: Access) -> bool:
        return access.origin in self._deny

    # ── Evaluation ──────────────────────────────────────

    def check_access(self, access: Access, *args: Any) -> AccessResult:
        """Decide whether this principal may use ``access`` with ``args``.

        Order of checks:
        1. explicit deny or no grant -> ``ACCESS_DENIED`` at ``NO_ACCESS``;
        2. per slot: too many arguments, parse failure, the access's own
           bounds (``PARAMETERS``), then the override's bounds
           (``USER_PARAMETERS``).

        The first failure wins and carries its 1-based parameter index.
        """
        access = access.origin
        access.seal()

        if access in self._deny or access not in self._allow:
            condition = Condition.make(ConditionKind.ACCESS_DENIED)
            return self._denied(access, args, condition, DeniedLevel.NO_ACCESS, None)

        override = self._allow[access]
        defaults = access.params
        arg_count = len(args)
        parsed: list[Any] = []

        for i in range(1, _slot_count(defaults, arg_count) + 1):
            raw = args[i - 1] if i <= arg_count else None

            if i <= len(defaults):
                active = i - 1
                param = defaults[active]
                if param.takes_rest_of_line and arg_count > i:
                    raw = " ".join(str(arg) for arg in args[i - 1 :])
            elif defaults and 1 + i - len(defaults) <= defaults[-1].max_repeats:
                active = len(defaults) - 1
                param = defaults[active]
            else:
                condition = Condition.make(ConditionKind.TOO_MANY_PARAMS, access.max_args)
                return self._denied(access, args, condition, DeniedLevel.PARAMETERS, i)

            value, condition = param.parse(self, raw)
            if condition is not None:
                return self._denied(access, args, condition, DeniedLevel.PARAMETERS, i)

            ok, condition = param.is_valid(self, value)
            if not ok:
                return self._denied(access, args, condition, DeniedLevel.PARAMETERS, i)

            if override is not BLANKET:
                ok, condition = override.params[active].is_valid(self, value)
                if not ok:
                    return self._denied(access, args, condition, DeniedLevel.USER_PARAMETERS, i)

            parsed.append(value)
            if param.takes_rest_of_line:
                break

        return AccessResult(allowed=True, args=tuple(parsed))

    def _denied(
        self,
        access: Access,
        args: tuple[Any, ...],
        condition: Condition,
        level: DeniedLevel,
        index: int | None,
    ) -> AccessResult:
        condition.with_level(level).with_parameter_index(index)

        config = self._control.config
        if config.log_denials:
            logger.info(
                "denied: %s",
                condition.message,
                alias=self.display_name,
                access=access.tag,
                extra={
                    "condition": condition.kind.value,
                    "denied_level": level.value,
                    "parameter_index": index,
                    "raw_args": safe_log_value(list(args), redact=config.redact_args),
                },
            )

        return AccessResult(allowed=False, condition=condition)

    def __repr__(self) -> str:
        kind = "user" if self.is_user else "group"
        return f"<{kind} {self.display_name!r}>"


__all__ = [
    "BLANKET",
    "AccessResult",
    "Principal",
]
