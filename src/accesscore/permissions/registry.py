"""The access-control context: root group plus the group, alias and tag registries.

Each :class:`AccessControl` is independent, so tests and hosts may build
as many as they like. Registries are filled during a sequential boot
phase and only read afterwards; no locking is done here.

Example::

    control = AccessControl()
    admin = control.root.create_cloned_group("operator").create_cloned_group("admin")

    slap = control.register("slap", admin)
    slap.add_param(NumParam(min_value=0, max_value=100))

    admin.create_cloned_user("STEAM_0:1:123")
    control.check_access("STEAM_0:1:123", slap, "50").args  # (50,)
"""

from __future__ import annotations

import logging
from typing import Any, Iterator

from ..config import AccessConfig
from ..exceptions import (
    DuplicateAliasError,
    DuplicateGroupError,
    DuplicateTagError,
    RegistrationError,
    UnknownPrincipalError,
)
from .access import Access
from .principals import AccessResult, Principal

logger = logging.getLogger(__name__)


class AccessControl:
    """Owns the permission graph for one host.

    Attributes:
        config: Settings shared by every principal in this context.
        root: The root group, registered under ``config.root_group``.
    """

    def __init__(self, config: AccessConfig | None = None) -> None:
        self.config = config or AccessConfig()
        self._groups: dict[str, Principal] = {}
        self._aliases: dict[str, Principal] = {}
        self._tags: dict[str, Access] = {}

        self.root = Principal(self, name=self.config.root_group)
        self._groups[self.root.name] = self.root

    # ── Registration ────────────────────────────────────

    def register(self, tag: str, *groups: Principal, description: str | None = None) -> Access:
        """Create an access and grant it (blanket) to each of ``groups``.

        Raises:
            DuplicateTagError: ``tag`` is already registered.
            RegistrationError: a group belongs to another AccessControl.
        """
        if tag in self._tags:
            raise DuplicateTagError(f"access tag {tag!r} is already registered", tag=tag)
        for group in groups:
            if group._control is not self:
                raise RegistrationError(
                    "group belongs to a different access control",
                    tag=tag,
                    group=group.display_name,
                )

        access = Access(tag, description=description)
        for group in groups:
            group._grant(access)
        self._tags[tag] = access

        logger.debug("registered access %s for %s", tag, [g.display_name for g in groups])
        return access

    def _add_group(self, group: Principal) -> None:
        if group.name in self._groups:
            raise DuplicateGroupError(f"group {group.name!r} is already registered", group=group.name)
        self._groups[group.name] = group
        logger.debug("registered group %s (parent %s)", group.name, group.parent.display_name)

    def _bind_aliases(self, user: Principal) -> None:
        seen: set[str] = set()
        for alias in user.aliases:
            if alias in self._aliases or alias in seen:
                raise DuplicateAliasError(f"alias {alias!r} is already bound", alias=alias)
            seen.add(alias)
        for alias in user.aliases:
            self._aliases[alias] = user
        logger.debug("registered user %s in group %s", list(user.aliases), user.group_name)

    # ── Lookup ──────────────────────────────────────────

    def group(self, name: str) -> Principal | None:
        return self._groups.get(name)

    def user_from_id(self, alias: str) -> Principal | None:
        """Resolve an alias to its user, or None."""
        return self._aliases.get(alias)

    @property
    def tags(self) -> frozenset[str]:
        return frozenset(self._tags)

    def iter_users(self) -> Iterator[Principal]:
        """Each user once, in registration order."""
        seen: set[int] = set()
        for user in self._aliases.values():
            if id(user) not in seen:
                seen.add(id(user))
                yield user

    # ── Evaluation ──────────────────────────────────────

    def check_access(self, alias: str, access: Access, *args: Any) -> AccessResult:
        """Resolve ``alias`` and evaluate ``access`` for that user.

        Raises:
            UnknownPrincipalError: no user is bound to ``alias``.
        """
        user = self.user_from_id(alias)
        if user is None:
            raise UnknownPrincipalError(f"no user is bound to alias {alias!r}", alias=alias)
        return user.check_access(access, *args)


__all__ = ["AccessControl"]
