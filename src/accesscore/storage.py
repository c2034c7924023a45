"""Keyed row storage used by hosts to remember who belongs to which group.

The evaluator never touches storage; the permission graph is rebuilt from
registration calls at every start. Only user bindings (aliases and their
group) are persisted, through :func:`save_user` and :func:`load_users`.

Rows are dicts whose values are scalars or nested key/value dicts.
"""

from __future__ import annotations

import copy
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from .exceptions import RegistrationError, StorageError
from .permissions import AccessControl, Principal

logger = logging.getLogger(__name__)

Row = Dict[str, Any]


class BaseRowStore(ABC):
    """Primary-key row store. Returned rows are untracked copies."""

    @abstractmethod
    def insert(self, primary_key: str, row: Row) -> None:
        """Insert or replace the row stored under ``primary_key``."""
        raise NotImplementedError

    @abstractmethod
    def fetch(self, primary_key: str) -> Optional[Row]:
        raise NotImplementedError

    @abstractmethod
    def remove(self, primary_key: str) -> bool:
        """Delete a row. Returns False when it did not exist."""
        raise NotImplementedError

    @abstractmethod
    def get_all(self) -> Dict[str, Row]:
        raise NotImplementedError


class MemoryRowStore(BaseRowStore):
    """Dictionary-backed store with single-level transactions."""

    def __init__(self) -> None:
        self._rows: Dict[str, Row] = {}
        self._snapshot: Optional[Dict[str, Row]] = None

    def insert(self, primary_key: str, row: Row) -> None:
        self._rows[primary_key] = copy.deepcopy(row)

    def fetch(self, primary_key: str) -> Optional[Row]:
        row = self._rows.get(primary_key)
        return copy.deepcopy(row) if row is not None else None

    def remove(self, primary_key: str) -> bool:
        return self._rows.pop(primary_key, None) is not None

    def get_all(self) -> Dict[str, Row]:
        return copy.deepcopy(self._rows)

    @property
    def in_transaction(self) -> bool:
        return self._snapshot is not None

    def begin(self) -> None:
        if self._snapshot is not None:
            raise StorageError("transaction already in progress")
        self._snapshot = copy.deepcopy(self._rows)

    def commit(self) -> None:
        if self._snapshot is None:
            raise StorageError("no transaction in progress")
        self._snapshot = None

    def rollback(self) -> None:
        if self._snapshot is None:
            raise StorageError("no transaction in progress")
        self._rows = self._snapshot
        self._snapshot = None


def save_user(store: BaseRowStore, user: Principal) -> None:
    """Store ``user`` under its first alias with its group and every alias."""
    if not user.is_user:
        raise RegistrationError("only users can be saved", principal=user.display_name)
    group = user.group_name
    if group is None:
        raise StorageError("user has no named group", alias=user.aliases[0])
    store.insert(
        user.aliases[0],
        {"group": group, "aliases": {alias: True for alias in user.aliases}},
    )


def load_users(control: AccessControl, store: BaseRowStore) -> list[Principal]:
    """Recreate every stored user under its group.

    Raises:
        StorageError: a row names a group that is not registered.
    """
    users = []
    for key, row in store.get_all().items():
        group = control.group(row.get("group", ""))
        if group is None:
            raise StorageError(
                f"stored user {key!r} refers to unknown group {row.get('group')!r}",
                alias=key,
            )
        aliases = list(row.get("aliases") or {key: True})
        users.append(group.create_cloned_user(*aliases))
    logger.info("loaded %d users from storage", len(users))
    return users


__all__ = [
    "BaseRowStore",
    "MemoryRowStore",
    "Row",
    "load_users",
    "save_user",
]
