"""Tests for the row store and user persistence."""

from __future__ import annotations

import pytest

from accesscore import (
    AccessControl,
    MemoryRowStore,
    NumParam,
    RegistrationError,
    StorageError,
    load_users,
    save_user,
)


class TestMemoryRowStore:
    """Tests for MemoryRowStore."""

    def test_insert_fetch(self) -> None:
        store = MemoryRowStore()
        store.insert("123", {"group": "admin", "aliases": {"123": True}})
        assert store.fetch("123") == {"group": "admin", "aliases": {"123": True}}
        assert store.fetch("missing") is None

    def test_rows_are_untracked_copies(self) -> None:
        """Mutating inserted or fetched rows does not change the store."""
        store = MemoryRowStore()
        row = {"group": "admin", "aliases": {"123": True}}
        store.insert("123", row)
        row["aliases"]["456"] = True

        fetched = store.fetch("123")
        fetched["group"] = "user"
        store.get_all()["123"]["aliases"].clear()

        assert store.fetch("123") == {"group": "admin", "aliases": {"123": True}}

    def test_insert_replaces(self) -> None:
        store = MemoryRowStore()
        store.insert("k", {"v": 1})
        store.insert("k", {"v": 2})
        assert store.get_all() == {"k": {"v": 2}}

    def test_remove(self) -> None:
        store = MemoryRowStore()
        store.insert("k", {"v": 1})
        assert store.remove("k") is True
        assert store.remove("k") is False
        assert store.get_all() == {}

    def test_rollback(self) -> None:
        store = MemoryRowStore()
        store.insert("keep", {"v": 1})
        store.begin()
        assert store.in_transaction
        store.insert("drop", {"v": 2})
        store.remove("keep")
        store.rollback()

        assert not store.in_transaction
        assert store.get_all() == {"keep": {"v": 1}}

    def test_commit(self) -> None:
        store = MemoryRowStore()
        store.begin()
        store.insert("k", {"v": 1})
        store.commit()
        assert store.fetch("k") == {"v": 1}

    def test_transaction_misuse(self) -> None:
        store = MemoryRowStore()
        with pytest.raises(StorageError):
            store.commit()
        with pytest.raises(StorageError):
            store.rollback()
        store.begin()
        with pytest.raises(StorageError):
            store.begin()


def build_control() -> AccessControl:
    control = AccessControl()
    admin = control.root.create_cloned_group("admin")
    slap = control.register("slap", admin)
    slap.add_param(NumParam(min_value=0, max_value=100))
    return control


class TestUserPersistence:
    """Users survive a rebuild of the permission graph."""

    def test_save_and_load(self) -> None:
        store = MemoryRowStore()
        control = build_control()
        save_user(store, control.group("admin").create_cloned_user("STEAM_0:1:1", "10.0.0.1"))
        save_user(store, control.root.create_cloned_user("guest"))

        assert store.fetch("STEAM_0:1:1") == {
            "group": "admin",
            "aliases": {"STEAM_0:1:1": True, "10.0.0.1": True},
        }

        rebuilt = build_control()
        users = load_users(rebuilt, store)
        assert len(users) == 2

        admin_user = rebuilt.user_from_id("10.0.0.1")
        assert admin_user is rebuilt.user_from_id("STEAM_0:1:1")
        assert admin_user.group_name == "admin"
        assert rebuilt.user_from_id("guest").group_name == "user"

        assert rebuilt.user_from_id("guest").parent is rebuilt.root

    def test_loaded_users_get_group_grants(self) -> None:
        store = MemoryRowStore()
        store.insert("123", {"group": "admin", "aliases": {"123": True}})
        control = AccessControl()
        admin = control.root.create_cloned_group("admin")
        slap = control.register("slap", admin)

        load_users(control, store)
        assert control.check_access("123", slap).allowed

    def test_row_without_aliases_uses_key(self) -> None:
        store = MemoryRowStore()
        store.insert("123", {"group": "user"})
        control = AccessControl()
        load_users(control, store)
        assert control.user_from_id("123") is not None

    def test_unknown_group(self) -> None:
        store = MemoryRowStore()
        store.insert("123", {"group": "ghosts", "aliases": {"123": True}})
        with pytest.raises(StorageError):
            load_users(AccessControl(), store)

    def test_only_users_can_be_saved(self) -> None:
        control = AccessControl()
        with pytest.raises(RegistrationError):
            save_user(MemoryRowStore(), control.root)
