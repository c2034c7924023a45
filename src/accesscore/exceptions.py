"""Unified exception hierarchy for accesscore.

Denials produced by the evaluator are :class:`~accesscore.permissions.Condition`
values, not exceptions. The classes here cover programmer errors only:
bad declarations, unknown principals or commands, and broken internal
invariants. This module provides:
- Base exception hierarchy with stable error codes
- ErrorRegistry for mapping codes back to classes

Usage in hosts:
    from accesscore.exceptions import (
        AccessCoreError,
        RegistrationError,
        UnknownPrincipalError,
    )

Hosts may define thin subclasses for their own errors:
    class ConsoleError(AccessCoreError):
        pass
"""

from __future__ import annotations

from typing import Any, Callable, TypeVar, cast

__all__ = [
    # Base hierarchy
    "AccessCoreError",
    "ConfigurationError",
    "RegistrationError",
    "DuplicateTagError",
    "DuplicateAliasError",
    "DuplicateGroupError",
    "ParameterDeclarationError",
    "InvariantError",
    "UnknownPrincipalError",
    "UnknownCommandError",
    "StorageError",
    # Registry
    "ErrorRegistry",
    "error_registry",
    "register_error",
]


# ---- Exception Hierarchy ----------------------------------------------------


class AccessCoreError(Exception):
    """Base exception for accesscore.

    Attributes:
        code: Stable error code string (e.g. "REGISTRATION_ERROR").
        message: Human-readable error description.
        details: Additional context as keyword arguments.
    """

    code: str = "INTERNAL_ERROR"
    message: str = "An internal error occurred"

    def __init__(self, message: str | None = None, code: str | None = None, **kwargs: Any) -> None:
        self.message = message or self.message
        self.code = code or self.code
        self.details = kwargs
        super().__init__(self.message)


class ConfigurationError(AccessCoreError):
    """Invalid or missing configuration."""

    code: str = "CONFIGURATION_ERROR"


class RegistrationError(AccessCoreError):
    """Invalid boot-time declaration of groups, users or accesses."""

    code: str = "REGISTRATION_ERROR"


class DuplicateTagError(RegistrationError):
    """An access tag was registered twice."""

    code: str = "DUPLICATE_TAG"


class DuplicateAliasError(RegistrationError):
    """An alias is already bound to a principal."""

    code: str = "DUPLICATE_ALIAS"


class DuplicateGroupError(RegistrationError):
    """A group name is already registered."""

    code: str = "DUPLICATE_GROUP"


class ParameterDeclarationError(RegistrationError):
    """A parameter list violates the positional layout rules."""

    code: str = "PARAMETER_DECLARATION_ERROR"


class InvariantError(AccessCoreError):
    """An internal invariant was broken. Always a bug in the caller."""

    code: str = "INVARIANT_ERROR"


class UnknownPrincipalError(AccessCoreError):
    """No principal is bound to the given alias."""

    code: str = "UNKNOWN_PRINCIPAL"


class UnknownCommandError(AccessCoreError):
    """No command is bound to the given name."""

    code: str = "UNKNOWN_COMMAND"


class StorageError(AccessCoreError):
    """Row store failure."""

    code: str = "STORAGE_ERROR"


# ---- Error Registry for Code Mapping ----------------------------------------

_E = TypeVar("_E", bound=type[AccessCoreError])


class ErrorRegistry:
    """Registry for mapping stable error codes to exception classes."""

    def __init__(self) -> None:
        self._errors: dict[str, type[AccessCoreError]] = {}

    def register(self, code: str, error_cls: type[AccessCoreError]) -> None:
        self._errors[code] = error_cls

    def get(self, code: str) -> type[AccessCoreError] | None:
        return self._errors.get(code)

    def all(self) -> dict[str, type[AccessCoreError]]:
        return dict(self._errors)


error_registry = ErrorRegistry()


def register_error(code: str) -> Callable[[_E], _E]:
    """Decorator to register a custom error type.

    Usage:
        @register_error("CONSOLE_ERROR")
        class ConsoleError(AccessCoreError):
            code = "CONSOLE_ERROR"
    """

    def decorator(cls: _E) -> _E:
        error_registry.register(code, cls)
        return cls

    return cast(Callable[[_E], _E], decorator)


# Register base errors
error_registry.register("INTERNAL_ERROR", AccessCoreError)
error_registry.register("CONFIGURATION_ERROR", ConfigurationError)
error_registry.register("REGISTRATION_ERROR", RegistrationError)
error_registry.register("DUPLICATE_TAG", DuplicateTagError)
error_registry.register("DUPLICATE_ALIAS", DuplicateAliasError)
error_registry.register("DUPLICATE_GROUP", DuplicateGroupError)
error_registry.register("PARAMETER_DECLARATION_ERROR", ParameterDeclarationError)
error_registry.register("INVARIANT_ERROR", InvariantError)
error_registry.register("UNKNOWN_PRINCIPAL", UnknownPrincipalError)
error_registry.register("UNKNOWN_COMMAND", UnknownCommandError)
error_registry.register("STORAGE_ERROR", StorageError)
