from .config import AccessConfig, LogLevel, load_config_from_env
from .console import CommandOutcome, CommandTable, parse_args
from .exceptions import (
    AccessCoreError,
    ConfigurationError,
    DuplicateAliasError,
    DuplicateGroupError,
    DuplicateTagError,
    InvariantError,
    ParameterDeclarationError,
    RegistrationError,
    StorageError,
    UnknownCommandError,
    UnknownPrincipalError,
)
from .logging import (
    safe_preview,
    redact_secrets,
    safe_log_value,
    AccessFormatter,
    AccessLoggerAdapter,
    setup_logging,
    get_access_logger,
)
from .permissions import (
    BLANKET,
    Access,
    AccessControl,
    AccessResult,
    Condition,
    ConditionKind,
    DeniedLevel,
    NumParam,
    Parameter,
    Principal,
    StringParam,
    round_half_up,
)
from .storage import BaseRowStore, MemoryRowStore, load_users, save_user

__all__ = [
    'AccessConfig',
    'LogLevel',
    'load_config_from_env',
    'CommandOutcome',
    'CommandTable',
    'parse_args',
    'AccessCoreError',
    'ConfigurationError',
    'DuplicateAliasError',
    'DuplicateGroupError',
    'DuplicateTagError',
    'InvariantError',
    'ParameterDeclarationError',
    'RegistrationError',
    'StorageError',
    'UnknownCommandError',
    'UnknownPrincipalError',
    'safe_preview',
    'redact_secrets',
    'safe_log_value',
    'AccessFormatter',
    'AccessLoggerAdapter',
    'setup_logging',
    'get_access_logger',
    'BLANKET',
    'Access',
    'AccessControl',
    'AccessResult',
    'Condition',
    'ConditionKind',
    'DeniedLevel',
    'NumParam',
    'Parameter',
    'Principal',
    'StringParam',
    'round_half_up',
    'BaseRowStore',
    'MemoryRowStore',
    'load_users',
    'save_user',
]
