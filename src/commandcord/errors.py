"""
Exception hierarchy for Commandcord.

Configuration errors indicate a programming or setup defect and are meant to
halt start-up. Persistence errors surface at runtime to whichever collaborator
made the call.
"""


class CommandFrameworkError(Exception):
    """Base exception for all Commandcord errors."""


# ========== Configuration (fatal) ==========

class ConfigurationError(CommandFrameworkError):
    """Raised when the framework is configured incorrectly."""


class UnrecognizedCooldownScopeError(ConfigurationError):
    """Raised when a cooldown carries a scope other than 'global' or 'per-user'."""

    def __init__(self, scope: object):
        super().__init__(f"Unrecognized cooldown type: {scope!r}")
        self.scope = scope


class InvalidConfigurationPathError(ConfigurationError):
    """Raised when a directory option is not an absolute path."""

    def __init__(self, option_name: str, value: str):
        super().__init__(
            f"The '{option_name}' directory must be an absolute path, got {value!r}"
        )
        self.option_name = option_name
        self.value = value


class RepositoryNotConfiguredError(ConfigurationError):
    """Raised when a repository is requested but the active strategy supplied none."""


class InvalidCooldownError(ConfigurationError):
    """Raised for malformed cooldown durations or incomplete cooldown keys."""


class StrategyAlreadySelectedError(ConfigurationError):
    """Raised when the persistence strategy is selected a second time."""


# ========== Persistence (runtime) ==========

class PersistenceError(CommandFrameworkError):
    """Base class for errors raised while talking to the storage backend."""


class DatabaseNotConnectedError(PersistenceError):
    """Raised by guarded accessors when the connectivity check reports False."""

    def __init__(self, message: str = "Database not connected!"):
        super().__init__(message)


class OperationNotImplementedError(PersistenceError, NotImplementedError):
    """Raised when a repository operation has no working backend implementation."""

    def __init__(self, repository: str, operation: str):
        super().__init__(f"{repository}.{operation}() is not implemented")
        self.repository = repository
        self.operation = operation


# ========== Domain values ==========

class InvalidPrefixError(CommandFrameworkError, ValueError):
    """Raised when a guild prefix is empty or not a string."""


class UnsupportedLanguageError(CommandFrameworkError, ValueError):
    """Raised when a guild asks for a language the bot has no messages for."""

    def __init__(self, language: str):
        super().__init__(f"Language not supported: {language!r}")
        self.language = language
