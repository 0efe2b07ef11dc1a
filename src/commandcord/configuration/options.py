"""
Typed options accepted by CommandFramework.

The database option is a two-way union: MongoDatabaseOptions selects the
built-in document store, GenericDatabaseOptions lets the caller inject its own
connectivity checks and repositories. Leaving it as None runs without persistence.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence, Union

from commandcord.datatypes.db_datatypes import DbConnectionStatus, DbConnectionStrategy
from commandcord.datatypes.guild_settings import DEFAULT_PREFIX
from commandcord.errors import InvalidConfigurationPathError
from commandcord.repositories.cooldown_repo import CooldownRepository
from commandcord.repositories.guild_settings_repo import GuildSettingsRepository


@dataclass(slots=True)
class MongoDatabaseOptions:
    """Built-in strategy: connect to MongoDB with motor."""
    mongo_uri: str = ""
    db_options: Dict[str, Any] = field(default_factory=dict)

    @property
    def strategy(self) -> DbConnectionStrategy:
        return DbConnectionStrategy.MONGO


@dataclass(slots=True)
class GenericDatabaseOptions:
    """Caller-supplied strategy: any storage technology behind the two repositories."""
    is_db_connected: Callable[[], bool]
    guild_settings_repository: GuildSettingsRepository
    cooldown_repository: CooldownRepository
    get_db_connection_status: Optional[Callable[[], DbConnectionStatus]] = None

    @property
    def strategy(self) -> DbConnectionStrategy:
        return DbConnectionStrategy.GENERIC


DatabaseOptions = Union[MongoDatabaseOptions, GenericDatabaseOptions]

DEFAULT_LANGUAGE = "english"
SUPPORTED_LANGUAGES = ["english", "spanish", "portuguese", "french", "german", "russian", "turkish"]


@dataclass(slots=True)
class CategorySetting:
    """One help-menu category registration."""
    name: str
    emoji: str = ""
    hidden: bool = False
    custom_emoji: bool = False


def _as_list(value: Union[str, Sequence[str], None]) -> List[str]:
    if not value:
        return []
    if isinstance(value, str):
        return [value]
    return [str(item) for item in value]


def validate_directory(option_name: str, value: str) -> None:
    """
    Reject directory options that are not absolute-looking paths.

    Raises:
        InvalidConfigurationPathError: If value is non-empty and has no path separator.
    """
    if value and not ("/" in value or "\\" in value):
        raise InvalidConfigurationPathError(option_name, value)


@dataclass(slots=True)
class FrameworkOptions:
    """Options consumed by the framework and the collaborators around it."""
    default_prefix: str = DEFAULT_PREFIX
    commands_dir: str = ""
    features_dir: str = ""
    messages_path: str = ""
    show_warns: bool = True
    del_err_msg_cooldown: int = -1
    default_language: str = DEFAULT_LANGUAGE
    supported_languages: List[str] = field(default_factory=lambda: list(SUPPORTED_LANGUAGES))
    ignore_bots: bool = True
    test_servers: List[str] = field(default_factory=list)
    bot_owners: List[str] = field(default_factory=list)
    disabled_default_commands: List[str] = field(default_factory=list)
    ephemeral: bool = True
    debug: bool = False
    database: Optional[DatabaseOptions] = None

    def __post_init__(self) -> None:
        self.test_servers = _as_list(self.test_servers)
        self.bot_owners = _as_list(self.bot_owners)
        self.disabled_default_commands = _as_list(self.disabled_default_commands)
        self.default_language = (self.default_language or DEFAULT_LANGUAGE).lower()
        self.supported_languages = [language.lower() for language in _as_list(self.supported_languages)]
        if self.default_language not in self.supported_languages:
            self.supported_languages.append(self.default_language)

    def validate_paths(self) -> None:
        validate_directory("commands", self.commands_dir)
        validate_directory("features", self.features_dir)
