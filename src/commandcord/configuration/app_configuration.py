from __future__ import annotations
from pathlib import Path
import fcntl
import os
from typing import Any, Dict

import yaml

from commandcord.configuration.options import SUPPORTED_LANGUAGES, FrameworkOptions, MongoDatabaseOptions
from commandcord.datatypes.guild_settings import DEFAULT_PREFIX
from commandcord.util.logger import get_logger

logger = get_logger("app_configuration")


CONFIG_PATH = Path("./config/app_config.yml").resolve()


class AppConfig:
    """File-lock based accessor around the YAML application configuration.

    Caches the contents of ``./config/app_config.yml``, exposes dictionary-like
    access helpers, and converts the mapping into :class:`FrameworkOptions`.
    Uses fcntl file locks for safe concurrent access across processes.

    Example file::

        default_prefix: "?"
        commands_dir: /srv/bot/commands
        test_servers: ["1234"]
        database:
          strategy: mongo
          mongo_uri: mongodb://localhost:27017/bot
    """

    def __init__(self, config_path: Path) -> None:
        self.config_path = config_path
        self._data: Dict[str, Any] = {}
        self.reload()

    # --------------------------
    # Private helpers
    # --------------------------
    def load_from_disk(self) -> Dict[str, Any]:
        try:
            with self.config_path.open("r", encoding="utf-8") as f:
                fcntl.flock(f.fileno(), fcntl.LOCK_SH)
                data = yaml.safe_load(f)
                fcntl.flock(f.fileno(), fcntl.LOCK_UN)
                return data if isinstance(data, dict) else {}
        except FileNotFoundError:
            logger.warning("[APP CONFIGURATION] Config file %s not found, using defaults.", self.config_path)
        except (OSError, yaml.YAMLError) as exc:
            logger.error("[APP CONFIGURATION] Failed to load config %s: %s", self.config_path, exc)
        return {}

    # --------------------------
    # Public API
    # --------------------------
    def reload(self) -> Dict[str, Any]:
        """Re-read the YAML file and replace the in-memory cache.

        Returns the raw mapping that was loaded (an empty dict on error).
        """
        self._data = self.load_from_disk()
        return self._data

    @property
    def data(self) -> Dict[str, Any]:
        """The cached configuration mapping. Callers should not mutate it."""
        return self._data

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    # --------------------------
    # High-level shortcuts
    # --------------------------
    @property
    def default_prefix(self) -> str:
        return str(self._data.get("default_prefix") or DEFAULT_PREFIX)

    @property
    def mongo_uri(self) -> str:
        """Mongo connection string, falling back to the MONGO_URI environment variable."""
        database = self._data.get("database") or {}
        if not isinstance(database, dict):
            database = {}
        return str(database.get("mongo_uri") or os.getenv("MONGO_URI", ""))

    def to_framework_options(self) -> FrameworkOptions:
        """Build FrameworkOptions from the loaded file.

        Only the built-in strategy can be configured from YAML; a caller-supplied
        strategy needs live objects and is passed to FrameworkOptions in code.
        """
        data = self._data
        database = data.get("database") or {}
        database_options = None
        if isinstance(database, dict) and str(database.get("strategy", "mongo")).lower() == "mongo" and self.mongo_uri:
            database_options = MongoDatabaseOptions(
                mongo_uri=self.mongo_uri,
                db_options=dict(database.get("options") or {}),
            )

        return FrameworkOptions(
            default_prefix=self.default_prefix,
            commands_dir=str(data.get("commands_dir") or ""),
            features_dir=str(data.get("features_dir") or ""),
            messages_path=str(data.get("messages_path") or ""),
            show_warns=bool(data.get("show_warns", True)),
            del_err_msg_cooldown=int(data.get("del_err_msg_cooldown", -1)),
            default_language=str(data.get("default_language") or "english"),
            supported_languages=data.get("supported_languages") or list(SUPPORTED_LANGUAGES),
            ignore_bots=bool(data.get("ignore_bots", True)),
            test_servers=data.get("test_servers") or [],
            bot_owners=data.get("bot_owners") or [],
            disabled_default_commands=data.get("disabled_default_commands") or [],
            ephemeral=bool(data.get("ephemeral", True)),
            debug=bool(data.get("debug", False)),
            database=database_options,
        )


# Shared application-wide configuration instance
app_config = AppConfig(CONFIG_PATH)
