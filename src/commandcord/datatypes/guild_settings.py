"""
Per-guild configuration state for the command framework.

Storage layout (one document per guild):
- _id: guild id
- prefix: command prefix string
- categories: category name -> emoji overrides for this guild
- language: reply language, absent while the guild uses the default
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional

from commandcord.errors import InvalidPrefixError

DEFAULT_PREFIX = "!"


@dataclass(frozen=True, slots=True)
class GuildPrefix:
    """Value object wrapping a non-empty command prefix."""

    value: str

    def __post_init__(self) -> None:
        if not isinstance(self.value, str) or not self.value.strip():
            raise InvalidPrefixError(f"Prefix must be a non-empty string, got {self.value!r}")

    def __str__(self) -> str:
        return self.value


@dataclass(slots=True)
class GuildSettingsAggregate:
    """
    Configurable state of a single guild.

    Attributes:
        guild_id: Tenant identifier. Never reassigned after construction.
        prefix: Command prefix used in this guild.
        categories: Category name -> emoji registrations for this guild. An
            empty string means the category is known but has no emoji.
        language: Lower-case language name, or None for the framework default.
    """

    guild_id: str
    prefix: GuildPrefix = field(default_factory=lambda: GuildPrefix(DEFAULT_PREFIX))
    categories: Dict[str, str] = field(default_factory=dict)
    language: Optional[str] = None

    def set_prefix(self, prefix: GuildPrefix) -> None:
        self.prefix = prefix

    def set_language(self, language: Optional[str]) -> None:
        self.language = language.lower() if language else None

    def set_category_emoji(self, category: str, emoji: str) -> None:
        self.categories[category] = emoji or ""

    def get_category_emoji(self, category: str) -> str | None:
        return self.categories.get(category)

    def copy(self) -> GuildSettingsAggregate:
        """Return an independent copy suitable for mutate-then-persist."""
        return GuildSettingsAggregate(
            guild_id=self.guild_id,
            prefix=self.prefix,
            categories=dict(self.categories),
            language=self.language,
        )
