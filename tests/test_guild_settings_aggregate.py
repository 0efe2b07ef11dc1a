"""Tests for the guild settings datatypes."""

import pytest

from commandcord.datatypes.guild_settings import (
    DEFAULT_PREFIX,
    GuildPrefix,
    GuildSettingsAggregate,
)
from commandcord.errors import InvalidPrefixError


class TestGuildPrefix:
    """Tests for the GuildPrefix value object."""

    def test_wraps_value(self):
        prefix = GuildPrefix("?")
        assert prefix.value == "?"
        assert str(prefix) == "?"

    @pytest.mark.parametrize("value", ["", "   ", None, 5])
    def test_rejects_empty_or_non_string(self, value):
        with pytest.raises(InvalidPrefixError):
            GuildPrefix(value)

    def test_invalid_prefix_is_a_value_error(self):
        with pytest.raises(ValueError):
            GuildPrefix("")

    def test_equality_by_value(self):
        assert GuildPrefix("!") == GuildPrefix("!")


class TestGuildSettingsAggregate:
    """Tests for GuildSettingsAggregate."""

    def test_defaults(self):
        settings = GuildSettingsAggregate(guild_id="g1")

        assert settings.guild_id == "g1"
        assert settings.prefix.value == DEFAULT_PREFIX
        assert settings.categories == {}

    def test_set_prefix(self):
        settings = GuildSettingsAggregate(guild_id="g1")
        settings.set_prefix(GuildPrefix("$"))
        assert settings.prefix.value == "$"

    def test_category_emoji(self):
        settings = GuildSettingsAggregate(guild_id="g1")
        settings.set_category_emoji("Fun", "🎉")
        settings.set_category_emoji("Misc", None)

        assert settings.get_category_emoji("Fun") == "🎉"
        assert settings.get_category_emoji("Misc") == ""
        assert settings.get_category_emoji("Unknown") is None

    def test_copy_is_independent(self):
        original = GuildSettingsAggregate(guild_id="g1", categories={"Fun": "🎉"})
        clone = original.copy()

        clone.set_prefix(GuildPrefix("?"))
        clone.set_category_emoji("Fun", "🎲")

        assert original.prefix.value == DEFAULT_PREFIX
        assert original.categories == {"Fun": "🎉"}
        assert clone.guild_id == "g1"

    def test_language_defaults_to_none_and_is_copied(self):
        original = GuildSettingsAggregate(guild_id="g1")
        assert original.language is None

        original.set_language("French")
        clone = original.copy()
        clone.set_language(None)

        assert original.language == "french"
        assert clone.language is None
