"""
Unit tests for database models.
"""

from datetime import datetime

from database.models import BlacklistEntry, GreetingConfig, VoiceStay, WELCOME, GREETING_KINDS, parse_timestamp


class TestModels:
    """Test cases for the record dataclasses."""

    def test_greeting_config_defaults(self):
        config = GreetingConfig(guild_id=1, kind=WELCOME, channel_id=2)

        assert config.embed_color is None
        assert config.title == ""
        assert config.description == ""
        assert config.image is None
        assert config.updated_at is None

    def test_simple_records(self):
        assert BlacklistEntry(guild_id=1, user_id=2).created_at is None
        assert VoiceStay(guild_id=1, channel_id=2).channel_id == 2

    def test_greeting_kinds(self):
        assert GREETING_KINDS == ("welcome", "goodbye")


class TestParseTimestamp:

    def test_sqlite_text(self):
        assert parse_timestamp("2024-05-01 12:30:00") == datetime(2024, 5, 1, 12, 30)

    def test_passthrough(self):
        now = datetime.now()
        assert parse_timestamp(now) is now
        assert parse_timestamp(None) is None

    def test_garbage(self):
        assert parse_timestamp("yesterday") is None
