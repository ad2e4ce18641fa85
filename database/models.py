"""
Data models for the records the bot keeps per guild.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Union

WELCOME = "welcome"
GOODBYE = "goodbye"
GREETING_KINDS = (WELCOME, GOODBYE)


@dataclass
class BlacklistEntry:
    """A user barred from running commands in a guild."""
    guild_id: int
    user_id: int
    created_at: Optional[datetime] = None


@dataclass
class GreetingConfig:
    """Welcome or goodbye embed posted when a member joins or leaves."""
    guild_id: int
    kind: str  # 'welcome' or 'goodbye'
    channel_id: int
    embed_color: Optional[Union[int, str]] = None
    title: str = ""
    description: str = ""
    image: Optional[str] = None
    updated_at: Optional[datetime] = None


@dataclass
class VoiceStay:
    """Voice channel the bot rejoins on every startup."""
    guild_id: int
    channel_id: int
    created_at: Optional[datetime] = None


def parse_timestamp(value) -> Optional[datetime]:
    """Read a stored timestamp; SQLite returns them as text."""
    if value is None or isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value))
    except ValueError:
        return None
