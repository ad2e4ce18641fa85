"""
Rendering of welcome and goodbye embeds.
"""

import logging
from typing import Optional, Union

import discord

from database.models import GreetingConfig

logger = logging.getLogger(__name__)

USER_PLACEHOLDER = "{user}"
SERVER_PLACEHOLDER = "{server}"
DEFAULT_COLOR = 0x5865F2


def render_template(text: Optional[str], user_mention: str, server_name: str) -> str:
    """Replace every {user} and {server} placeholder."""
    if not text:
        return ""
    return text.replace(USER_PLACEHOLDER, user_mention).replace(SERVER_PLACEHOLDER, server_name)


def color_value(value: Union[int, str, None]) -> Optional[int]:
    """Read a color stored as an int, '#rrggbb', '0xrrggbb' or decimal text; None if invalid."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        color = value
    else:
        text = str(value).strip().lower()
        try:
            if text.startswith("#"):
                color = int(text[1:], 16)
            elif text.startswith("0x"):
                color = int(text[2:], 16)
            else:
                color = int(text)
        except ValueError:
            return None
    return color if 0 <= color <= 0xFFFFFF else None


def parse_color(value: Union[int, str, None]) -> int:
    """Embed color of a stored value, falling back to the default."""
    color = color_value(value)
    if color is None:
        if value not in (None, ""):
            logger.warning(f"Invalid embed color {value!r}, using default")
        return DEFAULT_COLOR
    return color


def build_greeting_embed(config: GreetingConfig, member: discord.Member) -> discord.Embed:
    user_mention = f"<@{member.id}>"
    server_name = member.guild.name

    embed = discord.Embed(
        title=render_template(config.title, user_mention, server_name) or None,
        description=render_template(config.description, user_mention, server_name) or None,
        color=parse_color(config.embed_color),
        timestamp=discord.utils.utcnow()
    )
    if config.image:
        embed.set_image(url=config.image)
    return embed
