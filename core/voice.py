"""
Rejoining stored 24/7 voice channels on startup.
"""

import logging
from typing import Any, Optional

import discord

from database.voice_stay_manager import VoiceStayManager
from .reporting import ErrorReporter

logger = logging.getLogger(__name__)

VOICE_CHANNEL_TYPES = (discord.VoiceChannel, discord.StageChannel)


def can_join(channel: Any, me: Optional[discord.Member]) -> bool:
    """Whether the bot member may connect and speak in the channel."""
    if me is None:
        return False
    permissions = channel.permissions_for(me)
    return bool(permissions.connect and permissions.speak)


async def rejoin_voice_channels(client: discord.Client, voice_stays: VoiceStayManager,
                                reporter: Optional[ErrorReporter] = None) -> int:
    """
    Reconnect to every stored 24/7 voice channel.

    Unknown guilds, missing or non-voice channels and missing permissions
    are skipped. A failed connection is reported and the rest still run.

    Returns:
        Number of channels joined
    """
    stays = await voice_stays.get_all_stays()
    joined = 0

    for stay in stays:
        guild = client.get_guild(stay.guild_id)
        if guild is None:
            logger.info(f"Guild {stay.guild_id} not found for 24/7 rejoin.")
            continue

        channel = guild.get_channel(stay.channel_id)
        if channel is None or not isinstance(channel, VOICE_CHANNEL_TYPES):
            logger.info(f"Voice channel {stay.channel_id} not found or not a voice channel in guild {guild.name}")
            continue

        if not can_join(channel, guild.me):
            logger.info(f"Missing permissions to join voice channel {channel.name} in guild {guild.name}")
            continue

        if guild.voice_client is not None:
            logger.info(f"Already connected to voice in guild {guild.name}, skipping 24/7 rejoin")
            continue

        try:
            await channel.connect(self_deaf=True)
        except Exception as e:
            logger.error(f"Failed to rejoin voice channel {channel.name} in guild {guild.name}: {e}")
            if reporter is not None:
                await reporter.report(f"Error rejoining 24/7 voice channel {stay.channel_id}", e)
            continue

        joined += 1
        logger.info(f"Rejoined 24/7 voice channel {channel.name} in guild {guild.name}")

    return joined
