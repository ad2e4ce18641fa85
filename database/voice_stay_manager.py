"""
24/7 voice channel records.
"""

import logging
from typing import List, Optional
from .manager import DatabaseManager
from .models import VoiceStay, parse_timestamp
from .monitoring import monitoring_manager, RecordChange

logger = logging.getLogger(__name__)


class VoiceStayManager:
    """Keeps the voice channel each guild wants the bot connected to."""

    def __init__(self, db_manager: DatabaseManager):
        self.db_manager = db_manager

    async def get_all_stays(self) -> List[VoiceStay]:
        """Every stored voice stay, across all guilds."""
        rows = await self.db_manager.fetch_all(
            "SELECT guild_id, channel_id, created_at FROM voice_stays ORDER BY guild_id"
        )
        return [self._from_row(row) for row in rows]

    async def get_stay(self, guild_id: int) -> Optional[VoiceStay]:
        row = await self.db_manager.fetch_one(
            "SELECT guild_id, channel_id, created_at FROM voice_stays WHERE guild_id = ?",
            (guild_id,)
        )
        return self._from_row(row) if row else None

    async def set_stay(self, guild_id: int, channel_id: int, moderator_id: Optional[int] = None) -> None:
        """Store (or move) the guild's 24/7 voice channel."""
        await self.db_manager.execute_query(
            "INSERT OR REPLACE INTO voice_stays (guild_id, channel_id) VALUES (?, ?)",
            (guild_id, channel_id)
        )
        monitoring_manager.audit_logger.log_change(RecordChange(
            guild_id=guild_id,
            record_type='voice_stay',
            action='SET',
            details={'channel_id': channel_id},
            user_id=moderator_id
        ))
        logger.info(f"Stored 24/7 voice channel {channel_id} for guild {guild_id}")

    async def delete_stay(self, guild_id: int, moderator_id: Optional[int] = None) -> bool:
        """
        Forget the guild's 24/7 voice channel.

        Returns:
            True if a record was removed
        """
        if await self.get_stay(guild_id) is None:
            return False

        await self.db_manager.execute_query(
            "DELETE FROM voice_stays WHERE guild_id = ?",
            (guild_id,)
        )
        monitoring_manager.audit_logger.log_change(RecordChange(
            guild_id=guild_id,
            record_type='voice_stay',
            action='DELETE',
            user_id=moderator_id
        ))
        logger.info(f"Removed 24/7 voice channel for guild {guild_id}")
        return True

    def _from_row(self, row) -> VoiceStay:
        return VoiceStay(
            guild_id=row['guild_id'],
            channel_id=row['channel_id'],
            created_at=parse_timestamp(row['created_at'])
        )
