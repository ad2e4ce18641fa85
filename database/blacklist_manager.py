"""
Per-guild user blacklist.
"""

import logging
from typing import List, Optional
from .manager import DatabaseManager, DatabaseError
from .models import BlacklistEntry, parse_timestamp
from .monitoring import monitoring_manager, RecordChange

logger = logging.getLogger(__name__)


class BlacklistManager:
    """Reads and writes (guild, user) blacklist entries."""

    def __init__(self, db_manager: DatabaseManager):
        self.db_manager = db_manager

    async def is_blacklisted(self, guild_id: int, user_id: int) -> bool:
        """
        Check whether a user is blacklisted in a guild.

        Only the existence of the entry matters. Store failures propagate as
        DatabaseError so callers can refuse to run the command.
        """
        row = await self.db_manager.fetch_one(
            "SELECT 1 AS found FROM blacklist WHERE guild_id = ? AND user_id = ?",
            (guild_id, user_id)
        )
        return row is not None

    async def add_user(self, guild_id: int, user_id: int, moderator_id: Optional[int] = None) -> bool:
        """
        Blacklist a user in a guild.

        Returns:
            True if the entry was created, False if it already existed
        """
        if await self.is_blacklisted(guild_id, user_id):
            return False

        await self.db_manager.execute_query(
            "INSERT INTO blacklist (guild_id, user_id) VALUES (?, ?)",
            (guild_id, user_id)
        )
        monitoring_manager.audit_logger.log_change(RecordChange(
            guild_id=guild_id,
            record_type='blacklist',
            action='SET',
            details={'user_id': user_id},
            user_id=moderator_id
        ))
        logger.info(f"Blacklisted user {user_id} in guild {guild_id}")
        return True

    async def remove_user(self, guild_id: int, user_id: int, moderator_id: Optional[int] = None) -> bool:
        """
        Lift a user's blacklist entry.

        Returns:
            True if an entry was removed, False if there was none
        """
        if not await self.is_blacklisted(guild_id, user_id):
            return False

        await self.db_manager.execute_query(
            "DELETE FROM blacklist WHERE guild_id = ? AND user_id = ?",
            (guild_id, user_id)
        )
        monitoring_manager.audit_logger.log_change(RecordChange(
            guild_id=guild_id,
            record_type='blacklist',
            action='DELETE',
            details={'user_id': user_id},
            user_id=moderator_id
        ))
        logger.info(f"Removed user {user_id} from blacklist in guild {guild_id}")
        return True

    async def get_blacklisted(self, guild_id: int) -> List[BlacklistEntry]:
        """All blacklist entries of a guild, newest first. Empty on store errors."""
        try:
            rows = await self.db_manager.fetch_all(
                """
                SELECT guild_id, user_id, created_at
                FROM blacklist
                WHERE guild_id = ?
                ORDER BY created_at DESC
                """,
                (guild_id,)
            )
        except DatabaseError as e:
            logger.error(f"Database error listing blacklist for guild {guild_id}: {e}")
            return []

        return [
            BlacklistEntry(
                guild_id=row['guild_id'],
                user_id=row['user_id'],
                created_at=parse_timestamp(row['created_at'])
            )
            for row in rows
        ]
