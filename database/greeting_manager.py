"""
Welcome and goodbye message configuration.
"""

import logging
from datetime import datetime
from typing import Optional
from .manager import DatabaseManager
from .models import GreetingConfig, GREETING_KINDS, WELCOME, GOODBYE, parse_timestamp
from .monitoring import monitoring_manager, RecordChange

logger = logging.getLogger(__name__)


class GreetingManager:
    """Stores one welcome and one goodbye embed per guild."""

    def __init__(self, db_manager: DatabaseManager):
        self.db_manager = db_manager

    async def get_config(self, guild_id: int, kind: str) -> Optional[GreetingConfig]:
        """
        Get the greeting configuration of a guild.

        Args:
            guild_id: Discord guild ID
            kind: 'welcome' or 'goodbye'

        Returns:
            GreetingConfig, or None if the guild has not configured one
        """
        self._validate_kind(kind)
        row = await self.db_manager.fetch_one(
            """
            SELECT guild_id, kind, channel_id, embed_color, title, description,
                   image, updated_at
            FROM greeting_configs
            WHERE guild_id = ? AND kind = ?
            """,
            (guild_id, kind)
        )
        if not row:
            return None

        return GreetingConfig(
            guild_id=row['guild_id'],
            kind=row['kind'],
            channel_id=row['channel_id'],
            embed_color=row['embed_color'],
            title=row['title'] or "",
            description=row['description'] or "",
            image=row['image'] or None,
            updated_at=parse_timestamp(row['updated_at'])
        )

    async def get_welcome(self, guild_id: int) -> Optional[GreetingConfig]:
        return await self.get_config(guild_id, WELCOME)

    async def get_goodbye(self, guild_id: int) -> Optional[GreetingConfig]:
        return await self.get_config(guild_id, GOODBYE)

    async def set_config(self, config: GreetingConfig, moderator_id: Optional[int] = None) -> None:
        """Create or replace a guild's greeting configuration."""
        self._validate_kind(config.kind)
        if not isinstance(config.channel_id, int) or config.channel_id <= 0:
            raise ValueError("channel_id must be a positive integer")

        now = datetime.now()
        color = None if config.embed_color is None else str(config.embed_color)
        await self.db_manager.execute_query(
            """
            INSERT OR REPLACE INTO greeting_configs
                (guild_id, kind, channel_id, embed_color, title, description, image, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (config.guild_id, config.kind, config.channel_id, color,
             config.title, config.description, config.image, now.isoformat())
        )
        config.updated_at = now

        monitoring_manager.audit_logger.log_change(RecordChange(
            guild_id=config.guild_id,
            record_type=config.kind,
            action='SET',
            details={'channel_id': config.channel_id, 'title': config.title},
            user_id=moderator_id
        ))
        logger.info(f"Updated {config.kind} message for guild {config.guild_id}")

    async def delete_config(self, guild_id: int, kind: str, moderator_id: Optional[int] = None) -> bool:
        """
        Remove a guild's greeting configuration.

        Returns:
            True if a configuration was removed
        """
        self._validate_kind(kind)
        if await self.get_config(guild_id, kind) is None:
            return False

        await self.db_manager.execute_query(
            "DELETE FROM greeting_configs WHERE guild_id = ? AND kind = ?",
            (guild_id, kind)
        )
        monitoring_manager.audit_logger.log_change(RecordChange(
            guild_id=guild_id,
            record_type=kind,
            action='DELETE',
            user_id=moderator_id
        ))
        logger.info(f"Disabled {kind} message for guild {guild_id}")
        return True

    def _validate_kind(self, kind: str) -> None:
        if kind not in GREETING_KINDS:
            raise ValueError(f"kind must be one of {', '.join(GREETING_KINDS)}")
