"""
Publication of slash command definitions to Discord.
"""

import logging
from typing import Any, Optional

from .definitions import serialize_definition
from .registry import CommandRegistry
from .reporting import ErrorReporter

logger = logging.getLogger(__name__)


async def publish_commands(client: Any, registry: CommandRegistry, application_id: int,
                           guild_id: Optional[int] = None,
                           reporter: Optional[ErrorReporter] = None) -> Optional[int]:
    """
    Replace the registered slash commands with the loaded definitions.

    Targets a single guild when guild_id is given, otherwise the global
    scope. One bulk call, no retry.

    Returns:
        Number of commands Discord acknowledged, or None on failure
    """
    try:
        payload = [serialize_definition(definition) for definition in registry.definitions()]
        scope = f"for guild {guild_id}" if guild_id else "globally"
        logger.info(f"Started refreshing {len(payload)} application (/) commands {scope}.")

        if guild_id:
            data = await client.http.bulk_upsert_guild_commands(application_id, guild_id, payload)
        else:
            data = await client.http.bulk_upsert_global_commands(application_id, payload)

        count = len(data) if data is not None else 0
        logger.info(f"Successfully reloaded {count} application (/) commands {scope}.")
        return count
    except Exception as e:
        logger.error(f"Error deploying commands: {e}")
        if reporter is not None:
            await reporter.report("Error deploying slash commands", e)
        return None
