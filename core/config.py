"""
Static bot settings read from a JSON file with environment overrides.
"""

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "config.json"
DEFAULT_DATABASE_PATH = "bot_data.db"
DEFAULT_PREFIX = "!"
DEFAULT_FOOTER = "GuildKeeper"
DEFAULT_PRESENCE_URL = "https://www.twitch.tv/discord"


class ConfigError(Exception):
    """Raised when the configuration file cannot be read."""
    pass


@dataclass
class BotConfig:
    token: Optional[str] = None
    client_id: Optional[int] = None
    guild_id: Optional[int] = None
    database_path: str = DEFAULT_DATABASE_PATH
    prefix: str = DEFAULT_PREFIX
    error_webhook: Optional[str] = None
    embed_footer: str = DEFAULT_FOOTER
    presence_url: str = DEFAULT_PRESENCE_URL

    def missing_required(self) -> List[str]:
        """Names of required settings that are not set."""
        missing = []
        if not self.token:
            missing.append("token")
        if not self.client_id:
            missing.append("clientId")
        return missing


def _nested(data: Dict[str, Any], dotted_key: str) -> Any:
    value: Any = data
    for part in dotted_key.split("."):
        if not isinstance(value, dict):
            return None
        value = value.get(part)
    return value


def _to_snowflake(name: str, value: Any) -> Optional[int]:
    if value in (None, ""):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"{name} must be a numeric Discord ID, got {value!r}")


def load_config(path: Optional[str] = None) -> BotConfig:
    """
    Load settings from the config file, then apply environment overrides.

    A missing file is not an error; environment variables and defaults
    still apply.

    Raises:
        ConfigError: If the file is not valid JSON or an ID is not numeric
    """
    load_dotenv()

    config_path = Path(path or os.getenv("BOT_CONFIG_FILE", DEFAULT_CONFIG_FILE))
    data: Dict[str, Any] = {}
    if config_path.exists():
        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid JSON in {config_path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"{config_path} must contain a JSON object")
        logger.info(f"Loaded configuration from {config_path}")
    else:
        logger.warning(f"Config file {config_path} not found, using environment and defaults")

    def setting(key: str, env: str) -> Any:
        env_value = os.getenv(env)
        if env_value not in (None, ""):
            return env_value
        return _nested(data, key)

    database_path = setting("databasePath", "DATABASE_PATH")
    if not database_path and data.get("mongoURI"):
        logger.warning(
            f"mongoURI in {config_path} is not used; set databasePath to choose the SQLite file "
            f"(falling back to {DEFAULT_DATABASE_PATH})"
        )

    return BotConfig(
        token=setting("token", "DISCORD_BOT_TOKEN"),
        client_id=_to_snowflake("clientId", setting("clientId", "DISCORD_CLIENT_ID")),
        guild_id=_to_snowflake("guildId", setting("guildId", "DISCORD_GUILD_ID")),
        database_path=database_path or DEFAULT_DATABASE_PATH,
        prefix=setting("prefix", "COMMAND_PREFIX") or DEFAULT_PREFIX,
        error_webhook=setting("errorWebhook", "ERROR_WEBHOOK_URL") or None,
        embed_footer=setting("embed.footer", "EMBED_FOOTER") or DEFAULT_FOOTER,
        presence_url=setting("presence.url", "PRESENCE_URL") or DEFAULT_PRESENCE_URL,
    )
