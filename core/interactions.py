"""
Helpers for reading raw interaction payloads in slash commands.
"""

from typing import Any, Dict, Optional, Tuple

import discord

from .definitions import OptionType

SUBCOMMAND_TYPES = (int(OptionType.SUB_COMMAND), int(OptionType.SUB_COMMAND_GROUP))


def command_name(interaction: discord.Interaction) -> Optional[str]:
    data = interaction.data or {}
    return data.get("name")


def is_chat_input(interaction: discord.Interaction) -> bool:
    if interaction.type is not discord.InteractionType.application_command:
        return False
    data = interaction.data or {}
    return data.get("type", 1) == 1


def read_options(interaction: discord.Interaction) -> Tuple[Optional[str], Dict[str, Any]]:
    """
    Return (subcommand, {option name: value}) for the invoked command.

    Nested subcommand groups are joined with a space, e.g. "settings set".
    """
    data = interaction.data or {}
    options = data.get("options", [])
    path = []

    while options and options[0].get("type") in SUBCOMMAND_TYPES:
        path.append(options[0]["name"])
        options = options[0].get("options", [])

    values = {option["name"]: option.get("value") for option in options}
    return (" ".join(path) or None), values
