"""List every loaded command."""

import discord

name = "help"
description = "List the available commands"

_client = None


def setup(client):
    global _client
    _client = client


def _describe(unit):
    if unit.definition is not None:
        return getattr(unit.definition, "description", None) or "No description"
    return getattr(unit.module, "description", None) or "No description"


async def execute(message, args):
    prefix = _client.config.prefix
    embed = discord.Embed(title="Commands", color=discord.Color.blue())

    prefix_lines = [f"`{prefix}{unit.name}` - {_describe(unit)}" for unit in _client.prefix_commands]
    slash_lines = [f"`/{unit.name}` - {_describe(unit)}" for unit in _client.slash_commands]

    embed.add_field(name="Prefix commands", value="\n".join(prefix_lines) or "None", inline=False)
    embed.add_field(name="Slash commands", value="\n".join(slash_lines) or "None", inline=False)
    embed.set_footer(text=_client.config.embed_footer)

    await message.reply(embed=embed)
