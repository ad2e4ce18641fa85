"""Manage which members may not use the bot's commands."""

import discord

from core.definitions import CommandOption, OptionType, SlashCommand
from core.interactions import read_options

MANAGE_GUILD = 1 << 5

data = SlashCommand(
    name="blacklist",
    description="Stop or allow a member from using commands",
    dm_permission=False,
    default_member_permissions=MANAGE_GUILD,
    options=[
        CommandOption(
            name="add",
            description="Blacklist a member",
            type=OptionType.SUB_COMMAND,
            options=[CommandOption(name="user", description="Member to blacklist", type=OptionType.USER, required=True)]
        ),
        CommandOption(
            name="remove",
            description="Remove a member from the blacklist",
            type=OptionType.SUB_COMMAND,
            options=[CommandOption(name="user", description="Member to allow again", type=OptionType.USER, required=True)]
        ),
        CommandOption(name="list", description="Show blacklisted members", type=OptionType.SUB_COMMAND),
    ]
)


async def execute(interaction):
    manager = interaction.client.blacklist_manager
    guild_id = interaction.guild_id
    subcommand, values = read_options(interaction)

    if subcommand == "list":
        entries = await manager.get_blacklisted(guild_id)
        embed = discord.Embed(title="Blacklisted members", color=discord.Color.red())
        embed.description = "\n".join(f"<@{entry.user_id}>" for entry in entries) or "Nobody is blacklisted."
        await interaction.response.send_message(embed=embed, ephemeral=True)
        return

    user_id = int(values["user"])
    if user_id == interaction.user.id:
        await interaction.response.send_message("❌ You cannot blacklist yourself.", ephemeral=True)
        return

    if subcommand == "add":
        if await manager.add_user(guild_id, user_id, moderator_id=interaction.user.id):
            await interaction.response.send_message(f"✅ <@{user_id}> can no longer use commands.", ephemeral=True)
        else:
            await interaction.response.send_message(f"<@{user_id}> is already blacklisted.", ephemeral=True)
    elif subcommand == "remove":
        if await manager.remove_user(guild_id, user_id, moderator_id=interaction.user.id):
            await interaction.response.send_message(f"✅ <@{user_id}> can use commands again.", ephemeral=True)
        else:
            await interaction.response.send_message(f"❌ <@{user_id}> is not blacklisted.", ephemeral=True)
