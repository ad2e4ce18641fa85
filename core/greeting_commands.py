"""
Shared definition and handler of the /welcome and /goodbye commands.
"""

import discord

from database.models import GreetingConfig
from .definitions import CommandOption, OptionType, SlashCommand
from .greetings import USER_PLACEHOLDER, SERVER_PLACEHOLDER, color_value
from .interactions import read_options

MANAGE_GUILD = 1 << 5
TEXT_CHANNEL_TYPES = [0, 5]  # text, announcement


def greeting_definition(kind: str) -> SlashCommand:
    event = "joins" if kind == "welcome" else "leaves"
    placeholders = f"{USER_PLACEHOLDER} and {SERVER_PLACEHOLDER} are replaced"
    return SlashCommand(
        name=kind,
        description=f"Configure the message posted when a member {event}",
        dm_permission=False,
        default_member_permissions=MANAGE_GUILD,
        options=[
            CommandOption(
                name="set",
                description=f"Set the {kind} message",
                type=OptionType.SUB_COMMAND,
                options=[
                    CommandOption(name="channel", description="Channel to post in", type=OptionType.CHANNEL,
                                  required=True, channel_types=TEXT_CHANNEL_TYPES),
                    CommandOption(name="title", description=f"Embed title; {placeholders}", required=True),
                    CommandOption(name="description", description=f"Embed text; {placeholders}", required=True),
                    CommandOption(name="color", description="Embed color, e.g. #ff0000"),
                    CommandOption(name="image", description="Image URL"),
                ]
            ),
            CommandOption(name="disable", description=f"Stop posting {kind} messages", type=OptionType.SUB_COMMAND),
        ]
    )


async def handle_greeting_command(interaction: discord.Interaction, kind: str) -> None:
    manager = interaction.client.greeting_manager
    subcommand, values = read_options(interaction)

    if subcommand == "disable":
        if await manager.delete_config(interaction.guild_id, kind, moderator_id=interaction.user.id):
            await interaction.response.send_message(f"✅ {kind.capitalize()} messages disabled.", ephemeral=True)
        else:
            await interaction.response.send_message(f"❌ No {kind} message is configured.", ephemeral=True)
        return

    color = values.get("color")
    if color and color_value(color) is None:
        await interaction.response.send_message("❌ Invalid color. Use a hex value like #ff0000.", ephemeral=True)
        return

    config = GreetingConfig(
        guild_id=interaction.guild_id,
        kind=kind,
        channel_id=int(values["channel"]),
        embed_color=color,
        title=values.get("title") or "",
        description=values.get("description") or "",
        image=values.get("image") or None
    )
    await manager.set_config(config, moderator_id=interaction.user.id)
    await interaction.response.send_message(
        f"✅ {kind.capitalize()} messages will be posted in <#{config.channel_id}>.", ephemeral=True
    )
