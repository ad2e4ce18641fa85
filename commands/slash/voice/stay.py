"""Keep the bot in a voice channel around the clock, across restarts."""

from core.definitions import CommandOption, OptionType, SlashCommand
from core.interactions import read_options
from core.voice import VOICE_CHANNEL_TYPES, can_join

MANAGE_CHANNELS = 1 << 4
VOICE_CHANNEL_OPTION_TYPES = [2, 13]  # voice, stage

data = SlashCommand(
    name="247",
    description="Keep the bot connected to a voice channel",
    dm_permission=False,
    default_member_permissions=MANAGE_CHANNELS,
    options=[
        CommandOption(
            name="join",
            description="Join a voice channel and stay there",
            type=OptionType.SUB_COMMAND,
            options=[CommandOption(name="channel", description="Voice channel to stay in", type=OptionType.CHANNEL,
                                   required=True, channel_types=VOICE_CHANNEL_OPTION_TYPES)]
        ),
        CommandOption(name="leave", description="Leave voice and stop rejoining on restart",
                      type=OptionType.SUB_COMMAND),
    ]
)


async def execute(interaction):
    voice_stays = interaction.client.voice_stay_manager
    guild = interaction.guild
    subcommand, values = read_options(interaction)

    if subcommand == "leave":
        if guild.voice_client is not None:
            await guild.voice_client.disconnect(force=False)
        removed = await voice_stays.delete_stay(guild.id, moderator_id=interaction.user.id)
        message = "✅ Left voice; I won't rejoin on restart." if removed else "❌ 24/7 mode is not enabled."
        await interaction.response.send_message(message, ephemeral=True)
        return

    channel = guild.get_channel(int(values["channel"]))
    if channel is None or not isinstance(channel, VOICE_CHANNEL_TYPES):
        await interaction.response.send_message("❌ That is not a voice channel.", ephemeral=True)
        return
    if not can_join(channel, guild.me):
        await interaction.response.send_message(f"❌ I can't connect and speak in {channel.mention}.", ephemeral=True)
        return

    # Connecting can take longer than the interaction response window
    await interaction.response.defer(ephemeral=True)
    if guild.voice_client is not None:
        await guild.voice_client.move_to(channel)
    else:
        await channel.connect(self_deaf=True)
    await voice_stays.set_stay(guild.id, channel.id, moderator_id=interaction.user.id)
    await interaction.followup.send(f"✅ Staying in {channel.mention} around the clock.", ephemeral=True)
