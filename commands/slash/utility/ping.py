from core.definitions import SlashCommand

data = SlashCommand(name="ping", description="Check the bot's gateway latency")


async def execute(interaction):
    latency = round(interaction.client.latency * 1000)
    await interaction.response.send_message(f"🏓 Pong! {latency}ms", ephemeral=True)
