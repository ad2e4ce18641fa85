name = "ping"
description = "Check the bot's gateway latency"

_client = None


def setup(client):
    global _client
    _client = client


async def execute(message, args):
    latency = round(_client.latency * 1000) if _client is not None else 0
    await message.reply(f"🏓 Pong! {latency}ms")
