from core.greeting_commands import greeting_definition, handle_greeting_command
from database.models import WELCOME

data = greeting_definition(WELCOME)


async def execute(interaction):
    await handle_greeting_command(interaction, WELCOME)
