from core.greeting_commands import greeting_definition, handle_greeting_command
from database.models import GOODBYE

data = greeting_definition(GOODBYE)


async def execute(interaction):
    await handle_greeting_command(interaction, GOODBYE)
