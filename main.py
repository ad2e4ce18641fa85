import discord
from discord.ext import tasks
import inspect
import logging
import sys
from pathlib import Path
from typing import Any, Callable, Optional

from core.config import BotConfig, ConfigError, load_config
from core.greetings import build_greeting_embed
from core.interactions import command_name, is_chat_input
from core.publisher import publish_commands
from core.registry import CommandRegistry, SLASH, PREFIX, load_auto_modules
from core.reporting import ErrorReporter
from core.voice import rejoin_voice_channels

# Import database managers
from database.manager import DatabaseManager
from database.blacklist_manager import BlacklistManager
from database.greeting_manager import GreetingManager
from database.voice_stay_manager import VoiceStayManager
from database.models import WELCOME, GOODBYE

# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger('GuildKeeper')

BASE_DIR = Path(__file__).resolve().parent
SLASH_COMMANDS_DIR = BASE_DIR / 'commands' / 'slash'
PREFIX_COMMANDS_DIR = BASE_DIR / 'commands' / 'prefix'
AUTO_DIR = BASE_DIR / 'auto'

PRESENCE_REFRESH_SECONDS = 10
NOTICE_LIFETIME = 10
NOTICE_COLOR = 0xff0000
BLACKLISTED_NOTICE = "❌ You are blacklisted from using commands."
ERROR_NOTICE = "There was an error while executing this command!"


async def invoke(execute: Callable[..., Any], *args: Any) -> None:
    """Call a command's execute, awaiting it when it is a coroutine."""
    result = execute(*args)
    if inspect.isawaitable(result):
        await result


class GuildKeeper(discord.Client):
    def __init__(self, config: Optional[BotConfig] = None, db_manager: Optional[DatabaseManager] = None):
        intents = discord.Intents.default()
        intents.guilds = True
        intents.members = True
        intents.messages = True
        intents.message_content = True
        intents.voice_states = True

        super().__init__(intents=intents)

        self.config = config or BotConfig()

        # Initialize database managers
        self.db_manager = db_manager or DatabaseManager(self.config.database_path)
        self.blacklist_manager = BlacklistManager(self.db_manager)
        self.greeting_manager = GreetingManager(self.db_manager)
        self.voice_stay_manager = VoiceStayManager(self.db_manager)

        self.slash_commands = CommandRegistry(SLASH)
        self.prefix_commands = CommandRegistry(PREFIX)
        self.error_reporter = ErrorReporter(self.config.error_webhook)
        self.startup_complete = False

    async def setup_hook(self):
        """Initialize auto modules before connecting to the gateway."""
        load_auto_modules(AUTO_DIR, self)

    async def close(self):
        await self.error_reporter.close()
        await super().close()

    # Startup

    async def on_ready(self):
        logger.info(f"Hello World, I'm {self.user}")
        logger.info(f"Connected to {len(self.guilds)} guilds")

        # ready fires again after every gateway reconnect
        if self.startup_complete:
            return
        self.startup_complete = True
        await self.run_startup_sequence()

    async def run_startup_sequence(self) -> None:
        """Presence, store, 24/7 voice, command tables and publication, in order."""
        if not self.presence_refresh.is_running():
            self.presence_refresh.start()

        # The store comes up before the voice rejoin, which reads its stays from it
        await self.connect_database()
        await self.rejoin_voice()
        await self.load_commands()
        await self.publish_slash_commands()

    @tasks.loop(seconds=PRESENCE_REFRESH_SECONDS)
    async def presence_refresh(self):
        await self.update_presence()

    async def update_presence(self) -> None:
        activity = discord.Streaming(
            name=f"On {len(self.guilds)} Servers | {self.config.prefix}help",
            url=self.config.presence_url
        )
        try:
            await self.change_presence(activity=activity)
        except Exception as e:
            logger.warning(f"Failed to update presence: {e}")

    async def connect_database(self) -> bool:
        try:
            await self.db_manager.initialize_database()
            logger.info("Connected to database")
            return True
        except Exception as e:
            logger.error(f"Database connection error: {e}")
            await self.error_reporter.report("Database connection error", e)
            return False

    async def rejoin_voice(self) -> int:
        try:
            return await rejoin_voice_channels(self, self.voice_stay_manager, self.error_reporter)
        except Exception as e:
            logger.error(f"Error rejoining 24/7 voice channels: {e}")
            await self.error_reporter.report("Error rejoining 24/7 voice channels", e)
            return 0

    async def load_commands(self) -> None:
        for registry, directory in ((self.slash_commands, SLASH_COMMANDS_DIR),
                                    (self.prefix_commands, PREFIX_COMMANDS_DIR)):
            try:
                registry.load(directory, self)
            except Exception as e:
                logger.error(f"Error loading {registry.kind} commands: {e}")
                await self.error_reporter.report(f"Error loading {registry.kind} commands", e)

    async def publish_slash_commands(self) -> Optional[int]:
        application_id = self.config.client_id or self.application_id
        if not application_id:
            logger.warning("No clientId configured, skipping slash command deployment")
            return None
        return await publish_commands(
            self,
            self.slash_commands,
            application_id,
            guild_id=self.config.guild_id,
            reporter=self.error_reporter
        )

    # Notices

    def notice_embed(self, text: str) -> discord.Embed:
        embed = discord.Embed(description=text, color=NOTICE_COLOR)
        embed.set_footer(text=self.config.embed_footer)
        return embed

    async def send_interaction_notice(self, interaction: discord.Interaction, text: str) -> None:
        """Ephemeral notice that deletes itself after NOTICE_LIFETIME seconds."""
        embed = self.notice_embed(text)
        try:
            if interaction.response.is_done():
                message = await interaction.followup.send(embed=embed, ephemeral=True, wait=True)
                await message.delete(delay=NOTICE_LIFETIME)
            else:
                await interaction.response.send_message(embed=embed, ephemeral=True, delete_after=NOTICE_LIFETIME)
        except discord.HTTPException as e:
            logger.warning(f"Failed to send notice for interaction {interaction.id}: {e}")

    async def send_message_notice(self, message: discord.Message, text: str) -> None:
        try:
            await message.reply(embed=self.notice_embed(text), delete_after=NOTICE_LIFETIME)
        except discord.HTTPException as e:
            logger.warning(f"Failed to send notice in channel {message.channel.id}: {e}")

    async def check_blacklisted(self, guild_id: Optional[int], user_id: int, context: str) -> Optional[bool]:
        """
        Blacklist lookup for a command invocation.

        Returns None when the store could not be read; the failure has
        already been logged and reported.
        """
        if guild_id is None:
            return False
        try:
            return await self.blacklist_manager.is_blacklisted(guild_id, user_id)
        except Exception as e:
            logger.error(f"Failed to check blacklist for user {user_id} in guild {guild_id}: {e}")
            await self.error_reporter.report(f"Error checking blacklist for {context}", e)
            return None

    # Events

    async def on_interaction(self, interaction: discord.Interaction):
        if not is_chat_input(interaction):
            return

        name = command_name(interaction)
        blacklisted = await self.check_blacklisted(interaction.guild_id, interaction.user.id, f"command {name}")
        if blacklisted is None:
            await self.send_interaction_notice(interaction, ERROR_NOTICE)
            return
        if blacklisted:
            await self.send_interaction_notice(interaction, BLACKLISTED_NOTICE)
            return

        command = self.slash_commands.get(name)
        if command is None:
            return

        try:
            await invoke(command.execute, interaction)
        except Exception as e:
            logger.exception(f"Error in command {name}")
            await self.send_interaction_notice(interaction, ERROR_NOTICE)
            await self.error_reporter.report(f"Error in command {name}", e)

    async def on_message(self, message: discord.Message):
        prefix = self.config.prefix
        if message.author.bot or not message.content.startswith(prefix):
            return

        guild_id = message.guild.id if message.guild else None
        blacklisted = await self.check_blacklisted(guild_id, message.author.id, "prefix command")
        if blacklisted is None:
            await self.send_message_notice(message, ERROR_NOTICE)
            return
        if blacklisted:
            await self.send_message_notice(message, BLACKLISTED_NOTICE)
            return

        args = message.content[len(prefix):].split()
        if not args:
            return
        name = args.pop(0).lower()

        command = self.prefix_commands.get(name)
        if command is None:
            return

        try:
            await invoke(command.execute, message, args)
        except Exception as e:
            logger.exception(f"Error in prefix command {name}")
            await self.send_message_notice(message, ERROR_NOTICE)
            await self.error_reporter.report(f"Error in prefix command {name}", e)

    async def on_member_join(self, member: discord.Member):
        await self.send_greeting(member, WELCOME, "Error in member join")

    async def on_member_remove(self, member: discord.Member):
        await self.send_greeting(member, GOODBYE, "Error in member leave")

    async def send_greeting(self, member: discord.Member, kind: str, error_title: str) -> None:
        try:
            config = await self.greeting_manager.get_config(member.guild.id, kind)
            if config is None:
                return

            channel = member.guild.get_channel(config.channel_id)
            if channel is None:
                return

            await channel.send(embed=build_greeting_embed(config, member))
        except Exception as e:
            logger.error(f"{error_title} in {member.guild.name}: {e}")
            await self.error_reporter.report(error_title, e)


def main() -> None:
    try:
        config = load_config()
    except ConfigError as e:
        logger.error(f"Invalid configuration: {e}")
        sys.exit(1)

    missing = config.missing_required()
    if "token" in missing:
        logger.error("No bot token configured (token in config.json or DISCORD_BOT_TOKEN)!")
        sys.exit(1)
    if "clientId" in missing:
        logger.warning("clientId not configured; slash commands will use the logged-in application ID")

    bot = GuildKeeper(config)
    try:
        bot.run(config.token, log_handler=None)
    except discord.LoginFailure:
        logger.error("Invalid bot token!")
    except Exception as e:
        logger.error(f"Failed to start bot: {e}")


# Startup
if __name__ == "__main__":
    main()
