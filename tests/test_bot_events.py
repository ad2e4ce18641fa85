"""
Tests for the bot's interaction, message and member event handlers.
"""

import pytest
import pytest_asyncio
import discord
from unittest.mock import AsyncMock, MagicMock

from core.config import BotConfig
from core.registry import CommandUnit
from database.manager import DatabaseError
from database.models import GreetingConfig, WELCOME, GOODBYE
from main import GuildKeeper, BLACKLISTED_NOTICE, ERROR_NOTICE, NOTICE_LIFETIME


@pytest_asyncio.fixture
async def bot():
    """Bot with a mocked store and reporter."""
    bot = GuildKeeper(config=BotConfig(token="t", client_id=1, prefix="!", embed_footer="Footer"),
                      db_manager=MagicMock())
    bot.blacklist_manager = MagicMock()
    bot.blacklist_manager.is_blacklisted = AsyncMock(return_value=False)
    bot.greeting_manager = MagicMock()
    bot.error_reporter = MagicMock()
    bot.error_reporter.report = AsyncMock()
    bot.error_reporter.close = AsyncMock()
    yield bot


def make_interaction(name="ping", guild_id=111, user_id=42, response_done=False):
    interaction = MagicMock()
    interaction.id = 999
    interaction.type = discord.InteractionType.application_command
    interaction.data = {"name": name, "type": 1}
    interaction.guild_id = guild_id
    interaction.user.id = user_id
    interaction.response.is_done = MagicMock(return_value=response_done)
    interaction.response.send_message = AsyncMock()
    interaction.followup.send = AsyncMock()
    return interaction


def make_message(content="!ping", bot_author=False, guild_id=111, user_id=42):
    message = MagicMock()
    message.content = content
    message.author.bot = bot_author
    message.author.id = user_id
    message.guild.id = guild_id
    message.reply = AsyncMock()
    return message


def slash_unit(bot, name, execute):
    bot.slash_commands.register(CommandUnit(name=name, execute=execute))
    return execute


def prefix_unit(bot, name, execute):
    bot.prefix_commands.register(CommandUnit(name=name, execute=execute))
    return execute


class TestInteractionHandler:

    @pytest.mark.asyncio
    async def test_dispatches_to_command(self, bot):
        execute = slash_unit(bot, "ping", AsyncMock())
        interaction = make_interaction()

        await bot.on_interaction(interaction)

        execute.assert_awaited_once_with(interaction)
        bot.blacklist_manager.is_blacklisted.assert_awaited_once_with(111, 42)

    @pytest.mark.asyncio
    async def test_sync_execute_supported(self, bot):
        execute = slash_unit(bot, "ping", MagicMock(return_value=None))

        await bot.on_interaction(make_interaction())

        execute.assert_called_once()

    @pytest.mark.asyncio
    async def test_blacklisted_user_never_reaches_execute(self, bot):
        execute = slash_unit(bot, "ping", AsyncMock())
        bot.blacklist_manager.is_blacklisted.return_value = True
        interaction = make_interaction()

        await bot.on_interaction(interaction)

        execute.assert_not_called()
        kwargs = interaction.response.send_message.call_args.kwargs
        assert kwargs["embed"].description == BLACKLISTED_NOTICE
        assert kwargs["embed"].footer.text == "Footer"
        assert kwargs["ephemeral"] is True
        assert kwargs["delete_after"] == NOTICE_LIFETIME
        bot.error_reporter.report.assert_not_called()

    @pytest.mark.asyncio
    async def test_blacklisted_user_of_unknown_command_still_notified(self, bot):
        bot.blacklist_manager.is_blacklisted.return_value = True
        interaction = make_interaction(name="nope")

        await bot.on_interaction(interaction)

        interaction.response.send_message.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_unknown_command_is_silent(self, bot):
        interaction = make_interaction(name="nope")

        await bot.on_interaction(interaction)

        interaction.response.send_message.assert_not_called()
        interaction.followup.send.assert_not_called()
        bot.error_reporter.report.assert_not_called()

    @pytest.mark.asyncio
    async def test_non_chat_input_ignored(self, bot):
        execute = slash_unit(bot, "ping", AsyncMock())
        component = make_interaction()
        component.type = discord.InteractionType.component
        context_menu = make_interaction()
        context_menu.data = {"name": "ping", "type": 2}

        await bot.on_interaction(component)
        await bot.on_interaction(context_menu)

        execute.assert_not_called()
        bot.blacklist_manager.is_blacklisted.assert_not_called()

    @pytest.mark.asyncio
    async def test_direct_messages_skip_blacklist(self, bot):
        execute = slash_unit(bot, "ping", AsyncMock())

        await bot.on_interaction(make_interaction(guild_id=None))

        bot.blacklist_manager.is_blacklisted.assert_not_called()
        execute.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_execute_failure_notifies_and_reports_once(self, bot):
        error = RuntimeError("boom")
        slash_unit(bot, "ping", AsyncMock(side_effect=error))
        interaction = make_interaction()

        await bot.on_interaction(interaction)

        interaction.response.send_message.assert_awaited_once()
        assert interaction.response.send_message.call_args.kwargs["embed"].description == ERROR_NOTICE
        bot.error_reporter.report.assert_awaited_once_with("Error in command ping", error)

    @pytest.mark.asyncio
    async def test_failure_after_reply_uses_followup(self, bot):
        slash_unit(bot, "ping", AsyncMock(side_effect=RuntimeError("late")))
        interaction = make_interaction(response_done=True)
        notice = MagicMock()
        notice.delete = AsyncMock()
        interaction.followup.send.return_value = notice

        await bot.on_interaction(interaction)

        interaction.response.send_message.assert_not_called()
        kwargs = interaction.followup.send.call_args.kwargs
        assert kwargs["ephemeral"] is True
        assert kwargs["embed"].description == ERROR_NOTICE
        notice.delete.assert_awaited_once_with(delay=NOTICE_LIFETIME)

    @pytest.mark.asyncio
    async def test_notice_delivery_failure_does_not_raise(self, bot):
        slash_unit(bot, "ping", AsyncMock(side_effect=RuntimeError("boom")))
        interaction = make_interaction()
        interaction.response.send_message.side_effect = discord.HTTPException(MagicMock(status=404), "gone")

        await bot.on_interaction(interaction)

        bot.error_reporter.report.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_blacklist_store_failure_fails_closed(self, bot):
        execute = slash_unit(bot, "ping", AsyncMock())
        error = DatabaseError("locked")
        bot.blacklist_manager.is_blacklisted.side_effect = error
        interaction = make_interaction()

        await bot.on_interaction(interaction)

        execute.assert_not_called()
        assert interaction.response.send_message.call_args.kwargs["embed"].description == ERROR_NOTICE
        bot.error_reporter.report.assert_awaited_once_with("Error checking blacklist for command ping", error)


class TestMessageHandler:

    @pytest.mark.asyncio
    async def test_parses_name_and_args(self, bot):
        execute = prefix_unit(bot, "ping", AsyncMock())
        message = make_message("!PING  one two")

        await bot.on_message(message)

        execute.assert_awaited_once_with(message, ["one", "two"])

    @pytest.mark.asyncio
    @pytest.mark.parametrize("content,bot_author", [
        ("!ping", True),
        ("ping", False),
        ("?ping", False),
    ])
    async def test_ignored_messages(self, bot, content, bot_author):
        execute = prefix_unit(bot, "ping", AsyncMock())

        await bot.on_message(make_message(content, bot_author=bot_author))

        execute.assert_not_called()
        bot.blacklist_manager.is_blacklisted.assert_not_called()

    @pytest.mark.asyncio
    async def test_bare_prefix_is_noop(self, bot):
        message = make_message("!   ")

        await bot.on_message(message)

        message.reply.assert_not_called()
        bot.error_reporter.report.assert_not_called()

    @pytest.mark.asyncio
    async def test_unknown_command_is_silent(self, bot):
        message = make_message("!nope")

        await bot.on_message(message)

        message.reply.assert_not_called()
        bot.error_reporter.report.assert_not_called()

    @pytest.mark.asyncio
    async def test_blacklisted_author_never_reaches_execute(self, bot):
        execute = prefix_unit(bot, "ping", AsyncMock())
        bot.blacklist_manager.is_blacklisted.return_value = True
        message = make_message()

        await bot.on_message(message)

        execute.assert_not_called()
        kwargs = message.reply.call_args.kwargs
        assert kwargs["embed"].description == BLACKLISTED_NOTICE
        assert kwargs["delete_after"] == NOTICE_LIFETIME

    @pytest.mark.asyncio
    async def test_execute_failure_notifies_and_reports_once(self, bot):
        error = ValueError("bad")
        prefix_unit(bot, "ping", AsyncMock(side_effect=error))
        message = make_message()

        await bot.on_message(message)

        message.reply.assert_awaited_once()
        assert message.reply.call_args.kwargs["embed"].description == ERROR_NOTICE
        bot.error_reporter.report.assert_awaited_once_with("Error in prefix command ping", error)

    @pytest.mark.asyncio
    async def test_direct_message_skips_blacklist(self, bot):
        execute = prefix_unit(bot, "ping", AsyncMock())
        message = make_message()
        message.guild = None

        await bot.on_message(message)

        bot.blacklist_manager.is_blacklisted.assert_not_called()
        execute.assert_awaited_once()


def make_member(guild_id=111, member_id=42, channel=None):
    member = MagicMock(spec=discord.Member)
    member.id = member_id
    member.guild = MagicMock(spec=discord.Guild)
    member.guild.id = guild_id
    member.guild.name = "Test Guild"
    member.guild.get_channel.return_value = channel
    return member


def make_channel():
    channel = MagicMock(spec=discord.TextChannel)
    channel.send = AsyncMock()
    return channel


class TestMemberGreetings:

    @pytest.mark.asyncio
    async def test_welcome_posted(self, bot):
        channel = make_channel()
        bot.greeting_manager.get_config = AsyncMock(return_value=GreetingConfig(
            guild_id=111, kind=WELCOME, channel_id=10, title="Welcome {user}", description="to {server}"
        ))
        member = make_member(channel=channel)

        await bot.on_member_join(member)

        bot.greeting_manager.get_config.assert_awaited_once_with(111, WELCOME)
        member.guild.get_channel.assert_called_once_with(10)
        embed = channel.send.call_args.kwargs["embed"]
        assert embed.title == "Welcome <@42>"
        assert embed.description == "to Test Guild"

    @pytest.mark.asyncio
    async def test_goodbye_uses_goodbye_config(self, bot):
        channel = make_channel()
        bot.greeting_manager.get_config = AsyncMock(return_value=GreetingConfig(
            guild_id=111, kind=GOODBYE, channel_id=10, title="Bye {user}"
        ))

        await bot.on_member_remove(make_member(channel=channel))

        bot.greeting_manager.get_config.assert_awaited_once_with(111, GOODBYE)
        channel.send.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_no_config_does_nothing(self, bot):
        bot.greeting_manager.get_config = AsyncMock(return_value=None)
        member = make_member(channel=make_channel())

        await bot.on_member_join(member)

        member.guild.get_channel.assert_not_called()
        bot.error_reporter.report.assert_not_called()

    @pytest.mark.asyncio
    async def test_unknown_channel_does_nothing(self, bot):
        bot.greeting_manager.get_config = AsyncMock(return_value=GreetingConfig(
            guild_id=111, kind=WELCOME, channel_id=10
        ))

        await bot.on_member_join(make_member(channel=None))

        bot.error_reporter.report.assert_not_called()

    @pytest.mark.asyncio
    async def test_send_failure_reported(self, bot):
        channel = make_channel()
        error = discord.Forbidden(MagicMock(status=403), "Missing Access")
        channel.send.side_effect = error
        bot.greeting_manager.get_config = AsyncMock(return_value=GreetingConfig(
            guild_id=111, kind=GOODBYE, channel_id=10
        ))

        await bot.on_member_remove(make_member(channel=channel))

        bot.error_reporter.report.assert_awaited_once_with("Error in member leave", error)

    @pytest.mark.asyncio
    async def test_store_failure_reported(self, bot):
        error = DatabaseError("locked")
        bot.greeting_manager.get_config = AsyncMock(side_effect=error)

        await bot.on_member_join(make_member())

        bot.error_reporter.report.assert_awaited_once_with("Error in member join", error)
