"""
Forwarding of failures to the error-reporting webhook.
"""

import logging
import traceback
from typing import Optional

import aiohttp
import discord

logger = logging.getLogger(__name__)

# Discord rejects message content longer than this
MESSAGE_LIMIT = 2000


def format_report(title: str, error: BaseException) -> str:
    """Render a failure as '<title>: ' followed by its traceback in a code block."""
    trace = "".join(traceback.format_exception(type(error), error, error.__traceback__)).strip()
    header = f"{title}: \n```"
    footer = "```"
    room = MESSAGE_LIMIT - len(header) - len(footer)
    if len(trace) > room:
        # Keep the tail; the exception line is the useful part
        trace = "..." + trace[-(room - 3):]
    return f"{header}{trace}{footer}"


class ErrorReporter:
    """Sends failure reports to a webhook. Reporting itself never raises."""

    def __init__(self, webhook_url: Optional[str] = None):
        self.webhook_url = webhook_url
        self._session: Optional[aiohttp.ClientSession] = None

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
        return self._session

    async def report(self, title: str, error: BaseException) -> bool:
        """
        Forward a failure to the webhook.

        Returns:
            True if the webhook accepted the report
        """
        content = format_report(title, error)
        if not self.webhook_url:
            logger.warning(f"No error webhook configured, report not sent: {title}: {error}")
            return False

        try:
            session = await self._get_session()
            webhook = discord.Webhook.from_url(self.webhook_url, session=session)
            await webhook.send(content=content)
            return True
        except ValueError as e:
            logger.error(f"Invalid error webhook URL: {e}")
        except (discord.HTTPException, aiohttp.ClientError) as e:
            logger.error(f"Failed to send error report to webhook: {e}")
        return False

    async def close(self) -> None:
        if self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None
