"""Discord channel notifier implementing ChannelNotifier."""

from __future__ import annotations

import logging

import discord

from discord_music_queue.application.interfaces.channel_notifier import ChannelNotifier
from discord_music_queue.domain.shared.messages import LogTemplates

logger = logging.getLogger(__name__)


class DiscordChannelNotifier(ChannelNotifier):
    def __init__(self, bot: discord.Client) -> None:
        self._bot = bot

    async def send(self, channel_id: int, content: str) -> bool:
        channel = self._bot.get_channel(channel_id)
        if not isinstance(channel, discord.abc.Messageable):
            logger.warning(LogTemplates.NOTIFY_CHANNEL_MISSING, channel_id)
            return False

        try:
            await channel.send(content)
            return True
        except discord.HTTPException as e:
            logger.warning(LogTemplates.NOTIFY_FAILED, channel_id, e)
            return False
