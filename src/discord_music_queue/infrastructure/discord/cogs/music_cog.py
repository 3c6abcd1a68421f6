"""Prefix-command music cog routing chat commands into the queue service."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import discord
from discord.ext import commands

from discord_music_queue.domain.shared.messages import (
    DiscordUIMessages,
    ErrorMessages,
    LogTemplates,
)
from discord_music_queue.utils.reply import is_spotify_link, render_queue_listing

if TYPE_CHECKING:
    from ....config.container import Container

logger = logging.getLogger(__name__)


class MusicCog(commands.Cog):
    def __init__(self, bot: commands.Bot, container: Container) -> None:
        self.bot = bot
        self.container = container

    async def _reply(self, ctx: commands.Context, content: str) -> None:
        await ctx.reply(content, mention_author=False)

    async def _voice_channel(
        self, ctx: commands.Context
    ) -> discord.VoiceChannel | discord.StageChannel | None:
        """Return the caller's voice channel, replying with a hint when there is none."""
        author = ctx.author
        voice = author.voice if isinstance(author, discord.Member) else None
        if voice is None or voice.channel is None:
            await self._reply(ctx, DiscordUIMessages.STATE_NEED_TO_BE_IN_VOICE)
            return None
        return voice.channel

    async def cog_before_invoke(self, ctx: commands.Context) -> None:
        logger.debug(
            LogTemplates.COMMAND_RECEIVED,
            ctx.command.qualified_name if ctx.command else "<unknown>",
            ctx.author.id,
            ctx.guild.id if ctx.guild else None,
        )

    async def cog_command_error(self, ctx: commands.Context, error: Exception) -> None:
        if isinstance(error, commands.NoPrivateMessage):
            await self._reply(ctx, DiscordUIMessages.STATE_SERVER_ONLY)
            return

        original = getattr(error, "original", error)
        command_name = ctx.command.qualified_name if ctx.command else "<unknown>"
        logger.error(LogTemplates.COMMAND_ERROR, command_name, original, exc_info=original)

        try:
            await self._reply(ctx, DiscordUIMessages.ERROR_COMMAND_FAILED)
        except discord.HTTPException:
            logger.warning(LogTemplates.COMMAND_REPLY_FAILED, command_name)

    # ─────────────────────────────────────────────────────────────────
    # Playback
    # ─────────────────────────────────────────────────────────────────

    @commands.command(name="play", aliases=["p"], help="Play a song or add it to the queue.")
    @commands.guild_only()
    async def play(self, ctx: commands.Context, *, query: str = "") -> None:
        channel = await self._voice_channel(ctx)
        if channel is None:
            return

        query = query.strip()
        if not query:
            await self._reply(ctx, DiscordUIMessages.ERROR_QUERY_REQUIRED)
            return

        if is_spotify_link(query):
            await self._reply(ctx, DiscordUIMessages.ERROR_SPOTIFY_UNSUPPORTED)
            return

        assert ctx.guild is not None

        result = await self.container.queue_service.enqueue(
            ctx.guild.id, channel.id, ctx.channel.id, query
        )
        # "Now playing" and stream failures were already posted to the channel.
        if not result.announced:
            await self._reply(ctx, result.message)

    @commands.command(name="skip", aliases=["s"], help="Skip the current song.")
    @commands.guild_only()
    async def skip(self, ctx: commands.Context) -> None:
        if await self._voice_channel(ctx) is None:
            return

        assert ctx.guild is not None
        result = await self.container.queue_service.skip(ctx.guild.id)
        await self._reply(ctx, result.message)

    @commands.command(name="stop", aliases=["leave"], help="Stop playing and clear the queue.")
    @commands.guild_only()
    async def stop(self, ctx: commands.Context) -> None:
        if await self._voice_channel(ctx) is None:
            return

        assert ctx.guild is not None
        result = await self.container.queue_service.stop(ctx.guild.id)
        await self._reply(ctx, result.message)

    @commands.command(name="pause", aliases=["resume"], help="Pause or resume playback.")
    @commands.guild_only()
    async def pause(self, ctx: commands.Context) -> None:
        if await self._voice_channel(ctx) is None:
            return

        assert ctx.guild is not None
        result = await self.container.queue_service.toggle_pause(ctx.guild.id)
        await self._reply(ctx, result.message)

    # ─────────────────────────────────────────────────────────────────
    # Info
    # ─────────────────────────────────────────────────────────────────

    @commands.command(name="queue", aliases=["q"], help="Show the current queue.")
    @commands.guild_only()
    async def queue(self, ctx: commands.Context) -> None:
        assert ctx.guild is not None
        listing = await self.container.queue_service.list_queue(ctx.guild.id)
        await self._reply(ctx, render_queue_listing(listing))

    @commands.command(name="help", aliases=["h"], help="Show the command summary.")
    async def show_help(self, ctx: commands.Context) -> None:
        prefix = ctx.clean_prefix or self.container.settings.discord.command_prefix
        await self._reply(ctx, DiscordUIMessages.HELP_TEXT.format(prefix=prefix))


async def setup(bot: commands.Bot) -> None:
    container = getattr(bot, "container", None)
    if container is None:
        raise RuntimeError(ErrorMessages.CONTAINER_NOT_FOUND)

    await bot.add_cog(MusicCog(bot, container))
