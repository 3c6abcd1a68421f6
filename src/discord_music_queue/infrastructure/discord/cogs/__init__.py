"""Discord cogs - command handlers."""

from discord_music_queue.infrastructure.discord.cogs.music_cog import MusicCog

__all__ = ["MusicCog"]
