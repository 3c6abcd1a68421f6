"""Infrastructure layer - external systems integration.

This layer contains implementations for:
- Persistence (in-memory guild session registry)
- Discord (bot, cogs, voice and channel adapters)
- Audio (yt-dlp resolution)
- Health (HTTP liveness listener)
"""

from discord_music_queue.infrastructure.discord.adapters.voice_transport import (
    DiscordVoiceTransport,
)
from discord_music_queue.infrastructure.discord.bot import create_bot
from discord_music_queue.infrastructure.persistence.session_registry import (
    InMemoryQueueSessionRegistry,
)

__all__ = [
    "create_bot",
    "DiscordVoiceTransport",
    "InMemoryQueueSessionRegistry",
]
