"""
Music Bounded Context

Domain logic for songs, per-guild queue sessions and the session registry.
"""

from discord_music_queue.domain.music.entities import QueueSession, Song
from discord_music_queue.domain.music.repository import QueueSessionRegistry
from discord_music_queue.domain.music.value_objects import SessionState, TerminalKind

__all__ = [
    # Entities
    "Song",
    "QueueSession",
    # Value Objects
    "SessionState",
    "TerminalKind",
    # Repository
    "QueueSessionRegistry",
]
