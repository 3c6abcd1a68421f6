"""
Music Domain Registry Interface

Abstract base class defining the contract for the guild → session registry.
Implementations live in the infrastructure layer.
"""

import asyncio
from abc import ABC, abstractmethod

from discord_music_queue.domain.music.entities import QueueSession


class QueueSessionRegistry(ABC):
    """Abstract registry of live queue sessions, at most one per guild.

    Callers must hold :meth:`lock` for a guild while creating, mutating or
    removing that guild's session. Locks for different guilds are independent.
    """

    @abstractmethod
    def lock(self, guild_id: int) -> asyncio.Lock:
        """Return the exclusive lock that serializes operations for a guild."""
        ...

    @abstractmethod
    def get(self, guild_id: int) -> QueueSession | None:
        """Retrieve the live session for a guild.

        Args:
            guild_id: The Discord guild ID.

        Returns:
            The session if one is registered, None otherwise.
        """
        ...

    @abstractmethod
    def create(
        self, guild_id: int, voice_channel_id: int, text_channel_id: int
    ) -> QueueSession:
        """Register a new empty session.

        Raises:
            SessionAlreadyExistsError: If the guild already has a live session.
        """
        ...

    @abstractmethod
    def remove(self, guild_id: int) -> QueueSession | None:
        """Unregister and return a guild's session, if any."""
        ...

    @abstractmethod
    def stop_generation(self, guild_id: int) -> int:
        """Return how many times a guild's session has been stopped."""
        ...

    @abstractmethod
    def record_stop(self, guild_id: int) -> int:
        """Count an explicit stop for a guild and return the new generation."""
        ...

    @abstractmethod
    def active_guild_ids(self) -> list[int]:
        ...

    @abstractmethod
    def __len__(self) -> int:
        ...
