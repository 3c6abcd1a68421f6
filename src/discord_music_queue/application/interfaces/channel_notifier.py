"""Port interface for posting status messages to text channels."""

from __future__ import annotations

from abc import ABC, abstractmethod

from discord_music_queue.domain.shared.types import ChannelIdField


class ChannelNotifier(ABC):
    """Interface for sending status replies to a text channel."""

    @abstractmethod
    async def send(self, channel_id: ChannelIdField, content: str) -> bool:
        """Send ``content`` to a channel. Returns False instead of raising on failure."""
        ...
