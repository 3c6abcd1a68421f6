"""Port interface for resolving songs from queries and URLs."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from discord_music_queue.domain.shared.types import NonEmptyStr

if TYPE_CHECKING:
    from ...domain.music.entities import Song


class SongResolver(ABC):
    """Interface for resolving URLs and search queries to playable songs."""

    @abstractmethod
    async def resolve(self, query: NonEmptyStr) -> "Song":
        """Resolve a query or URL to a song.

        Raises:
            ResolutionNotFoundError: Nothing matched the query.
            TransportTimeoutError: The upstream service timed out.
            ResolutionError: Any other extraction failure.
        """
        ...

    @abstractmethod
    def is_url(self, query: NonEmptyStr) -> bool:
        ...
