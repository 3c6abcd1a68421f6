"""Core domain entities for the music bounded context."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from discord_music_queue.domain.music.value_objects import SessionState
from discord_music_queue.domain.shared.exceptions import InvalidOperationError
from discord_music_queue.domain.shared.types import (
    ChannelIdField,
    DurationSeconds,
    GuildIdField,
    HttpUrlStr,
    SongTitleStr,
)


class Song(BaseModel):
    """Immutable value object representing a resolved, playable song."""

    model_config = ConfigDict(frozen=True, strict=True)

    title: SongTitleStr
    source_url: HttpUrlStr
    duration_seconds: DurationSeconds = 0

    @property
    def duration_formatted(self) -> str:
        """Format duration as MM:SS or HH:MM:SS; zero means a live stream."""
        if self.duration_seconds == 0:
            return "LIVE"

        hours, remainder = divmod(self.duration_seconds, 3600)
        minutes, seconds = divmod(remainder, 60)

        if hours > 0:
            return f"{hours}:{minutes:02d}:{seconds:02d}"
        return f"{minutes}:{seconds:02d}"


class QueueSession(BaseModel):
    """Aggregate root owning the song queue and voice handles for one guild.

    ``connection`` and ``player`` are opaque transport handles. They are set
    together by :meth:`attach_transport` and cleared together by
    :meth:`detach_transport`; the session never holds one without the other.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    guild_id: GuildIdField
    voice_channel_id: ChannelIdField
    text_channel_id: ChannelIdField
    songs: list[Song] = Field(default_factory=list)
    state: SessionState = SessionState.EMPTY

    connection: Any = None
    player: Any = None
    active_stream: Any = None

    @property
    def now_playing(self) -> Song | None:
        return self.songs[0] if self.songs else None

    @property
    def has_songs(self) -> bool:
        return bool(self.songs)

    @property
    def is_paused(self) -> bool:
        return self.state == SessionState.PAUSED

    def append(self, song: Song) -> int:
        """Append a song to the tail and return its zero-based position."""
        self.songs.append(song)
        return len(self.songs) - 1

    def drop_head(self) -> Song | None:
        """Remove and return the head of the queue."""
        if not self.songs:
            return None
        return self.songs.pop(0)

    def clear(self) -> int:
        """Remove every song and return how many were dropped."""
        count = len(self.songs)
        self.songs.clear()
        return count

    def transition_to(self, new_state: SessionState) -> None:
        if not self.state.can_transition_to(new_state):
            raise InvalidOperationError(
                operation=f"transition to {new_state.value}",
                current_state=self.state.value,
                message=f"Cannot transition from {self.state.value} to {new_state.value}",
            )
        self.state = new_state

    def attach_transport(self, connection: Any, player: Any) -> None:
        if connection is None or player is None:
            raise InvalidOperationError(
                operation="attach transport",
                current_state=self.state.value,
                message="Connection and player must be attached together",
            )
        self.connection = connection
        self.player = player

    def detach_transport(self) -> Any:
        """Clear connection, player and active stream; return the old connection."""
        connection = self.connection
        self.connection = None
        self.player = None
        self.active_stream = None
        return connection

    def owns(self, player: Any, stream: Any) -> bool:
        """Whether a terminal event for ``player``/``stream`` belongs to this session."""
        return (
            self.player is not None
            and player is self.player
            and stream is not None
            and stream is self.active_stream
        )
