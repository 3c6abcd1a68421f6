"""Port interface for voice connection and audio stream operations."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any, TypeAlias

from discord_music_queue.domain.music.value_objects import TerminalKind
from discord_music_queue.domain.shared.types import ChannelIdField, DiscordSnowflake

VoiceConnection: TypeAlias = Any
"""Opaque, exclusively owned connection handle returned by :meth:`VoiceTransport.join`."""

AudioPlayer: TypeAlias = Any
"""Opaque playback-control handle bound 1:1 to a connection."""

StreamHandle: TypeAlias = Any
"""Opaque playable resource produced by :meth:`VoiceTransport.open_stream`."""

TerminalCallback = Callable[[AudioPlayer, StreamHandle, TerminalKind], None]
"""Invoked (possibly from a non-loop thread) when a bound stream ends."""


class VoiceTransport(ABC):
    """Interface for voice channel connections and audio playback."""

    @abstractmethod
    async def join(
        self, guild_id: DiscordSnowflake, voice_channel_id: ChannelIdField
    ) -> VoiceConnection:
        """Connect to a voice channel.

        Raises:
            ConnectionFailedError: The channel could not be joined.
        """
        ...

    @abstractmethod
    def create_player(self, connection: VoiceConnection) -> AudioPlayer:
        """Create the player bound to ``connection``."""
        ...

    @abstractmethod
    async def open_stream(self, source_url: str) -> StreamHandle:
        """Produce a streamable resource for a song's source URL.

        Raises:
            StreamError: The resource could not be opened.
        """
        ...

    @abstractmethod
    def bind(self, player: AudioPlayer, stream: StreamHandle) -> None:
        """Start emitting ``stream`` through ``player``.

        Raises:
            StreamError: The player rejected the stream.
        """
        ...

    @abstractmethod
    def force_idle(self, player: AudioPlayer) -> None:
        """Force the active resource to terminate with idle status."""
        ...

    @abstractmethod
    def pause(self, player: AudioPlayer) -> None:
        ...

    @abstractmethod
    def resume(self, player: AudioPlayer) -> None:
        ...

    @abstractmethod
    def on_status(self, player: AudioPlayer, callback: TerminalCallback) -> None:
        """Register the terminal-status callback for ``player``."""
        ...

    @abstractmethod
    async def release(self, connection: VoiceConnection) -> None:
        """Tear down a connection. Must be safe to call on a dead connection."""
        ...
