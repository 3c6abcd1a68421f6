"""Shared fixtures and in-memory port fakes for the queue test suite."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any

import pytest

from discord_music_queue.application.interfaces.channel_notifier import ChannelNotifier
from discord_music_queue.application.interfaces.song_resolver import SongResolver
from discord_music_queue.application.interfaces.voice_transport import (
    TerminalCallback,
    VoiceTransport,
)
from discord_music_queue.application.services.queue_service import QueueApplicationService
from discord_music_queue.config.settings import QueueSettings
from discord_music_queue.domain.music.entities import Song
from discord_music_queue.domain.music.value_objects import TerminalKind
from discord_music_queue.domain.shared.exceptions import (
    ResolutionNotFoundError,
    StreamError,
)
from discord_music_queue.infrastructure.persistence.session_registry import (
    InMemoryQueueSessionRegistry,
)

GUILD_ID = 111111111111111111
OTHER_GUILD_ID = 222222222222222222
VOICE_CHANNEL_ID = 333333333333333333
TEXT_CHANNEL_ID = 444444444444444444


def make_song(name: str, duration: int = 180) -> Song:
    return Song(
        title=name,
        source_url=f"https://www.youtube.com/watch?v={name}",
        duration_seconds=duration,
    )


# =============================================================================
# Port fakes
# =============================================================================


class FakeResolver(SongResolver):
    """Resolves any query to a song titled after it, unless told otherwise."""

    def __init__(self) -> None:
        self.failures: dict[str, Exception] = {}
        self.gates: dict[str, asyncio.Event] = {}
        self.calls: list[str] = []

    async def resolve(self, query: str) -> Song:
        self.calls.append(query)
        if query in self.gates:
            await self.gates[query].wait()
        if query in self.failures:
            raise self.failures[query]
        return make_song(query)

    def is_url(self, query: str) -> bool:
        return query.startswith("http")

    def not_found(self, query: str) -> None:
        self.failures[query] = ResolutionNotFoundError(query)

    def hold(self, query: str) -> asyncio.Event:
        """Block resolution of ``query`` until the returned event is set."""
        gate = asyncio.Event()
        self.gates[query] = gate
        return gate


@dataclass(eq=False)
class FakeConnection:
    guild_id: int
    channel_id: int
    released: int = 0


@dataclass(eq=False)
class FakePlayer:
    connection: FakeConnection
    callback: TerminalCallback | None = None
    current: Any = None
    paused: bool = False


@dataclass(eq=False)
class FakeStream:
    source_url: str


@dataclass
class FakeVoiceTransport(VoiceTransport):
    """Records every call; terminal events are fired explicitly or by force_idle."""

    fail_join: Exception | None = None
    bad_urls: set[str] = field(default_factory=set)
    connections: list[FakeConnection] = field(default_factory=list)
    players: list[FakePlayer] = field(default_factory=list)
    bound: list[str] = field(default_factory=list)
    force_idle_calls: int = 0

    async def join(self, guild_id: int, voice_channel_id: int) -> FakeConnection:
        if self.fail_join is not None:
            raise self.fail_join
        connection = FakeConnection(guild_id, voice_channel_id)
        self.connections.append(connection)
        return connection

    def create_player(self, connection: FakeConnection) -> FakePlayer:
        player = FakePlayer(connection)
        self.players.append(player)
        return player

    async def open_stream(self, source_url: str) -> FakeStream:
        if source_url in self.bad_urls:
            raise StreamError(source_url, "unplayable")
        return FakeStream(source_url)

    def bind(self, player: FakePlayer, stream: FakeStream) -> None:
        player.current = stream
        player.paused = False
        self.bound.append(stream.source_url)

    def force_idle(self, player: FakePlayer) -> None:
        self.force_idle_calls += 1
        if player.current is not None:
            self.fire_terminal(player)

    def pause(self, player: FakePlayer) -> None:
        player.paused = True

    def resume(self, player: FakePlayer) -> None:
        player.paused = False

    def on_status(self, player: FakePlayer, callback: TerminalCallback) -> None:
        player.callback = callback

    async def release(self, connection: FakeConnection) -> None:
        connection.released += 1

    def fire_terminal(
        self,
        player: FakePlayer,
        kind: TerminalKind = TerminalKind.IDLE,
        stream: Any = None,
    ) -> None:
        """Deliver a terminal event the way the audio thread would."""
        stream = stream if stream is not None else player.current
        player.current = None
        assert player.callback is not None
        player.callback(player, stream, kind)

    @property
    def total_releases(self) -> int:
        return sum(c.released for c in self.connections)


class FakeNotifier(ChannelNotifier):
    def __init__(self) -> None:
        self.sent: list[tuple[int, str]] = []

    async def send(self, channel_id: int, content: str) -> bool:
        self.sent.append((channel_id, content))
        return True

    @property
    def messages(self) -> list[str]:
        return [content for _, content in self.sent]


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def registry() -> InMemoryQueueSessionRegistry:
    return InMemoryQueueSessionRegistry()


@pytest.fixture
def resolver() -> FakeResolver:
    return FakeResolver()


@pytest.fixture
def transport() -> FakeVoiceTransport:
    return FakeVoiceTransport()


@pytest.fixture
def notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture
def queue_settings() -> QueueSettings:
    return QueueSettings(resolve_timeout_s=1.0, transport_timeout_s=1.0)


@pytest.fixture
def service(registry, resolver, transport, notifier, queue_settings) -> QueueApplicationService:
    return QueueApplicationService(
        registry=registry,
        song_resolver=resolver,
        voice_transport=transport,
        channel_notifier=notifier,
        settings=queue_settings,
    )
