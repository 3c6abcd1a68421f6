"""Tests for the dependency injection container."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from discord_music_queue.application.services.queue_service import QueueApplicationService
from discord_music_queue.config.container import Container, create_container
from discord_music_queue.config.settings import HealthSettings, Settings
from discord_music_queue.infrastructure.audio.ytdlp_resolver import YtDlpSongResolver
from discord_music_queue.infrastructure.discord.adapters.channel_notifier import (
    DiscordChannelNotifier,
)
from discord_music_queue.infrastructure.discord.adapters.voice_transport import (
    DiscordVoiceTransport,
)
from discord_music_queue.infrastructure.persistence.session_registry import (
    InMemoryQueueSessionRegistry,
)


@pytest.fixture
def settings():
    return Settings(health=HealthSettings(enabled=False))


@pytest.fixture
def container(settings):
    container = create_container(settings)
    container.set_bot(MagicMock())
    return container


class TestContainer:
    def test_bot_required(self, settings):
        with pytest.raises(RuntimeError, match="Bot not initialized"):
            Container(settings).bot

    def test_components_are_lazy_singletons(self, container):
        assert isinstance(container.registry, InMemoryQueueSessionRegistry)
        assert container.registry is container.registry
        assert isinstance(container.song_resolver, YtDlpSongResolver)
        assert isinstance(container.voice_transport, DiscordVoiceTransport)
        assert isinstance(container.channel_notifier, DiscordChannelNotifier)
        assert isinstance(container.queue_service, QueueApplicationService)
        assert container.queue_service is container.queue_service

    def test_health_server_counts_sessions(self, container):
        container.registry.create(1, 2, 3)

        assert container.health_server._session_count() == 1

    async def test_initialize_skips_disabled_health(self, container):
        await container.initialize()

        assert container._health_server is None

    async def test_initialize_starts_health_server(self):
        container = create_container(Settings())
        server = MagicMock()
        server.start = AsyncMock()
        container._health_server = server

        await container.initialize()

        server.start.assert_awaited_once()

    async def test_initialize_tolerates_port_in_use(self):
        container = create_container(Settings())
        server = MagicMock()
        server.start = AsyncMock(side_effect=OSError("address in use"))
        container._health_server = server

        await container.initialize()

    async def test_shutdown_stops_sessions_and_server(self, container):
        service = MagicMock()
        service.shutdown = AsyncMock()
        server = MagicMock()
        server.stop = AsyncMock()
        container._queue_service = service
        container._health_server = server

        await container.shutdown()

        service.shutdown.assert_awaited_once()
        server.stop.assert_awaited_once()

