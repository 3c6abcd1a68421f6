"""Dependency Injection Container

Manages the application's dependency graph, providing lazy initialization
and lifecycle management for the registry, adapters, and the queue service.
Components are created on-demand and cached for reuse throughout the application.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..domain.shared.messages import LogTemplates

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from discord.ext.commands import Bot

    from ..application.interfaces.channel_notifier import ChannelNotifier
    from ..application.interfaces.voice_transport import VoiceTransport
    from ..application.services.queue_service import QueueApplicationService
    from ..domain.music.repository import QueueSessionRegistry
    from ..infrastructure.audio.ytdlp_resolver import YtDlpSongResolver
    from ..infrastructure.health.server import HealthServer
    from .settings import Settings


@dataclass
class Container:
    """Dependency injection container.

    This container manages all application dependencies and their lifecycle.
    Components are lazily initialized when first accessed.
    """

    settings: Settings
    _bot: Bot | None = None

    # Session state
    _registry: QueueSessionRegistry | None = None

    # Infrastructure adapters
    _song_resolver: YtDlpSongResolver | None = None
    _voice_transport: VoiceTransport | None = None
    _channel_notifier: ChannelNotifier | None = None
    _health_server: HealthServer | None = None

    # Application services
    _queue_service: QueueApplicationService | None = None

    def set_bot(self, bot: Bot) -> None:
        """Set the Discord bot instance."""
        self._bot = bot

    @property
    def bot(self) -> Bot:
        """Get the Discord bot instance."""
        if self._bot is None:
            raise RuntimeError("Bot not initialized. Call set_bot() first.")
        return self._bot

    # === Session State ===

    @property
    def registry(self) -> QueueSessionRegistry:
        """Get the guild queue registry."""
        if self._registry is None:
            from ..infrastructure.persistence.session_registry import (
                InMemoryQueueSessionRegistry,
            )

            self._registry = InMemoryQueueSessionRegistry()
        return self._registry

    # === Infrastructure Adapters ===

    @property
    def song_resolver(self) -> YtDlpSongResolver:
        """Get the song resolver."""
        if self._song_resolver is None:
            from ..infrastructure.audio.ytdlp_resolver import YtDlpSongResolver

            self._song_resolver = YtDlpSongResolver(self.settings.audio)
        return self._song_resolver

    @property
    def voice_transport(self) -> VoiceTransport:
        """Get the voice transport."""
        if self._voice_transport is None:
            from ..infrastructure.discord.adapters.voice_transport import (
                DiscordVoiceTransport,
            )

            self._voice_transport = DiscordVoiceTransport(
                self.bot,
                stream_locator=self.song_resolver.stream_url_for,
                settings=self.settings.audio,
            )
        return self._voice_transport

    @property
    def channel_notifier(self) -> ChannelNotifier:
        """Get the text channel notifier."""
        if self._channel_notifier is None:
            from ..infrastructure.discord.adapters.channel_notifier import (
                DiscordChannelNotifier,
            )

            self._channel_notifier = DiscordChannelNotifier(self.bot)
        return self._channel_notifier

    @property
    def health_server(self) -> HealthServer:
        """Get the HTTP liveness listener."""
        if self._health_server is None:
            from ..infrastructure.health.server import HealthServer

            self._health_server = HealthServer(
                self.settings.health,
                session_count=lambda: len(self.registry),
            )
        return self._health_server

    # === Application Services ===

    @property
    def queue_service(self) -> QueueApplicationService:
        """Get the queue application service."""
        if self._queue_service is None:
            from ..application.services.queue_service import QueueApplicationService

            self._queue_service = QueueApplicationService(
                registry=self.registry,
                song_resolver=self.song_resolver,
                voice_transport=self.voice_transport,
                channel_notifier=self.channel_notifier,
                settings=self.settings.queue,
            )
        return self._queue_service

    # === Lifecycle ===

    async def initialize(self) -> None:
        """Initialize all async resources."""
        if not self.settings.health.enabled:
            return

        try:
            await self.health_server.start()
        except OSError as exc:
            logger.warning(
                LogTemplates.HEALTH_SERVER_START_FAILED,
                self.settings.health.host,
                self.settings.health.port,
                exc,
            )

    async def shutdown(self) -> None:
        """Shutdown and cleanup all resources."""
        if self._queue_service is not None:
            await self._queue_service.shutdown()

        if self._health_server is not None:
            await self._health_server.stop()


def create_container(settings: Settings) -> Container:
    """Create a new dependency injection container."""
    return Container(settings)
