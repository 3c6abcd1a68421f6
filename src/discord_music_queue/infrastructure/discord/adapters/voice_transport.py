"""Discord voice transport implementing VoiceTransport over discord.py voice clients."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

import discord

from discord_music_queue.application.interfaces.voice_transport import (
    TerminalCallback,
    VoiceTransport,
)
from discord_music_queue.config.settings import AudioSettings
from discord_music_queue.domain.music.value_objects import TerminalKind
from discord_music_queue.domain.shared.exceptions import ConnectionFailedError, StreamError
from discord_music_queue.domain.shared.messages import ErrorMessages, LogTemplates

logger = logging.getLogger(__name__)

StreamLocator = Callable[[str], Awaitable[str]]
"""Maps a song's page URL to a direct media URL FFmpeg can read."""


@dataclass(eq=False)
class DiscordPlayer:
    """Playback handle for one voice client; compared by identity."""

    voice_client: discord.VoiceClient
    callback: TerminalCallback | None = None


@dataclass(eq=False)
class DiscordStream:
    """An opened FFmpeg source for one song; compared by identity."""

    source_url: str
    audio: discord.PCMVolumeTransformer


class DiscordVoiceTransport(VoiceTransport):
    def __init__(
        self,
        bot: discord.Client,
        stream_locator: StreamLocator,
        settings: AudioSettings | None = None,
    ) -> None:
        self._bot = bot
        self._locate_stream = stream_locator
        self._settings = settings or AudioSettings()
        self._volume = self._settings.default_volume
        self._ffmpeg_options = self._settings.ffmpeg_options

    # TODO(integ): Test real voice connect with a test bot in a test guild.
    # Verify: successful connect, self-deaf, permission denied (Forbidden).
    async def join(self, guild_id: int, voice_channel_id: int) -> discord.VoiceClient:
        guild = self._bot.get_guild(guild_id)
        if guild is None:
            raise ConnectionFailedError(
                voice_channel_id, ErrorMessages.GUILD_NOT_FOUND.format(guild_id=guild_id)
            )

        channel = guild.get_channel(voice_channel_id)
        if not isinstance(channel, discord.VoiceChannel | discord.StageChannel):
            raise ConnectionFailedError(
                voice_channel_id,
                ErrorMessages.CHANNEL_NOT_VOICE.format(channel_id=voice_channel_id),
            )

        stale = guild.voice_client
        if stale is not None:
            logger.warning(LogTemplates.VOICE_STALE_CLEANUP, guild_id)
            await self.release(stale)

        try:
            voice_client = await channel.connect(self_deaf=True)
        except TimeoutError as e:
            raise ConnectionFailedError(voice_channel_id, "voice handshake timed out") from e
        except discord.Forbidden as e:
            raise ConnectionFailedError(voice_channel_id, "missing permission to connect") from e
        except discord.ClientException as e:
            raise ConnectionFailedError(voice_channel_id, str(e)) from e

        await self._ensure_self_deaf(guild, channel)
        logger.info(LogTemplates.VOICE_CONNECTED, channel.name, guild.name)
        return voice_client

    async def _ensure_self_deaf(
        self,
        guild: discord.Guild,
        channel: discord.VoiceChannel | discord.StageChannel,
    ) -> None:
        """Ensure the bot is self-deafened in the guild's current voice connection."""
        try:
            await guild.change_voice_state(channel=channel, self_deaf=True)
        except Exception as exc:
            logger.debug(LogTemplates.VOICE_SELF_DEAFEN_FAILED, guild.id, exc)

    def create_player(self, connection: discord.VoiceClient) -> DiscordPlayer:
        return DiscordPlayer(voice_client=connection)

    async def open_stream(self, source_url: str) -> DiscordStream:
        media_url = await self._locate_stream(source_url)

        try:
            source = discord.FFmpegPCMAudio(
                media_url,
                before_options=self._ffmpeg_options.get("before_options"),
                options=self._ffmpeg_options.get("options"),
            )
        except discord.ClientException as e:
            raise StreamError(source_url, str(e)) from e

        logger.debug(LogTemplates.FFMPEG_STREAM_OPENED, source_url)
        return DiscordStream(
            source_url=source_url,
            audio=discord.PCMVolumeTransformer(source, volume=self._volume),
        )

    # TODO(integ): Test that the after callback fires from the audio thread when a
    # short clip finishes and after vc.stop(), each exactly once.
    def bind(self, player: DiscordPlayer, stream: DiscordStream) -> None:
        def after_callback(error: Exception | None = None) -> None:
            kind = TerminalKind.IDLE
            if error is not None:
                logger.warning(
                    LogTemplates.PLAYBACK_ENDED_WITH_ERROR, player.voice_client.guild.id, error
                )
                kind = TerminalKind.ERROR

            if player.callback is not None:
                player.callback(player, stream, kind)

        try:
            player.voice_client.play(stream.audio, after=after_callback)
        except discord.ClientException as e:
            self._cleanup_source(stream)
            raise StreamError(
                stream.source_url, ErrorMessages.PLAYER_REJECTED_STREAM.format(error=e)
            ) from e

    def force_idle(self, player: DiscordPlayer) -> None:
        vc = player.voice_client
        if vc.is_playing() or vc.is_paused():
            vc.stop()

    def pause(self, player: DiscordPlayer) -> None:
        vc = player.voice_client
        if vc.is_playing():
            vc.pause()

    def resume(self, player: DiscordPlayer) -> None:
        vc = player.voice_client
        if vc.is_paused():
            vc.resume()

    def on_status(self, player: DiscordPlayer, callback: TerminalCallback) -> None:
        player.callback = callback

    # TODO(integ): Test real disconnect after a live connect. Verify voice_client is cleaned up.
    async def release(self, connection: discord.VoiceClient) -> None:
        try:
            await connection.disconnect(force=True)
        except Exception as e:
            logger.warning(LogTemplates.VOICE_RELEASE_FAILED, connection.guild.id, e)

    @staticmethod
    def _cleanup_source(stream: DiscordStream) -> None:
        try:
            stream.audio.cleanup()
        except Exception as e:
            logger.debug(LogTemplates.FFMPEG_SOURCE_CLEANUP_ERROR, e)
