"""Queue Application Service - the per-guild playback sequencing state machine."""

from __future__ import annotations

import asyncio
import concurrent.futures
import logging
from collections.abc import Awaitable
from typing import TYPE_CHECKING, Any, TypeVar

from ...config.settings import QueueSettings
from ...domain.music.entities import QueueSession, Song
from ...domain.music.value_objects import SessionState, TerminalKind
from ...domain.shared.exceptions import (
    DomainError,
    NoActiveSessionError,
    ResolutionNotFoundError,
    ResolutionTimeoutError,
    TransportTimeoutError,
)
from ...domain.shared.messages import DiscordUIMessages, LogTemplates
from ...domain.shared.types import ChannelIdField, DiscordSnowflake
from .queue_models import CommandResult, CommandStatus, QueueListing, SongSummary

if TYPE_CHECKING:
    from ...domain.music.repository import QueueSessionRegistry
    from ..interfaces.channel_notifier import ChannelNotifier
    from ..interfaces.song_resolver import SongResolver
    from ..interfaces.voice_transport import (
        AudioPlayer,
        StreamHandle,
        TerminalCallback,
        VoiceTransport,
    )

logger = logging.getLogger(__name__)

T = TypeVar("T")


class QueueApplicationService:
    """Owns every guild's queue session and drives it through its states.

    Every operation for a guild runs while holding that guild's registry lock,
    so commands and transport callbacks for the same guild are applied one at
    a time in arrival order. Song resolution happens before the lock is taken;
    an explicit stop during resolution is detected once the lock is held.
    """

    def __init__(
        self,
        *,
        registry: QueueSessionRegistry,
        song_resolver: SongResolver,
        voice_transport: VoiceTransport,
        channel_notifier: ChannelNotifier,
        settings: QueueSettings | None = None,
    ) -> None:
        self._registry = registry
        self._resolver = song_resolver
        self._transport = voice_transport
        self._notifier = channel_notifier
        self._settings = settings or QueueSettings()

        # Terminal handlers scheduled from transport threads, awaited by drain().
        self._pending: set[concurrent.futures.Future[None]] = set()

    # ── Inbound operations ──────────────────────────────────────────────

    async def enqueue(
        self,
        guild_id: DiscordSnowflake,
        voice_channel_id: ChannelIdField,
        text_channel_id: ChannelIdField,
        query: str,
    ) -> CommandResult:
        """Resolve ``query`` and append it, starting a session if none exists."""
        stops_seen = self._registry.stop_generation(guild_id)

        try:
            song = await self._resolve(query)
        except DomainError as e:
            logger.warning(LogTemplates.RESOLUTION_FAILED, query, guild_id, e.message)
            return CommandResult.from_error(e, self._resolution_failure_message(e, query))
        except Exception:
            logger.exception(LogTemplates.RESOLUTION_UNEXPECTED, query)
            return CommandResult.failure(
                CommandStatus.RESOLUTION_ERROR, DiscordUIMessages.ERROR_RESOLUTION_FAILED
            )

        async with self._registry.lock(guild_id):
            if self._registry.stop_generation(guild_id) != stops_seen:
                logger.info(LogTemplates.ENQUEUE_CANCELLED, song.title, guild_id)
                return CommandResult(
                    status=CommandStatus.CANCELLED,
                    message=DiscordUIMessages.ENQUEUE_CANCELLED.format(title=song.title),
                    song=song,
                )

            session = self._registry.get(guild_id)
            if session is not None:
                return self._append(session, song)

            return await self._start_session(guild_id, voice_channel_id, text_channel_id, song)

    async def skip(self, guild_id: DiscordSnowflake) -> CommandResult:
        """Force the active song idle; advancement follows from its terminal event."""
        async with self._registry.lock(guild_id):
            try:
                session = self._live_session(guild_id)
            except NoActiveSessionError as e:
                return self._no_session(e)

            skipped = session.now_playing
            self._transport.force_idle(session.player)
            logger.info(LogTemplates.SKIP_REQUESTED, skipped.title if skipped else None, guild_id)
            return CommandResult(
                status=CommandStatus.SKIPPED,
                message=DiscordUIMessages.ACTION_SKIPPED,
                song=skipped,
            )

    async def stop(self, guild_id: DiscordSnowflake) -> CommandResult:
        """Clear the queue, silence the player and release the connection."""
        async with self._registry.lock(guild_id):
            try:
                session = self._live_session(guild_id, require_active=False)
            except NoActiveSessionError as e:
                return self._no_session(e)

            cleared = session.clear()
            # Unset first so the terminal event from force_idle is rejected.
            session.active_stream = None
            if session.player is not None:
                self._transport.force_idle(session.player)
            await self._teardown(session)
            self._registry.record_stop(guild_id)

        logger.info(LogTemplates.SESSION_STOPPED, guild_id, cleared)
        return CommandResult(status=CommandStatus.STOPPED, message=DiscordUIMessages.ACTION_STOPPED)

    async def toggle_pause(self, guild_id: DiscordSnowflake) -> CommandResult:
        async with self._registry.lock(guild_id):
            try:
                session = self._live_session(guild_id)
            except NoActiveSessionError as e:
                return self._no_session(e)

            if session.is_paused:
                self._transport.resume(session.player)
                session.transition_to(SessionState.PLAYING)
                logger.info(LogTemplates.PLAYBACK_RESUMED, guild_id)
                return CommandResult(
                    status=CommandStatus.RESUMED,
                    message=DiscordUIMessages.ACTION_RESUMED,
                    song=session.now_playing,
                )

            self._transport.pause(session.player)
            session.transition_to(SessionState.PAUSED)
            logger.info(LogTemplates.PLAYBACK_PAUSED, guild_id)
            return CommandResult(
                status=CommandStatus.PAUSED,
                message=DiscordUIMessages.ACTION_PAUSED,
                song=session.now_playing,
            )

    async def list_queue(self, guild_id: DiscordSnowflake) -> QueueListing:
        async with self._registry.lock(guild_id):
            session = self._registry.get(guild_id)
            if session is None or not session.has_songs:
                return QueueListing.empty()

            shown = session.songs[: self._settings.list_limit]
            entries = [
                SongSummary(
                    position=index,
                    title=song.title,
                    duration=song.duration_formatted,
                    is_now_playing=index == 0,
                )
                for index, song in enumerate(shown)
            ]
            return QueueListing(
                entries=entries,
                remaining=len(session.songs) - len(shown),
                total=len(session.songs),
                paused=session.is_paused,
            )

    # ── Transport-driven transition ─────────────────────────────────────

    async def on_track_terminal(
        self,
        guild_id: DiscordSnowflake,
        player: AudioPlayer,
        stream: StreamHandle,
        kind: TerminalKind,
    ) -> None:
        """Drop the finished head and start the next song, or tear down."""
        async with self._registry.lock(guild_id):
            session = self._registry.get(guild_id)
            if session is None or not session.owns(player, stream):
                logger.debug(LogTemplates.TERMINAL_IGNORED, kind.value, guild_id)
                return

            try:
                finished = session.drop_head()
                session.active_stream = None
                session.transition_to(SessionState.ADVANCING)
                logger.info(
                    LogTemplates.TRACK_TERMINAL,
                    finished.title if finished else None,
                    kind.value,
                    guild_id,
                )

                if kind is TerminalKind.ERROR and finished is not None:
                    await self._notify(
                        session, DiscordUIMessages.NOTICE_PLAYBACK_ERROR.format(title=finished.title)
                    )

                await self._play_head(session)
            except Exception:
                logger.exception(LogTemplates.ADVANCE_FAILED, guild_id)
                if self._registry.get(guild_id) is session:
                    await self._teardown(session)

    async def drain(self) -> None:
        """Wait until every scheduled terminal handler has run."""
        while self._pending:
            await asyncio.gather(
                *(asyncio.wrap_future(f) for f in list(self._pending)),
                return_exceptions=True,
            )

    async def shutdown(self) -> None:
        """Stop every live session, releasing all voice connections."""
        for guild_id in self._registry.active_guild_ids():
            await self.stop(guild_id)
        await self.drain()

    # ── State machine internals ─────────────────────────────────────────

    def _append(self, session: QueueSession, song: Song) -> CommandResult:
        if len(session.songs) >= self._settings.max_queue_size:
            return CommandResult.failure(
                CommandStatus.QUEUE_FULL,
                DiscordUIMessages.ERROR_QUEUE_FULL.format(max_size=self._settings.max_queue_size),
            )

        position = session.append(song)
        logger.info(LogTemplates.QUEUE_ENQUEUED, song.title, position, session.guild_id)
        return CommandResult(
            status=CommandStatus.QUEUED,
            message=DiscordUIMessages.ACTION_QUEUED.format(
                title=song.title, duration=song.duration_formatted, position=position
            ),
            song=song,
            position=position,
        )

    async def _start_session(
        self,
        guild_id: int,
        voice_channel_id: int,
        text_channel_id: int,
        song: Song,
    ) -> CommandResult:
        session = self._registry.create(guild_id, voice_channel_id, text_channel_id)
        session.transition_to(SessionState.CONNECTING)
        session.append(song)

        try:
            connection = await self._bounded(
                self._transport.join(guild_id, voice_channel_id),
                "join",
            )
        except DomainError as e:
            logger.warning(LogTemplates.VOICE_JOIN_FAILED, voice_channel_id, guild_id, e.message)
            await self._teardown(session)
            message = (
                DiscordUIMessages.ERROR_JOIN_TIMEOUT
                if isinstance(e, TransportTimeoutError)
                else DiscordUIMessages.ERROR_COULD_NOT_JOIN_VOICE
            )
            return CommandResult.from_error(e, message)
        except Exception:
            logger.exception(LogTemplates.VOICE_JOIN_UNEXPECTED, guild_id)
            await self._teardown(session)
            return CommandResult.failure(
                CommandStatus.CONNECTION_FAILED, DiscordUIMessages.ERROR_COULD_NOT_JOIN_VOICE
            )

        try:
            player = self._transport.create_player(connection)
            session.attach_transport(connection, player)
            self._transport.on_status(player, self._terminal_callback(guild_id))
            await self._play_head(session)
        except Exception:
            logger.exception(LogTemplates.SESSION_START_FAILED, guild_id)
            if session.connection is None:
                await self._release(connection, guild_id)
            await self._teardown(session)
            return CommandResult.failure(CommandStatus.ERROR, DiscordUIMessages.ERROR_GENERIC)

        if session.state == SessionState.PLAYING:
            return CommandResult(
                status=CommandStatus.NOW_PLAYING,
                message=DiscordUIMessages.NOTICE_NOW_PLAYING.format(
                    title=song.title, duration=song.duration_formatted
                ),
                song=song,
                position=0,
                announced=True,
            )

        return CommandResult(
            status=CommandStatus.STREAM_ERROR,
            message=DiscordUIMessages.NOTICE_STREAM_FAILED.format(title=song.title),
            song=song,
            announced=True,
        )

    async def _play_head(self, session: QueueSession) -> None:
        """Bind the head of the queue, dropping songs whose stream will not open.

        Runs as a loop rather than recursing, so a long run of dead URLs cannot
        grow the stack. Tears the session down when the queue runs out.
        """
        finished_naturally = session.state == SessionState.ADVANCING

        while session.songs:
            song = session.songs[0]
            try:
                stream = await self._bounded(
                    self._transport.open_stream(song.source_url),
                    "open_stream",
                )
                self._transport.bind(session.player, stream)
            except DomainError as e:
                logger.warning(LogTemplates.STREAM_FAILED, song.title, session.guild_id, e.message)
                session.drop_head()
                await self._notify(
                    session, DiscordUIMessages.NOTICE_STREAM_FAILED.format(title=song.title)
                )
                continue

            session.active_stream = stream
            session.transition_to(SessionState.PLAYING)
            logger.info(LogTemplates.TRACK_STARTED, song.title, session.guild_id)
            await self._notify(
                session,
                DiscordUIMessages.NOTICE_NOW_PLAYING.format(
                    title=song.title, duration=song.duration_formatted
                ),
            )
            return

        await self._teardown(session)
        if finished_naturally:
            logger.info(LogTemplates.QUEUE_EXHAUSTED, session.guild_id)
            await self._notify(session, DiscordUIMessages.NOTICE_QUEUE_FINISHED)

    async def _teardown(self, session: QueueSession) -> None:
        """Unregister the session and release its connection exactly once."""
        if self._registry.get(session.guild_id) is session:
            self._registry.remove(session.guild_id)

        connection = session.detach_transport()
        if not session.state.is_terminal:
            session.transition_to(SessionState.STOPPED)

        if connection is not None:
            await self._release(connection, session.guild_id)

    async def _release(self, connection: Any, guild_id: int) -> None:
        try:
            await self._bounded(self._transport.release(connection), "release")
            logger.info(LogTemplates.VOICE_RELEASED, guild_id)
        except Exception as e:
            logger.warning(LogTemplates.VOICE_RELEASE_FAILED, guild_id, e)

    def _terminal_callback(self, guild_id: int) -> TerminalCallback:
        loop = asyncio.get_running_loop()

        def callback(player: AudioPlayer, stream: StreamHandle, kind: TerminalKind) -> None:
            coro = self.on_track_terminal(guild_id, player, stream, kind)
            try:
                future = asyncio.run_coroutine_threadsafe(coro, loop)
            except RuntimeError:
                coro.close()
                logger.debug(LogTemplates.TERMINAL_LOOP_CLOSED, guild_id)
                return
            self._pending.add(future)
            future.add_done_callback(self._pending.discard)

        return callback

    # ── Helpers ─────────────────────────────────────────────────────────

    async def _resolve(self, query: str) -> Song:
        timeout = self._settings.resolve_timeout_s
        try:
            async with asyncio.timeout(timeout):
                return await self._resolver.resolve(query)
        except TimeoutError as e:
            raise ResolutionTimeoutError(query, timeout) from e

    async def _bounded(self, awaitable: Awaitable[T], operation: str) -> T:
        timeout = self._settings.transport_timeout_s
        try:
            async with asyncio.timeout(timeout):
                return await awaitable
        except TimeoutError as e:
            raise TransportTimeoutError(operation, timeout) from e

    async def _notify(self, session: QueueSession, content: str) -> None:
        try:
            async with asyncio.timeout(self._settings.transport_timeout_s):
                await self._notifier.send(session.text_channel_id, content)
        except TimeoutError:
            logger.warning(LogTemplates.NOTIFY_TIMEOUT, session.text_channel_id)

    def _live_session(self, guild_id: int, *, require_active: bool = True) -> QueueSession:
        session = self._registry.get(guild_id)
        if session is None or (require_active and not session.state.is_active):
            raise NoActiveSessionError(guild_id)
        return session

    @staticmethod
    def _no_session(error: NoActiveSessionError) -> CommandResult:
        logger.debug(LogTemplates.NO_ACTIVE_SESSION, error.message)
        return CommandResult.from_error(error, DiscordUIMessages.STATE_NOTHING_PLAYING)

    @staticmethod
    def _resolution_failure_message(error: DomainError, query: str) -> str:
        match error:
            case ResolutionNotFoundError():
                return DiscordUIMessages.ERROR_NO_RESULTS.format(query=query)
            case ResolutionTimeoutError() | TransportTimeoutError():
                return DiscordUIMessages.ERROR_RESOLUTION_TIMEOUT.format(query=query)
            case _:
                return DiscordUIMessages.ERROR_RESOLUTION_FAILED
