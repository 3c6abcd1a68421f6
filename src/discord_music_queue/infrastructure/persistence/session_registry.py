"""In-memory QueueSessionRegistry scoped to the process lifetime."""

from __future__ import annotations

import asyncio
import logging

from discord_music_queue.domain.music.entities import QueueSession
from discord_music_queue.domain.music.repository import QueueSessionRegistry
from discord_music_queue.domain.shared.exceptions import SessionAlreadyExistsError
from discord_music_queue.domain.shared.messages import LogTemplates

logger = logging.getLogger(__name__)


def _is_idle(guild_lock: asyncio.Lock) -> bool:
    # asyncio.Lock has no public waiter count.
    return not guild_lock.locked() and not guild_lock._waiters


class InMemoryQueueSessionRegistry(QueueSessionRegistry):
    """Dict-backed registry with one FIFO ``asyncio.Lock`` per guild.

    A guild's lock is kept while the guild has a session, or while anyone
    holds or waits on it. Idle locks of session-less guilds are pruned when a
    lock is first handed out for another guild.

    Stop generations are never pruned: an enqueue compares the generation it
    read before resolving against the current one, without holding the lock.
    """

    def __init__(self) -> None:
        self._sessions: dict[int, QueueSession] = {}
        self._locks: dict[int, asyncio.Lock] = {}
        self._stops: dict[int, int] = {}

    def lock(self, guild_id: int) -> asyncio.Lock:
        # No await between lookup and insert, so this is atomic on the loop.
        guild_lock = self._locks.get(guild_id)
        if guild_lock is None:
            self._prune_locks()
            guild_lock = asyncio.Lock()
            self._locks[guild_id] = guild_lock
        return guild_lock

    def get(self, guild_id: int) -> QueueSession | None:
        return self._sessions.get(guild_id)

    def create(
        self, guild_id: int, voice_channel_id: int, text_channel_id: int
    ) -> QueueSession:
        if guild_id in self._sessions:
            raise SessionAlreadyExistsError(guild_id)

        session = QueueSession(
            guild_id=guild_id,
            voice_channel_id=voice_channel_id,
            text_channel_id=text_channel_id,
        )
        self._sessions[guild_id] = session
        logger.debug(LogTemplates.SESSION_CREATED, guild_id)
        return session

    def remove(self, guild_id: int) -> QueueSession | None:
        session = self._sessions.pop(guild_id, None)
        if session is not None:
            logger.debug(LogTemplates.SESSION_REMOVED, guild_id)
        return session

    def stop_generation(self, guild_id: int) -> int:
        return self._stops.get(guild_id, 0)

    def record_stop(self, guild_id: int) -> int:
        generation = self._stops.get(guild_id, 0) + 1
        self._stops[guild_id] = generation
        return generation

    def active_guild_ids(self) -> list[int]:
        return list(self._sessions)

    def __len__(self) -> int:
        return len(self._sessions)

    def _prune_locks(self) -> None:
        stale = [
            guild_id
            for guild_id, guild_lock in self._locks.items()
            if guild_id not in self._sessions and _is_idle(guild_lock)
        ]
        for guild_id in stale:
            del self._locks[guild_id]
        if stale:
            logger.debug(LogTemplates.LOCKS_PRUNED, len(stale))
