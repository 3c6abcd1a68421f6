"""DTOs for the queue application service."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel

from ...domain.music.entities import Song
from ...domain.shared.exceptions import DomainError
from ...domain.shared.types import NonNegativeInt, QueuePositionInt


class CommandStatus(Enum):
    """Outcome codes for queue commands."""

    NOW_PLAYING = "now_playing"
    QUEUED = "queued"
    SKIPPED = "skipped"
    STOPPED = "stopped"
    PAUSED = "paused"
    RESUMED = "resumed"
    CANCELLED = "cancelled"
    NO_ACTIVE_SESSION = "no_active_session"
    ALREADY_EXISTS = "already_exists"
    CONNECTION_FAILED = "connection_failed"
    RESOLUTION_TIMEOUT = "resolution_timeout"
    RESOLUTION_NOT_FOUND = "resolution_not_found"
    RESOLUTION_ERROR = "resolution_error"
    STREAM_ERROR = "stream_error"
    TRANSPORT_TIMEOUT = "transport_timeout"
    QUEUE_FULL = "queue_full"
    ERROR = "error"

    @classmethod
    def from_error(cls, error: DomainError) -> CommandStatus:
        """Map a domain error code onto a status, falling back to ERROR."""
        try:
            return cls(error.code.lower())
        except ValueError:
            return cls.ERROR


_SUCCESS_STATUSES = frozenset(
    {
        CommandStatus.NOW_PLAYING,
        CommandStatus.QUEUED,
        CommandStatus.SKIPPED,
        CommandStatus.STOPPED,
        CommandStatus.PAUSED,
        CommandStatus.RESUMED,
    }
)


class CommandResult(BaseModel):
    """User-facing outcome of a command routed into the queue service."""

    status: CommandStatus
    message: str
    song: Song | None = None
    position: QueuePositionInt | None = None
    # True when the outcome was already posted to the text channel.
    announced: bool = False

    @property
    def is_success(self) -> bool:
        return self.status in _SUCCESS_STATUSES

    @classmethod
    def failure(cls, status: CommandStatus, message: str) -> CommandResult:
        return cls(status=status, message=message)

    @classmethod
    def from_error(cls, error: DomainError, message: str) -> CommandResult:
        return cls(status=CommandStatus.from_error(error), message=message)


class SongSummary(BaseModel):
    """One line of a queue listing."""

    position: QueuePositionInt
    title: str
    duration: str
    is_now_playing: bool = False


class QueueListing(BaseModel):
    """A capped view of a guild's queue."""

    entries: list[SongSummary]
    remaining: NonNegativeInt = 0
    total: NonNegativeInt = 0
    paused: bool = False

    @property
    def is_empty(self) -> bool:
        return self.total == 0

    @classmethod
    def empty(cls) -> QueueListing:
        return cls(entries=[])
