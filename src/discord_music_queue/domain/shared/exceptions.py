"""Base exception classes for domain-level errors."""

from __future__ import annotations


class DomainError(Exception):
    """Base exception for all domain-level errors."""

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__


class InvalidOperationError(DomainError):
    """Raised when an operation is invalid in the current state."""

    def __init__(self, operation: str, current_state: str, message: str | None = None) -> None:
        msg = message or f"Cannot perform '{operation}' in state '{current_state}'"
        super().__init__(msg, code="INVALID_OPERATION")
        self.operation = operation
        self.current_state = current_state


class NoActiveSessionError(DomainError):
    """Raised when a guild has no live queue session."""

    def __init__(self, guild_id: int, message: str | None = None) -> None:
        super().__init__(message or f"No active session for guild {guild_id}", code="NO_ACTIVE_SESSION")
        self.guild_id = guild_id


class SessionAlreadyExistsError(DomainError):
    """Raised when creating a session for a guild that already has one."""

    def __init__(self, guild_id: int) -> None:
        super().__init__(f"A session already exists for guild {guild_id}", code="ALREADY_EXISTS")
        self.guild_id = guild_id


class ConnectionFailedError(DomainError):
    """Raised when the voice transport cannot join a channel."""

    def __init__(self, channel_id: int, reason: str | None = None) -> None:
        msg = f"Could not connect to voice channel {channel_id}"
        if reason:
            msg = f"{msg}: {reason}"
        super().__init__(msg, code="CONNECTION_FAILED")
        self.channel_id = channel_id
        self.reason = reason


class ResolutionError(DomainError):
    """Raised when a query could not be resolved to a song."""

    def __init__(self, query: str, message: str | None = None, code: str = "RESOLUTION_ERROR") -> None:
        super().__init__(message or f"Failed to resolve '{query}'", code=code)
        self.query = query


class ResolutionNotFoundError(ResolutionError):
    """Raised when a search or URL yields no playable result."""

    def __init__(self, query: str) -> None:
        super().__init__(query, f"No results found for '{query}'", code="RESOLUTION_NOT_FOUND")


class ResolutionTimeoutError(ResolutionError):
    """Raised when resolution exceeds its time limit."""

    def __init__(self, query: str, timeout: float) -> None:
        super().__init__(
            query,
            f"Resolving '{query}' timed out after {timeout:g}s",
            code="RESOLUTION_TIMEOUT",
        )
        self.timeout = timeout


class StreamError(DomainError):
    """Raised when a playable stream cannot be opened for a source URL."""

    def __init__(self, source_url: str, reason: str | None = None) -> None:
        msg = f"Could not open stream for {source_url}"
        if reason:
            msg = f"{msg}: {reason}"
        super().__init__(msg, code="STREAM_ERROR")
        self.source_url = source_url
        self.reason = reason


class TransportTimeoutError(DomainError):
    """Raised when a transport call exceeds its time limit."""

    def __init__(self, operation: str, timeout: float | None = None) -> None:
        msg = f"Transport operation '{operation}' timed out"
        if timeout is not None:
            msg = f"{msg} after {timeout:g}s"
        super().__init__(msg, code="TRANSPORT_TIMEOUT")
        self.operation = operation
        self.timeout = timeout
