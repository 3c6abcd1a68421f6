"""
Shared Domain Kernel

Contains types and exceptions shared across all bounded contexts.
"""

from discord_music_queue.domain.shared.exceptions import (
    ConnectionFailedError,
    DomainError,
    InvalidOperationError,
    NoActiveSessionError,
    ResolutionError,
    ResolutionNotFoundError,
    ResolutionTimeoutError,
    SessionAlreadyExistsError,
    StreamError,
    TransportTimeoutError,
)

__all__ = [
    "DomainError",
    "InvalidOperationError",
    "NoActiveSessionError",
    "SessionAlreadyExistsError",
    "ConnectionFailedError",
    "ResolutionError",
    "ResolutionNotFoundError",
    "ResolutionTimeoutError",
    "StreamError",
    "TransportTimeoutError",
]
