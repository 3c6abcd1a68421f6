# ruff: noqa: N999
"""
Domain Layer

Contains pure queue logic organized by bounded contexts:
- shared/: Cross-cutting types, messages and exceptions
- music/: Song, queue session and session registry contracts
"""

from discord_music_queue.domain.shared.exceptions import DomainError
from discord_music_queue.domain.shared.types import ChannelIdField, GuildIdField

__all__ = [
    "GuildIdField",
    "ChannelIdField",
    "DomainError",
]
