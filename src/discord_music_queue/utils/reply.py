"""Utility functions for formatting Discord messages."""

from __future__ import annotations

import re
from functools import cache
from typing import TYPE_CHECKING, Final

from discord_music_queue.domain.shared.messages import DiscordUIMessages

if TYPE_CHECKING:
    from discord_music_queue.application.services.queue_models import QueueListing

SPOTIFY_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"(?:https?://)?(?:open\.)?spotify\.com/|spotify:", re.IGNORECASE
)

# Discord rejects messages longer than 2000 characters.
MESSAGE_LIMIT: Final[int] = 2000


def is_spotify_link(query: str) -> bool:
    return SPOTIFY_PATTERN.search(query) is not None


@cache
def truncate(text: str, max_length: int = 90) -> str:
    if len(text) <= max_length:
        return text
    return text[: max_length - 1] + "…"


def render_queue_listing(listing: QueueListing) -> str:
    """Render a queue listing as a numbered list with the playing song first."""
    if listing.is_empty:
        return DiscordUIMessages.STATE_QUEUE_EMPTY

    header = DiscordUIMessages.QUEUE_HEADER
    if listing.paused:
        header += DiscordUIMessages.QUEUE_PAUSED_SUFFIX

    lines = [header]
    for entry in listing.entries:
        title = truncate(entry.title)
        if entry.is_now_playing:
            lines.append(
                DiscordUIMessages.QUEUE_NOW_PLAYING_LINE.format(title=title, duration=entry.duration)
            )
        else:
            lines.append(
                DiscordUIMessages.QUEUE_LINE.format(
                    position=entry.position, title=title, duration=entry.duration
                )
            )

    if listing.remaining > 0:
        lines.append(DiscordUIMessages.QUEUE_MORE.format(count=listing.remaining))

    text = "\n".join(lines)
    if len(text) > MESSAGE_LIMIT:
        text = text[: MESSAGE_LIMIT - 1] + "…"
    return text
