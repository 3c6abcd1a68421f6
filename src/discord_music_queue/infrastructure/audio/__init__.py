"""Audio infrastructure - yt-dlp song resolution."""

from discord_music_queue.infrastructure.audio.models import (
    AudioFormatInfo,
    CacheEntry,
    YtDlpOpts,
    YtDlpSongInfo,
)
from discord_music_queue.infrastructure.audio.ytdlp_resolver import YtDlpSongResolver

__all__ = [
    "AudioFormatInfo",
    "CacheEntry",
    "YtDlpOpts",
    "YtDlpSongInfo",
    "YtDlpSongResolver",
]
