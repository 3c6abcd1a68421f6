"""SongResolver implementation using yt-dlp for URL resolution and search."""

from __future__ import annotations

import asyncio
import logging
import re
import time
from typing import Any, Final, cast

from pydantic import ValidationError
from yt_dlp import YoutubeDL
from yt_dlp.utils import DownloadError, ExtractorError

from discord_music_queue.application.interfaces.song_resolver import SongResolver
from discord_music_queue.config.settings import AudioSettings
from discord_music_queue.domain.music.entities import Song
from discord_music_queue.domain.shared.exceptions import (
    ResolutionError,
    ResolutionNotFoundError,
    StreamError,
    TransportTimeoutError,
)
from discord_music_queue.domain.shared.messages import ErrorMessages, LogTemplates
from discord_music_queue.infrastructure.audio.models import (
    CACHE_MAX_SIZE,
    CACHE_TTL,
    LOG_URL_TRUNCATE,
    CacheEntry,
    YtDlpOpts,
    YtDlpSongInfo,
)

logger = logging.getLogger(__name__)

# ── Module-level state and patterns ────────────────────────────────────

_info_cache: dict[str, CacheEntry] = {}

URL_PATTERNS: Final[list[re.Pattern[str]]] = [
    re.compile(r"https?://"),
    re.compile(r"www\."),
]

NOT_FOUND_MARKERS: Final[tuple[str, ...]] = (
    "video unavailable",
    "private video",
    "has been removed",
    "does not exist",
    "unsupported url",
    "404",
)


def _cache_get(key: str, now: float) -> YtDlpSongInfo | None:
    cached = _info_cache.get(key)
    if cached is None:
        return None
    if now - cached.cached_at < CACHE_TTL:
        logger.debug(LogTemplates.CACHE_HIT, key[:LOG_URL_TRUNCATE])
        return cached.info
    _info_cache.pop(key, None)
    return None


def _cache_put(key: str, info: YtDlpSongInfo, now: float) -> None:
    _info_cache[key] = CacheEntry(info=info, cached_at=now)

    if len(_info_cache) > CACHE_MAX_SIZE:
        expired = [k for k, entry in _info_cache.items() if now - entry.cached_at >= CACHE_TTL]
        for k in expired:
            _info_cache.pop(k, None)
        if expired:
            logger.debug(LogTemplates.CACHE_EXPIRED_PRUNED, len(expired))


def _is_timeout(error: BaseException) -> bool:
    exc_info = getattr(error, "exc_info", None)
    original = exc_info[1] if exc_info else None
    return isinstance(original, TimeoutError) or "timed out" in str(error).lower()


def _is_not_found(error: BaseException) -> bool:
    text = str(error).lower()
    return any(marker in text for marker in NOT_FOUND_MARKERS)


class YtDlpSongResolver(SongResolver):
    """Resolves search text or page URLs into songs, and page URLs into media URLs.

    Extraction runs in a worker thread. Results are cached by page URL so a
    song resolved from a search can be streamed without a second lookup.
    """

    def __init__(self, settings: AudioSettings | None = None) -> None:
        self._settings = settings or AudioSettings()
        self._base_opts = YtDlpOpts(
            format=self._settings.ytdlp_format,
            socket_timeout=self._settings.socket_timeout,
        )

    def _get_opts(self, **overrides: Any) -> YtDlpOpts:
        if overrides:
            return self._base_opts.model_copy(update=overrides)
        return self._base_opts

    def _info_to_song(self, info: YtDlpSongInfo, query: str) -> Song:
        url = info.page_url
        if not url:
            logger.warning(ErrorMessages.NO_URL_IN_INFO_DICT)
            raise ResolutionNotFoundError(query)

        duration = 0 if info.is_live or info.duration is None else info.duration
        try:
            return Song(title=info.title, source_url=url, duration_seconds=duration)
        except ValidationError as e:
            logger.exception(LogTemplates.YTDLP_FAILED_INFO_TO_SONG)
            raise ResolutionError(query, f"Unusable metadata for '{query}'") from e

    def _extract_sync(self, target: str) -> dict[str, Any] | None:
        with YoutubeDL(params=cast(Any, self._get_opts().model_dump(exclude_none=True))) as ydl:
            data = ydl.extract_info(target, download=False)
        return dict(data) if isinstance(data, dict) else None

    def _extract_info_sync(self, url: str) -> YtDlpSongInfo | None:
        now = time.time()
        cached = _cache_get(url, now)
        if cached is not None:
            return cached

        data = self._extract_sync(url)
        if data is None:
            return None

        info = YtDlpSongInfo.model_validate(data)
        _cache_put(url, info, now)
        if info.webpage_url and info.webpage_url != url:
            _cache_put(info.webpage_url, info, now)
        return info

    def _search_sync(self, query: str) -> YtDlpSongInfo | None:
        data = self._extract_sync(f"ytsearch1:{query}")
        if data is None:
            return None

        entries = data.get("entries") or []
        first = next((e for e in entries if e), None)
        if first is None:
            return None

        info = YtDlpSongInfo.model_validate(dict(first))
        if info.webpage_url:
            _cache_put(info.webpage_url, info, time.time())
        return info

    async def resolve(self, query: str) -> Song:
        try:
            if self.is_url(query):
                info = await asyncio.to_thread(self._extract_info_sync, query)
            else:
                info = await asyncio.to_thread(self._search_sync, query)
        except (DownloadError, ExtractorError) as e:
            if _is_timeout(e):
                raise TransportTimeoutError("resolve", self._settings.socket_timeout) from e
            if _is_not_found(e):
                raise ResolutionNotFoundError(query) from e
            logger.warning(LogTemplates.YTDLP_FAILED_SEARCH, query)
            raise ResolutionError(query) from e
        except ValidationError as e:
            logger.warning(LogTemplates.YTDLP_FAILED_INFO_TO_SONG)
            raise ResolutionError(query, f"Unusable metadata for '{query}'") from e

        if info is None:
            raise ResolutionNotFoundError(query)

        return self._info_to_song(info, query)

    async def stream_url_for(self, source_url: str) -> str:
        """Return a direct media URL FFmpeg can read for a song's page URL.

        Raises:
            StreamError: Extraction failed or produced no playable format.
        """
        try:
            info = await asyncio.to_thread(self._extract_info_sync, source_url)
        except (DownloadError, ExtractorError) as e:
            logger.warning(LogTemplates.YTDLP_FAILED_EXTRACT_INFO, source_url[:LOG_URL_TRUNCATE])
            raise StreamError(source_url, str(e)) from e
        except ValidationError as e:
            raise StreamError(source_url, ErrorMessages.NO_URL_IN_INFO_DICT) from e

        stream_url = info.stream_url if info is not None else None
        if not stream_url:
            title = info.title if info is not None else source_url
            raise StreamError(source_url, ErrorMessages.NO_STREAM_URL_FOR_SONG.format(title=title))
        return stream_url

    def is_url(self, query: str) -> bool:
        return any(pattern.search(query) for pattern in URL_PATTERNS)
