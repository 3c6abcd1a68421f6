"""
Unit Tests for YtDlpSongResolver

Tests for the yt-dlp based song resolver:
- URL detection
- Info model to Song conversion
- Resolve (URL and search) and error mapping
- Direct stream URL lookup
- Caching behavior
"""

import time
from unittest.mock import patch

import pytest
from yt_dlp.utils import DownloadError

from discord_music_queue.config.settings import AudioSettings
from discord_music_queue.domain.shared.exceptions import (
    ResolutionError,
    ResolutionNotFoundError,
    StreamError,
    TransportTimeoutError,
)
from discord_music_queue.infrastructure.audio.models import (
    CACHE_MAX_SIZE,
    CACHE_TTL,
    CacheEntry,
    YtDlpOpts,
    YtDlpSongInfo,
)
from discord_music_queue.infrastructure.audio.ytdlp_resolver import (
    YtDlpSongResolver,
    _cache_get,
    _cache_put,
    _info_cache,
)

PAGE_URL = "https://www.youtube.com/watch?v=dQw4w9WgXcQ"
MEDIA_URL = "https://rr1.googlevideo.com/videoplayback?id=abc"

# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def resolver():
    return YtDlpSongResolver(AudioSettings())


@pytest.fixture
def info_dict():
    return {
        "webpage_url": PAGE_URL,
        "url": MEDIA_URL,
        "title": "Never Gonna Give You Up",
        "duration": 213,
        "uploader": "Rick Astley",
    }


@pytest.fixture(autouse=True)
def clear_cache():
    """Clear the global cache before each test."""
    _info_cache.clear()
    yield
    _info_cache.clear()


# =============================================================================
# URL detection and conversion
# =============================================================================


class TestUrlDetection:
    @pytest.mark.parametrize(
        "query",
        [PAGE_URL, "http://example.com/a.mp3", "www.youtube.com/watch?v=x"],
    )
    def test_urls(self, resolver, query):
        assert resolver.is_url(query)

    @pytest.mark.parametrize("query", ["never gonna give you up", "lofi beats"])
    def test_search_terms(self, resolver, query):
        assert not resolver.is_url(query)


class TestInfoToSong:
    def test_converts_page_url_title_and_duration(self, resolver, info_dict):
        song = resolver._info_to_song(YtDlpSongInfo.model_validate(info_dict), "q")

        assert song.title == "Never Gonna Give You Up"
        assert song.source_url == PAGE_URL
        assert song.duration_seconds == 213

    def test_live_stream_has_zero_duration(self, resolver, info_dict):
        info_dict["is_live"] = True
        song = resolver._info_to_song(YtDlpSongInfo.model_validate(info_dict), "q")

        assert song.duration_seconds == 0
        assert song.duration_formatted == "LIVE"

    def test_missing_duration_is_zero(self, resolver, info_dict):
        info_dict["duration"] = None
        song = resolver._info_to_song(YtDlpSongInfo.model_validate(info_dict), "q")

        assert song.duration_seconds == 0

    def test_no_url_is_not_found(self, resolver):
        with pytest.raises(ResolutionNotFoundError):
            resolver._info_to_song(YtDlpSongInfo(title="x"), "q")

    def test_blank_title_falls_back(self, info_dict):
        info_dict["title"] = "   "
        assert YtDlpSongInfo.model_validate(info_dict).title == "Unknown Title"

    def test_garbage_duration_coerced(self, info_dict):
        info_dict["duration"] = "not-a-number"
        assert YtDlpSongInfo.model_validate(info_dict).duration is None


# =============================================================================
# resolve
# =============================================================================


class TestResolve:
    async def test_url_uses_extract_info(self, resolver, info_dict):
        with patch.object(resolver, "_extract_sync", return_value=info_dict) as extract:
            song = await resolver.resolve(PAGE_URL)

        extract.assert_called_once_with(PAGE_URL)
        assert song.source_url == PAGE_URL

    async def test_search_uses_first_entry(self, resolver, info_dict):
        data = {"entries": [None, info_dict]}
        with patch.object(resolver, "_extract_sync", return_value=data) as extract:
            song = await resolver.resolve("rick astley")

        extract.assert_called_once_with("ytsearch1:rick astley")
        assert song.title == "Never Gonna Give You Up"

    async def test_search_without_entries_is_not_found(self, resolver):
        with patch.object(resolver, "_extract_sync", return_value={"entries": []}):
            with pytest.raises(ResolutionNotFoundError):
                await resolver.resolve("zzzz nothing")

    async def test_extractor_returning_nothing_is_not_found(self, resolver):
        with patch.object(resolver, "_extract_sync", return_value=None):
            with pytest.raises(ResolutionNotFoundError):
                await resolver.resolve(PAGE_URL)

    async def test_unavailable_video_is_not_found(self, resolver):
        error = DownloadError("ERROR: [youtube] abc: Video unavailable")
        with patch.object(resolver, "_extract_sync", side_effect=error):
            with pytest.raises(ResolutionNotFoundError):
                await resolver.resolve(PAGE_URL)

    async def test_timeout_maps_to_transport_timeout(self, resolver):
        error = DownloadError("ERROR: Read timed out.")
        with patch.object(resolver, "_extract_sync", side_effect=error):
            with pytest.raises(TransportTimeoutError):
                await resolver.resolve(PAGE_URL)

    async def test_other_download_error(self, resolver):
        error = DownloadError("ERROR: Sign in to confirm your age")
        with patch.object(resolver, "_extract_sync", side_effect=error):
            with pytest.raises(ResolutionError) as exc_info:
                await resolver.resolve(PAGE_URL)
        assert exc_info.value.code == "RESOLUTION_ERROR"

    async def test_search_result_cached_by_page_url(self, resolver, info_dict):
        with patch.object(resolver, "_extract_sync", return_value={"entries": [info_dict]}):
            await resolver.resolve("rick astley")

        assert PAGE_URL in _info_cache

    async def test_url_resolution_is_cached(self, resolver, info_dict):
        with patch.object(resolver, "_extract_sync", return_value=info_dict) as extract:
            await resolver.resolve(PAGE_URL)
            await resolver.resolve(PAGE_URL)

        extract.assert_called_once()


# =============================================================================
# stream_url_for
# =============================================================================


class TestStreamUrl:
    async def test_uses_cached_info_from_search(self, resolver, info_dict):
        with patch.object(resolver, "_extract_sync", return_value={"entries": [info_dict]}):
            song = await resolver.resolve("rick astley")

        with patch.object(resolver, "_extract_sync") as extract:
            url = await resolver.stream_url_for(song.source_url)

        extract.assert_not_called()
        assert url == MEDIA_URL

    async def test_falls_back_to_audio_formats(self, resolver):
        data = {
            "webpage_url": PAGE_URL,
            "title": "x",
            "formats": [
                {"url": "https://v.example/video", "acodec": "none"},
                {"url": "https://a.example/low", "acodec": "opus"},
                {"url": "https://a.example/high", "acodec": "opus"},
            ],
        }
        with patch.object(resolver, "_extract_sync", return_value=data):
            assert await resolver.stream_url_for(PAGE_URL) == "https://a.example/high"

    async def test_no_playable_format(self, resolver):
        data = {"webpage_url": PAGE_URL, "title": "x", "formats": []}
        with patch.object(resolver, "_extract_sync", return_value=data):
            with pytest.raises(StreamError, match="No stream URL found"):
                await resolver.stream_url_for(PAGE_URL)

    async def test_extraction_failure(self, resolver):
        with patch.object(resolver, "_extract_sync", side_effect=DownloadError("boom")):
            with pytest.raises(StreamError):
                await resolver.stream_url_for(PAGE_URL)


# =============================================================================
# Cache and options
# =============================================================================


class TestCache:
    def test_expired_entry_dropped(self, info_dict):
        info = YtDlpSongInfo.model_validate(info_dict)
        now = time.time()
        _info_cache[PAGE_URL] = CacheEntry(info=info, cached_at=now - CACHE_TTL - 1)

        assert _cache_get(PAGE_URL, now) is None
        assert PAGE_URL not in _info_cache

    def test_fresh_entry_returned(self, info_dict):
        info = YtDlpSongInfo.model_validate(info_dict)
        now = time.time()
        _cache_put(PAGE_URL, info, now)

        assert _cache_get(PAGE_URL, now + 1) is info

    def test_overflow_prunes_expired(self, info_dict):
        info = YtDlpSongInfo.model_validate(info_dict)
        now = time.time()
        for i in range(CACHE_MAX_SIZE):
            _info_cache[f"old-{i}"] = CacheEntry(info=info, cached_at=now - CACHE_TTL - 1)

        _cache_put("fresh", info, now)

        assert list(_info_cache) == ["fresh"]


class TestOptions:
    def test_options_follow_audio_settings(self):
        resolver = YtDlpSongResolver(AudioSettings(ytdlp_format="bestaudio", socket_timeout=30))
        opts = resolver._get_opts()

        assert opts.format == "bestaudio"
        assert opts.socket_timeout == 30
        assert opts.noplaylist is True

    def test_defaults(self):
        opts = YtDlpOpts()
        dumped = opts.model_dump(exclude_none=True)

        assert dumped["quiet"] is True
        assert "format" not in dumped
