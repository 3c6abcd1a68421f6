"""Centralized message constants for error messages, log templates, and user feedback."""

from __future__ import annotations


class ErrorMessages:
    """Error messages for exceptions and validation failures."""

    # Configuration Errors
    DISCORD_TOKEN_REQUIRED = "DISCORD_TOKEN environment variable is required"
    INVALID_LOG_LEVEL = "Invalid log level: {level}. Must be one of {valid_levels}"
    CONTAINER_NOT_FOUND = "Container not found on bot instance"

    # Audio/Stream Errors
    NO_URL_IN_INFO_DICT = "No URL found in info dict"
    NO_STREAM_URL_FOR_SONG = "No stream URL found for {title}"
    RESOLVER_RETURNED_NONE = "Resolver returned None"

    # Voice Errors
    CHANNEL_NOT_VOICE = "Channel {channel_id} is not a voice channel"
    GUILD_NOT_FOUND = "Guild {guild_id} not found"
    PLAYER_REJECTED_STREAM = "Player rejected stream: {error}"


class LogTemplates:
    """Log message templates for structured logging.

    Use these with logger.info(), logger.error(), etc. and pass values as parameters
    for proper log formatting and structured logging support.
    """

    # Session Registry
    SESSION_CREATED = "Created queue session for guild %s"
    SESSION_REMOVED = "Removed queue session for guild %s"
    SESSION_STOPPED = "Stopped session in guild %s, cleared %s songs"
    SESSION_START_FAILED = "Failed to start session in guild %s"
    LOCKS_PRUNED = "Pruned %s idle guild locks"

    # Queue Operations
    QUEUE_ENQUEUED = "Enqueued song '%s' at position %s in guild %s"
    QUEUE_EXHAUSTED = "Queue exhausted in guild %s"
    ENQUEUE_CANCELLED = "Dropped '%s' for guild %s: session was stopped while resolving"
    SKIP_REQUESTED = "Skip requested for '%s' in guild %s"
    NO_ACTIVE_SESSION = "No active session: %s"

    # Playback Operations
    TRACK_STARTED = "Started playing: %s in guild %s"
    TRACK_TERMINAL = "Song '%s' ended (%s) in guild %s"
    TERMINAL_IGNORED = "Ignoring stale %s terminal event for guild %s"
    TERMINAL_LOOP_CLOSED = "Event loop closed; dropping terminal event for guild %s"
    STREAM_FAILED = "Could not open stream for '%s' in guild %s: %s"
    ADVANCE_FAILED = "Unexpected error advancing queue in guild %s"
    PLAYBACK_PAUSED = "Paused playback in guild %s"
    PLAYBACK_RESUMED = "Resumed playback in guild %s"
    PLAYBACK_ENDED_WITH_ERROR = "Player reported an error in guild %s: %r"
    NOTIFY_TIMEOUT = "Timed out posting to channel %s"
    NOTIFY_FAILED = "Failed to post to channel %s: %r"
    NOTIFY_CHANNEL_MISSING = "Text channel %s is not available"

    # Voice Operations
    VOICE_CONNECTED = "Connected to voice channel %s in %s"
    VOICE_RELEASED = "Released voice connection in guild %s"
    VOICE_RELEASE_FAILED = "Failed to release voice connection in guild %s: %r"
    VOICE_JOIN_FAILED = "Could not join voice channel %s in guild %s: %s"
    VOICE_JOIN_UNEXPECTED = "Unexpected error joining voice in guild %s"
    VOICE_STALE_CLEANUP = "Found stale voice client in guild %s, cleaning up"
    VOICE_SELF_DEAFEN_FAILED = "Failed to self-deafen in guild %s: %r"

    # FFmpeg/Audio Resource Management
    FFMPEG_SOURCE_CLEANUP_ERROR = "Error cleaning up source: %s"
    FFMPEG_STREAM_OPENED = "Opened FFmpeg stream for %s"

    # Resolution/Search
    RESOLUTION_FAILED = "Failed to resolve %r in guild %s: %s"
    RESOLUTION_UNEXPECTED = "Unexpected error resolving %r"
    CACHE_HIT = "Cache hit for '%s'"
    CACHE_EXPIRED_PRUNED = "Pruned %d expired cache entries"
    YTDLP_FAILED_EXTRACT_INFO = "Failed to extract info from %s"
    YTDLP_FAILED_SEARCH = "Failed to search for %r"
    YTDLP_FAILED_INFO_TO_SONG = "Failed to convert info to song"

    # Health Server
    HEALTH_SERVER_STARTED = "Health server listening on %s:%s"
    HEALTH_SERVER_STOPPED = "Health server stopped"
    HEALTH_SERVER_START_FAILED = "Failed to start health server on %s:%s: %r"

    # Application Lifecycle
    BOT_STARTING = "Starting Discord Music Queue in {environment} mode"
    BOT_SETUP = "Setting up bot..."
    BOT_SETUP_COMPLETE = "Bot setup complete"
    BOT_STARTING_RUN = "Starting bot..."
    BOT_STOPPED = "Bot stopped successfully"
    BOT_KEYBOARD_INTERRUPT = "Received keyboard interrupt, shutting down..."
    BOT_FATAL_ERROR = "Fatal error: %s"
    BOT_SHUTTING_DOWN = "Shutting down bot..."
    BOT_CONTAINER_SHUTDOWN = "Container shutdown complete"
    BOT_CONTAINER_SHUTDOWN_ERROR = "Error during container shutdown: %s"
    BOT_SHUTDOWN_COMPLETE = "Bot shutdown complete"
    BOT_SHUTDOWN_TIMEOUT = "Graceful shutdown exceeded %ss, forcing exit"
    BOT_READY = "Bot ready as %s (%s)"
    BOT_CONNECTED_GUILDS = "Connected to %s guilds"

    # Bot Cog Management
    BOT_COG_LOADED = "Loaded cog: %s"
    BOT_COG_LOAD_FAILED = "Failed to load cog %s: %s"
    BOT_COGS_LOADED_SUMMARY = "Cogs loaded: %s success, %s failed"

    # Command Handling
    COMMAND_RECEIVED = "Command '%s' from %s in guild %s"
    COMMAND_ERROR = "Command error in '%s': %s"
    COMMAND_REPLY_FAILED = "Failed to send reply for '%s'"


class DiscordUIMessages:
    """User-facing Discord messages and responses.

    These strings are shown directly to users in Discord channels.
    Keep them concise, friendly, and include appropriate emoji.
    """

    # Channel Notices (posted by the queue itself)
    NOTICE_NOW_PLAYING = "🎶 Now playing: **{title}** - `{duration}`"
    NOTICE_STREAM_FAILED = "❌ Could not play **{title}**, skipping."
    NOTICE_PLAYBACK_ERROR = "❌ An error occurred while playing **{title}**!"
    NOTICE_QUEUE_FINISHED = "✅ Queue finished!"

    # Action Messages
    ACTION_QUEUED = "✅ **{title}** - `{duration}` added to queue! (position {position})"
    ACTION_SKIPPED = "⏭️ Skipped!"
    ACTION_STOPPED = "⏹️ Stopped and disconnected!"
    ACTION_PAUSED = "⏸️ Paused!"
    ACTION_RESUMED = "▶️ Resumed!"
    ENQUEUE_CANCELLED = "⏹️ Playback was stopped before **{title}** could be queued."

    # Error Messages
    ERROR_NO_RESULTS = "❌ No results found for: **{query}**"
    ERROR_RESOLUTION_TIMEOUT = "⏳ Timed out looking up **{query}**. Try again."
    ERROR_RESOLUTION_FAILED = "❌ Error finding the song!"
    ERROR_COULD_NOT_JOIN_VOICE = "❌ Error connecting to voice channel!"
    ERROR_JOIN_TIMEOUT = "⏳ Timed out connecting to the voice channel."
    ERROR_QUEUE_FULL = "❌ Queue is full ({max_size} songs max)."
    ERROR_SPOTIFY_UNSUPPORTED = (
        "❌ Spotify links are not supported. Please search by song name or use a YouTube link!"
    )
    ERROR_QUERY_REQUIRED = "❌ Please provide a song name or URL!"
    ERROR_GENERIC = "❌ Error playing the song!"
    ERROR_COMMAND_FAILED = "❌ Something went wrong running that command."

    # State Messages
    STATE_NOTHING_PLAYING = "❌ Nothing is playing!"
    STATE_QUEUE_EMPTY = "📭 Queue is empty!"
    STATE_NEED_TO_BE_IN_VOICE = "❌ You need to be in a voice channel!"
    STATE_SERVER_ONLY = "❌ This command can only be used in a server."

    # Queue Listing
    QUEUE_HEADER = "**📃 Current Queue:**"
    QUEUE_PAUSED_SUFFIX = " (paused)"
    QUEUE_NOW_PLAYING_LINE = "🎵 **Now Playing:** {title} - `{duration}`"
    QUEUE_LINE = "{position}. {title} - `{duration}`"
    QUEUE_MORE = "... and {count} more"

    # Help
    HELP_TEXT = (
        "**🎵 Music Bot Commands:**\n"
        "`{prefix}play <song name or URL>` - Play a song or add it to the queue\n"
        "`{prefix}skip` - Skip the current song\n"
        "`{prefix}stop` - Stop playing and clear the queue\n"
        "`{prefix}pause` - Pause or resume playback\n"
        "`{prefix}queue` - Show the current queue\n"
        "`{prefix}help` - Show this message\n\n"
        "**Aliases:** `{prefix}p` (play), `{prefix}s` (skip), `{prefix}q` (queue), "
        "`{prefix}h` (help)"
    )
