"""
Application Interfaces (Ports)

Abstract interfaces that define contracts between the application
layer and infrastructure adapters. These are the "ports" in
hexagonal architecture.
"""

from discord_music_queue.application.interfaces.channel_notifier import ChannelNotifier
from discord_music_queue.application.interfaces.song_resolver import SongResolver
from discord_music_queue.application.interfaces.voice_transport import VoiceTransport

__all__ = [
    "ChannelNotifier",
    "SongResolver",
    "VoiceTransport",
]
