"""Immutable value objects for the music bounded context."""

from __future__ import annotations

from enum import Enum


class SessionState(Enum):
    """Queue session state with enforced transitions.

    State transitions:
    - EMPTY -> CONNECTING (first song enqueued)
    - CONNECTING -> PLAYING (joined and first stream bound)
    - CONNECTING -> ADVANCING (joined, first stream failed to open)
    - CONNECTING -> STOPPED (join failed)
    - PLAYING <-> PAUSED (toggle pause)
    - PLAYING | PAUSED -> ADVANCING (terminal status from transport)
    - ADVANCING -> PLAYING (next song bound)
    - ADVANCING -> STOPPED (no songs left)
    - PLAYING | PAUSED -> STOPPED (stop command)
    """

    EMPTY = "empty"
    CONNECTING = "connecting"
    PLAYING = "playing"
    PAUSED = "paused"
    ADVANCING = "advancing"
    STOPPED = "stopped"

    def can_transition_to(self, target: SessionState) -> bool:
        """Check if transition to target state is valid."""
        valid_transitions = {
            SessionState.EMPTY: {SessionState.CONNECTING},
            SessionState.CONNECTING: {
                SessionState.PLAYING,
                SessionState.ADVANCING,
                SessionState.STOPPED,
            },
            SessionState.PLAYING: {
                SessionState.PAUSED,
                SessionState.ADVANCING,
                SessionState.STOPPED,
            },
            SessionState.PAUSED: {
                SessionState.PLAYING,
                SessionState.ADVANCING,
                SessionState.STOPPED,
            },
            SessionState.ADVANCING: {SessionState.PLAYING, SessionState.STOPPED},
            SessionState.STOPPED: set(),
        }
        return target in valid_transitions.get(self, set())

    @property
    def is_active(self) -> bool:
        return self in {SessionState.PLAYING, SessionState.PAUSED}

    @property
    def is_terminal(self) -> bool:
        return self == SessionState.STOPPED


class TerminalKind(Enum):
    """How a playing resource reached its end."""

    IDLE = "idle"
    ERROR = "error"
