"""Playback session state machine.

The controller owns the single :class:`PlaybackSession` and the live audio
handles inside it.  Every transition that replaces or ends a voice goes
through :meth:`PlaybackController._release_voice`, so a track switch always
tears the previous voice down before the next one is built.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from src.catalog import Track
from src.errors import AccessDenied
from .tone_engine import DEFAULT_RAMP_SECONDS, ToneEngine, VoiceHandles

logger = logging.getLogger(__name__)


class PlaybackState(Enum):
    IDLE = "idle"
    STOPPED = "stopped"
    PLAYING = "playing"


@dataclass
class PlaybackSession:
    track: Optional[Track] = None
    is_playing: bool = False
    volume: float = 0.5
    voice: Optional[VoiceHandles] = None


def clamp_volume(value: float) -> float:
    return min(max(float(value), 0.0), 1.0)


class PlaybackController:
    """Select, start, stop and re-level tones for one user session.

    ``gate`` is any object with an ``is_premium()`` method.  It is consulted
    on every :meth:`select_and_play` call, never cached, so an upgrade made
    mid-session unlocks tracks immediately.
    """

    def __init__(
        self,
        engine: ToneEngine,
        gate,
        *,
        initial_volume: float = 0.5,
        ramp_seconds: float = DEFAULT_RAMP_SECONDS,
    ) -> None:
        self._engine = engine
        self._gate = gate
        self._initial_volume = clamp_volume(initial_volume)
        self._ramp_seconds = ramp_seconds
        self._session: Optional[PlaybackSession] = None
        self._state_callback: Optional[Callable[[PlaybackState, Optional[Track]], None]] = None

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------
    @property
    def session(self) -> Optional[PlaybackSession]:
        return self._session

    @property
    def state(self) -> PlaybackState:
        session = self._session
        if session is None or session.track is None:
            return PlaybackState.IDLE
        return PlaybackState.PLAYING if session.is_playing else PlaybackState.STOPPED

    @property
    def current_track(self) -> Optional[Track]:
        return self._session.track if self._session else None

    @property
    def volume(self) -> float:
        return self._session.volume if self._session else self._initial_volume

    def set_state_callback(
        self, callback: Optional[Callable[[PlaybackState, Optional[Track]], None]]
    ) -> None:
        self._state_callback = callback

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------
    def select_and_play(self, track: Track) -> None:
        """Start ``track``; raises :class:`AccessDenied` for locked tracks without premium."""
        if track.locked and not self._gate.is_premium():
            logger.info("Blocked locked track %s without premium access", track.id)
            raise AccessDenied(track)

        session = self._ensure_session()
        was_playing = session.is_playing
        self._release_voice(session)
        try:
            session.voice = self._engine.start_track(track, session.volume)
        except Exception:
            if was_playing:
                self._notify()
            raise
        session.track = track
        session.is_playing = True
        logger.info("Playing %s (%s)", track.id, track.frequency_label)
        self._notify()

    def stop(self) -> None:
        session = self._session
        if session is None or not session.is_playing:
            return
        self._release_voice(session)
        logger.info("Stopped %s", session.track.id if session.track else "playback")
        self._notify()

    def toggle_play_pause(self) -> None:
        """Stop when playing; otherwise restart the current track from phase zero."""
        state = self.state
        if state is PlaybackState.PLAYING:
            self.stop()
        elif state is PlaybackState.STOPPED:
            self.select_and_play(self._session.track)

    def set_volume(self, value: float) -> float:
        session = self._session
        if session is None:
            self._initial_volume = clamp_volume(value)
            return self._initial_volume
        session.volume = clamp_volume(value)
        if session.is_playing:
            self._engine.set_volume(session.voice, session.volume, self._ramp_seconds)
        return session.volume

    def shutdown(self) -> None:
        if self._session is not None:
            self._release_voice(self._session)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _ensure_session(self) -> PlaybackSession:
        if self._session is None:
            self._session = PlaybackSession(volume=self._initial_volume)
        return self._session

    def _release_voice(self, session: PlaybackSession) -> None:
        voice, session.voice = session.voice, None
        session.is_playing = False
        if voice is not None:
            self._engine.stop(voice)

    def _notify(self) -> None:
        if self._state_callback:
            self._state_callback(self.state, self.current_track)


__all__ = ["PlaybackController", "PlaybackSession", "PlaybackState", "clamp_volume"]
