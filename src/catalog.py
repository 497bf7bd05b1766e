"""Built-in frequency catalog.

The catalog is fixed at import time and never mutated.  Each entry is either
a pure ``mono`` tone or a ``binaural`` beat built from a carrier and a beat
offset.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple


class SignalKind(Enum):
    MONO = "mono"
    BINAURAL = "binaural"


@dataclass(frozen=True)
class Track:
    """One selectable tone in the catalog."""

    id: str
    title: str
    frequency_label: str
    kind: SignalKind
    description: str
    locked: bool = False
    hz: Optional[float] = None
    base_hz: Optional[float] = None
    beat_hz: Optional[float] = None
    color: Tuple[str, str] = ("#64748b", "#475569")

    def __post_init__(self) -> None:
        if self.kind is SignalKind.MONO:
            if self.hz is None or self.base_hz is not None or self.beat_hz is not None:
                raise ValueError(f"Mono track '{self.id}' needs hz and no base/beat pair")
            if self.hz <= 0:
                raise ValueError(f"Track '{self.id}' frequency must be positive")
        elif self.kind is SignalKind.BINAURAL:
            if self.hz is not None or self.base_hz is None or self.beat_hz is None:
                raise ValueError(f"Binaural track '{self.id}' needs base_hz and beat_hz only")
            if self.base_hz <= 0 or self.beat_hz <= 0:
                raise ValueError(f"Track '{self.id}' frequencies must be positive")
        else:
            raise ValueError(f"Unknown signal kind: {self.kind!r}")

    @property
    def oscillator_count(self) -> int:
        return 1 if self.kind is SignalKind.MONO else 2

    @property
    def subtitle(self) -> str:
        return "Stereo Audio Required" if self.kind is SignalKind.BINAURAL else "Mono Tone"


TRACKS: Tuple[Track, ...] = (
    Track(
        id="432hz",
        title="Nature's Balance",
        frequency_label="432 Hz",
        kind=SignalKind.MONO,
        hz=432.0,
        description="Deep relaxation, grounding, and stress relief.",
        color=("#2dd4bf", "#10b981"),
        locked=False,
    ),
    Track(
        id="528hz",
        title="Miracle Tone",
        frequency_label="528 Hz",
        kind=SignalKind.MONO,
        hz=528.0,
        description="DNA repair, transformation, and positive energy.",
        color=("#fb7185", "#ec4899"),
        locked=True,
    ),
    Track(
        id="14hz",
        title="Deep Focus",
        frequency_label="14 Hz Beat",
        kind=SignalKind.BINAURAL,
        base_hz=200.0,
        beat_hz=14.0,
        description="Mid-Beta waves for active studying and concentration.",
        color=("#60a5fa", "#6366f1"),
        locked=True,
    ),
    Track(
        id="20hz",
        title="High Alertness",
        frequency_label="20 Hz Beat",
        kind=SignalKind.BINAURAL,
        base_hz=200.0,
        beat_hz=20.0,
        description="High-Beta waves for problem solving and high energy.",
        color=("#fbbf24", "#f97316"),
        locked=True,
    ),
    Track(
        id="463hz",
        title="Pure Tone 463",
        frequency_label="463 Hz",
        kind=SignalKind.MONO,
        hz=463.0,
        description="Custom requested frequency for meditative states.",
        color=("#c084fc", "#8b5cf6"),
        locked=True,
    ),
)

_BY_ID: Dict[str, Track] = {track.id: track for track in TRACKS}
if len(_BY_ID) != len(TRACKS):  # pragma: no cover - guards edits to TRACKS
    raise ValueError("Track identifiers must be unique")


def get_track(track_id: str) -> Track:
    """Return the track with ``track_id``; raises ``KeyError`` when unknown."""
    try:
        return _BY_ID[track_id]
    except KeyError:
        raise KeyError(f"Unknown track: {track_id}") from None


def free_tracks() -> Tuple[Track, ...]:
    return tuple(track for track in TRACKS if not track.locked)


def locked_tracks() -> Tuple[Track, ...]:
    return tuple(track for track in TRACKS if track.locked)


__all__ = ["SignalKind", "Track", "TRACKS", "get_track", "free_tracks", "locked_tracks"]
