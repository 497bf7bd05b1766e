"""Real-time tone generation and playback session control."""

from .graph import AudioContext, get_shared_context, reset_shared_context
from .tone_engine import ToneEngine, VoiceHandles
from .playback import PlaybackController, PlaybackSession, PlaybackState

__all__ = [
    "AudioContext",
    "get_shared_context",
    "reset_shared_context",
    "ToneEngine",
    "VoiceHandles",
    "PlaybackController",
    "PlaybackSession",
    "PlaybackState",
]
