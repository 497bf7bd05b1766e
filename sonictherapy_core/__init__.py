"""Standalone-friendly tone playback and entitlement API."""

from src.audio import (
    AudioContext,
    PlaybackController,
    PlaybackSession,
    PlaybackState,
    ToneEngine,
    VoiceHandles,
    get_shared_context,
)
from src.app import main
from src.catalog import TRACKS, SignalKind, Track, get_track
from src.errors import (
    AccessDenied,
    AudioUnavailable,
    GatewayConfigError,
    GatewayRequestError,
    InvalidSignature,
)
from src.services import (
    PaymentService,
    RazorpayGateway,
    StaticGate,
    StoreClient,
    SubscriptionGate,
    SubscriptionService,
)

__all__ = [
    "main",
    "AudioContext",
    "PlaybackController",
    "PlaybackSession",
    "PlaybackState",
    "ToneEngine",
    "VoiceHandles",
    "get_shared_context",
    "TRACKS",
    "SignalKind",
    "Track",
    "get_track",
    "AccessDenied",
    "AudioUnavailable",
    "GatewayConfigError",
    "GatewayRequestError",
    "InvalidSignature",
    "PaymentService",
    "RazorpayGateway",
    "StaticGate",
    "StoreClient",
    "SubscriptionGate",
    "SubscriptionService",
]
