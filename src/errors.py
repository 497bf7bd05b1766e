"""Exception types shared by the playback core and the service layer."""

from __future__ import annotations

from typing import Optional


class SonicTherapyError(Exception):
    """Base class for all application errors."""


class AudioUnavailable(SonicTherapyError):
    """The platform audio subsystem could not be created or resumed."""


class InvalidStateError(SonicTherapyError):
    """An audio node was asked to do something its state does not allow."""


class AccessDenied(SonicTherapyError):
    """A locked track was requested without an active entitlement."""

    def __init__(self, track: object, message: Optional[str] = None) -> None:
        self.track = track
        track_id = getattr(track, "id", track)
        super().__init__(message or f"Track '{track_id}' requires a premium subscription")


class StoreError(SonicTherapyError):
    """The managed store rejected a request or could not be reached."""


class GatewayConfigError(SonicTherapyError):
    """Payment gateway credentials are missing."""


class GatewayRequestError(SonicTherapyError):
    """The payment gateway rejected a request."""


class InvalidSignature(SonicTherapyError):
    """A payment signature did not match the expected HMAC."""


__all__ = [
    "SonicTherapyError",
    "AudioUnavailable",
    "InvalidStateError",
    "AccessDenied",
    "StoreError",
    "GatewayConfigError",
    "GatewayRequestError",
    "InvalidSignature",
]
