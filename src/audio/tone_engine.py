"""Build and tear down the two tone topologies on top of the audio graph."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Optional, Tuple

from src.errors import AudioUnavailable, InvalidStateError
from src.catalog import SignalKind, Track
from .graph import AudioContext, GainNode, OscillatorNode, StereoPannerNode, get_shared_context

logger = logging.getLogger(__name__)

DEFAULT_RAMP_SECONDS = 0.1


@dataclass
class VoiceHandles:
    """Live nodes for one playing track."""

    oscillators: Tuple[OscillatorNode, ...]
    gain: GainNode
    panners: Tuple[StereoPannerNode, ...] = field(default_factory=tuple)
    released: bool = False


class ToneEngine:
    """Translate track parameters into a running oscillator → (panner) → gain chain.

    The engine obtains its :class:`AudioContext` lazily on first use and keeps
    that one context for its lifetime.  By default this is the process-wide
    context from :func:`get_shared_context`.
    """

    def __init__(self, context_factory: Optional[Callable[[], AudioContext]] = None) -> None:
        self._context_factory = context_factory or get_shared_context
        self._context: Optional[AudioContext] = None

    @property
    def context(self) -> Optional[AudioContext]:
        return self._context

    def _ensure_context(self) -> AudioContext:
        if self._context is None:
            try:
                self._context = self._context_factory()
            except AudioUnavailable:
                raise
            except Exception as exc:
                raise AudioUnavailable(f"Audio subsystem unavailable: {exc}") from exc
        context = self._context
        try:
            context.resume()
        except AudioUnavailable:
            raise
        except Exception as exc:
            raise AudioUnavailable(f"Could not resume audio context: {exc}") from exc
        return context

    def _master_gain(self, context: AudioContext, volume: float) -> GainNode:
        gain = context.create_gain()
        gain.gain.value = volume
        gain.connect(context.destination)
        return gain

    def _oscillator(self, context: AudioContext, freq_hz: float) -> OscillatorNode:
        osc = context.create_oscillator()
        osc.frequency.set_value_at_time(freq_hz, context.current_time)
        return osc

    def start_mono(self, freq_hz: float, initial_volume: float) -> VoiceHandles:
        context = self._ensure_context()
        gain = self._master_gain(context, initial_volume)
        osc = self._oscillator(context, freq_hz)
        osc.connect(gain)
        osc.start()
        logger.debug("Started mono tone at %.2f Hz", freq_hz)
        return VoiceHandles(oscillators=(osc,), gain=gain)

    def start_binaural(self, base_hz: float, beat_hz: float, initial_volume: float) -> VoiceHandles:
        """Left ear at ``base_hz``, right ear at ``base_hz + beat_hz``, one shared gain."""
        context = self._ensure_context()
        gain = self._master_gain(context, initial_volume)

        osc_left = self._oscillator(context, base_hz)
        pan_left = context.create_stereo_panner()
        pan_left.pan.value = -1.0
        osc_left.connect(pan_left)
        pan_left.connect(gain)

        osc_right = self._oscillator(context, base_hz + beat_hz)
        pan_right = context.create_stereo_panner()
        pan_right.pan.value = 1.0
        osc_right.connect(pan_right)
        pan_right.connect(gain)

        osc_left.start()
        osc_right.start()
        logger.debug("Started binaural beat %.2f Hz + %.2f Hz", base_hz, beat_hz)
        return VoiceHandles(
            oscillators=(osc_left, osc_right),
            gain=gain,
            panners=(pan_left, pan_right),
        )

    def start_track(self, track: Track, volume: float) -> VoiceHandles:
        if track.kind is SignalKind.MONO:
            return self.start_mono(track.hz, volume)
        return self.start_binaural(track.base_hz, track.beat_hz, volume)

    def set_volume(
        self,
        handles: Optional[VoiceHandles],
        new_volume: float,
        ramp_seconds: float = DEFAULT_RAMP_SECONDS,
    ) -> None:
        if handles is None or handles.released or self._context is None:
            return
        handles.gain.gain.set_target_at_time(new_volume, self._context.current_time, ramp_seconds)

    def stop(self, handles: Optional[VoiceHandles]) -> None:
        """Stop and disconnect every node of ``handles``; safe to call repeatedly."""
        if handles is None or handles.released:
            return
        for osc in handles.oscillators:
            try:
                osc.stop()
            except InvalidStateError:
                pass
            osc.disconnect()
        for panner in handles.panners:
            panner.disconnect()
        handles.gain.disconnect()
        handles.released = True
        logger.debug("Released %d oscillator(s)", len(handles.oscillators))


__all__ = ["ToneEngine", "VoiceHandles", "DEFAULT_RAMP_SECONDS"]
