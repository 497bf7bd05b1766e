"""Real-time audio graph rendered with numpy and streamed into Qt.

The graph mirrors the small subset of a browser audio API the player needs:
an :class:`AudioContext` owning a destination, sine :class:`OscillatorNode`
sources, :class:`StereoPannerNode` and :class:`GainNode` processors, and
:class:`AudioParam` automation with ``set_target_at_time`` smoothing.

Rendering is pull based.  Each call to :meth:`AudioContext.render` advances
the context clock by one block; the Qt output is fed in push mode from a
``QTimer`` that calls :meth:`AudioContext.pump` on the UI thread.
"""

from __future__ import annotations

import logging
import math
from typing import Callable, List, Optional, Tuple

import numpy as np

try:  # pragma: no cover - Qt multimedia needs a system audio stack
    from PyQt5.QtCore import QTimer
    from PyQt5.QtMultimedia import QAudioDeviceInfo, QAudioFormat, QAudioOutput

    QT_MULTIMEDIA_AVAILABLE = True
except Exception:  # pragma: no cover - allow headless operation
    QTimer = None  # type: ignore
    QAudioDeviceInfo = None  # type: ignore
    QAudioFormat = None  # type: ignore
    QAudioOutput = None  # type: ignore
    QT_MULTIMEDIA_AVAILABLE = False

from src.errors import AudioUnavailable, InvalidStateError

logger = logging.getLogger(__name__)

_INT16_MAX = np.int16(32767).item()
_BYTES_PER_FRAME = 4  # 16-bit stereo
_TWO_PI = 2.0 * math.pi

SUSPENDED = "suspended"
RUNNING = "running"
CLOSED = "closed"


def float_to_pcm(audio: np.ndarray) -> bytes:
    """Convert float samples in [-1, 1] to interleaved 16-bit little-endian PCM."""
    if audio.size == 0:
        return b""
    clipped = np.clip(audio, -1.0, 1.0)
    pcm = np.asarray((clipped * _INT16_MAX).round(), dtype="<i2")
    return pcm.tobytes()


class AudioParam:
    """A-rate parameter with ``set_value_at_time``/``set_target_at_time`` automation."""

    def __init__(
        self,
        context: "AudioContext",
        value: float,
        min_value: float = -math.inf,
        max_value: float = math.inf,
    ) -> None:
        self._context = context
        self.min_value = min_value
        self.max_value = max_value
        self._value = self._clamp(value)
        # (time, kind, value, time_constant), kept sorted by time
        self._events: List[Tuple[float, str, float, float]] = []
        # (start_time, start_value, target, time_constant) while approaching a target
        self._ramp: Optional[Tuple[float, float, float, float]] = None

    def _clamp(self, value: float) -> float:
        return float(min(max(float(value), self.min_value), self.max_value))

    @property
    def value(self) -> float:
        return self._value

    @value.setter
    def value(self, new_value: float) -> None:
        self._events.clear()
        self._ramp = None
        self._value = self._clamp(new_value)

    def set_value_at_time(self, value: float, start_time: float) -> "AudioParam":
        self._insert((float(start_time), "set", self._clamp(value), 0.0))
        return self

    def set_target_at_time(self, target: float, start_time: float, time_constant: float) -> "AudioParam":
        """Approach ``target`` exponentially from ``start_time`` with ``time_constant`` seconds."""
        if time_constant < 0:
            raise ValueError("time_constant must be non-negative")
        if time_constant == 0:
            return self.set_value_at_time(target, start_time)
        self._insert((float(start_time), "target", self._clamp(target), float(time_constant)))
        return self

    def cancel_scheduled_values(self, start_time: float) -> "AudioParam":
        self._events = [event for event in self._events if event[0] < start_time]
        return self

    def _insert(self, event: Tuple[float, str, float, float]) -> None:
        self._events.append(event)
        self._events.sort(key=lambda item: item[0])

    def _apply(self, event: Tuple[float, str, float, float]) -> None:
        time, kind, value, time_constant = event
        if kind == "set":
            self._ramp = None
            self._value = value
        else:
            self._ramp = (time, self._value, value, time_constant)

    def _segment(self, times: np.ndarray) -> np.ndarray:
        if self._ramp is None:
            return np.full(times.shape[0], self._value, dtype=np.float64)
        start, start_value, target, time_constant = self._ramp
        elapsed = np.maximum(times - start, 0.0)
        values = target + (start_value - target) * np.exp(-elapsed / time_constant)
        self._value = float(values[-1])
        return values

    def _values(self, start_time: float, frames: int) -> np.ndarray:
        sample_rate = self._context.sample_rate
        times = start_time + np.arange(frames, dtype=np.float64) / sample_rate
        out = np.empty(frames, dtype=np.float64)
        pos = 0
        while pos < frames:
            end = frames
            if self._events:
                event_frame = int(math.ceil((self._events[0][0] - start_time) * sample_rate - 1e-9))
                if event_frame < frames:
                    end = max(pos, event_frame)
            if end > pos:
                out[pos:end] = self._segment(times[pos:end])
                pos = end
            if pos < frames:
                self._apply(self._events.pop(0))
        return out


class AudioNode:
    """Base node; outputs are ``(frames, channels)`` float arrays."""

    def __init__(self, context: "AudioContext") -> None:
        self.context = context
        self._inputs: List[AudioNode] = []
        self._outputs: List[AudioNode] = []
        self._cache_serial = -1
        self._cache: Optional[np.ndarray] = None

    def connect(self, destination: "AudioNode") -> "AudioNode":
        if destination.context is not self.context:
            raise ValueError("Cannot connect nodes that belong to different contexts")
        if self not in destination._inputs:
            destination._inputs.append(self)
            self._outputs.append(destination)
        return destination

    def disconnect(self) -> None:
        for destination in self._outputs:
            if self in destination._inputs:
                destination._inputs.remove(self)
        self._outputs.clear()

    @property
    def connected(self) -> bool:
        return bool(self._outputs)

    def _output(self, frames: int, start_time: float) -> np.ndarray:
        serial = self.context._block_serial
        if self._cache_serial != serial or self._cache is None:
            self._cache = self._process(frames, start_time)
            self._cache_serial = serial
        return self._cache

    def _mix_inputs(self, frames: int, start_time: float) -> np.ndarray:
        buffers = [node._output(frames, start_time) for node in list(self._inputs)]
        if not buffers:
            return np.zeros((frames, 1), dtype=np.float64)
        channels = max(buffer.shape[1] for buffer in buffers)
        mix = np.zeros((frames, channels), dtype=np.float64)
        for buffer in buffers:
            mix += buffer
        return mix

    def _process(self, frames: int, start_time: float) -> np.ndarray:
        return self._mix_inputs(frames, start_time)


class OscillatorNode(AudioNode):
    """Sine source with a phase-continuous ``frequency`` parameter."""

    def __init__(self, context: "AudioContext", frequency: float = 440.0) -> None:
        super().__init__(context)
        nyquist = context.sample_rate / 2.0
        self.frequency = AudioParam(context, frequency, -nyquist, nyquist)
        self._phase = 0.0
        self._start_time: Optional[float] = None
        self._stopped = False

    @property
    def started(self) -> bool:
        return self._start_time is not None

    @property
    def stopped(self) -> bool:
        return self._stopped

    def start(self, when: Optional[float] = None) -> None:
        if self._start_time is not None:
            raise InvalidStateError("Oscillator has already been started")
        self._start_time = self.context.current_time if when is None else float(when)

    def stop(self) -> None:
        if self._start_time is None:
            raise InvalidStateError("Oscillator has not been started")
        if self._stopped:
            raise InvalidStateError("Oscillator has already been stopped")
        self._stopped = True

    def _process(self, frames: int, start_time: float) -> np.ndarray:
        freqs = self.frequency._values(start_time, frames)
        out = np.zeros((frames, 1), dtype=np.float64)
        if self._start_time is None or self._stopped:
            return out
        first = int(math.ceil((self._start_time - start_time) * self.context.sample_rate - 1e-9))
        first = min(max(first, 0), frames)
        if first >= frames:
            return out
        increments = _TWO_PI * freqs[first:] / self.context.sample_rate
        phases = self._phase + np.concatenate(([0.0], np.cumsum(increments[:-1])))
        out[first:, 0] = np.sin(phases)
        self._phase = float((phases[-1] + increments[-1]) % _TWO_PI)
        return out


class GainNode(AudioNode):
    def __init__(self, context: "AudioContext", gain: float = 1.0) -> None:
        super().__init__(context)
        self.gain = AudioParam(context, gain)

    def _process(self, frames: int, start_time: float) -> np.ndarray:
        mix = self._mix_inputs(frames, start_time)
        return mix * self.gain._values(start_time, frames)[:, np.newaxis]


class StereoPannerNode(AudioNode):
    """Equal-power stereo panner; ``pan`` runs from -1 (left) to +1 (right)."""

    def __init__(self, context: "AudioContext", pan: float = 0.0) -> None:
        super().__init__(context)
        self.pan = AudioParam(context, pan, -1.0, 1.0)

    def _process(self, frames: int, start_time: float) -> np.ndarray:
        mix = self._mix_inputs(frames, start_time)
        pan = self.pan._values(start_time, frames)
        out = np.zeros((frames, 2), dtype=np.float64)
        if mix.shape[1] == 1:
            x = (pan + 1.0) / 2.0 * (math.pi / 2.0)
            out[:, 0] = mix[:, 0] * np.cos(x)
            out[:, 1] = mix[:, 0] * np.sin(x)
            return out
        left, right = mix[:, 0], mix[:, 1]
        x = np.where(pan <= 0.0, pan + 1.0, pan) * (math.pi / 2.0)
        gain_l, gain_r = np.cos(x), np.sin(x)
        out[:, 0] = np.where(pan <= 0.0, left + right * gain_l, left * gain_l)
        out[:, 1] = np.where(pan <= 0.0, right * gain_r, right + left * gain_r)
        return out


class AudioDestinationNode(AudioNode):
    def _process(self, frames: int, start_time: float) -> np.ndarray:
        mix = self._mix_inputs(frames, start_time)
        if mix.shape[1] == 1:
            mix = np.repeat(mix, 2, axis=1)
        return mix


class AudioContext:
    """Owns the destination node, the render clock and the Qt output stream."""

    def __init__(
        self,
        sample_rate: int = 44100,
        *,
        audio_output_factory: Optional[Callable[[object, Optional[object]], object]] = None,
        timer_factory: Optional[Callable[[], object]] = None,
        pump_interval_ms: int = 20,
        validate_format: bool = True,
    ) -> None:
        if audio_output_factory is None:
            if not QT_MULTIMEDIA_AVAILABLE:
                raise AudioUnavailable("Qt multimedia backend is not available")
            audio_output_factory = QAudioOutput
        if timer_factory is None and QT_MULTIMEDIA_AVAILABLE:
            timer_factory = QTimer

        self.sample_rate = int(sample_rate)
        self.state = SUSPENDED
        self.destination = AudioDestinationNode(self)
        self._validate_format = bool(validate_format)
        self._timer_factory = timer_factory
        self._pump_interval_ms = int(pump_interval_ms)
        self._frames_rendered = 0
        self._block_serial = 0
        self._sink = None
        self._timer = None

        fmt = self._build_format()
        try:
            self._audio_output = audio_output_factory(fmt, None)
        except Exception as exc:
            raise AudioUnavailable(f"Could not open audio output: {exc}") from exc
        logger.debug("Audio context created at %d Hz", self.sample_rate)

    @property
    def current_time(self) -> float:
        return self._frames_rendered / float(self.sample_rate)

    # ------------------------------------------------------------------
    # Node factories
    # ------------------------------------------------------------------
    def create_oscillator(self) -> OscillatorNode:
        self._ensure_open()
        return OscillatorNode(self)

    def create_gain(self) -> GainNode:
        self._ensure_open()
        return GainNode(self)

    def create_stereo_panner(self) -> StereoPannerNode:
        self._ensure_open()
        return StereoPannerNode(self)

    # ------------------------------------------------------------------
    # Stream control
    # ------------------------------------------------------------------
    def resume(self) -> None:
        """Start streaming to the output device; a no-op when already running."""
        self._ensure_open()
        if self.state == RUNNING:
            return
        if self._sink is None:
            try:
                self._sink = self._audio_output.start()
            except Exception as exc:
                raise AudioUnavailable(f"Could not start audio output: {exc}") from exc
            if self._sink is None:
                raise AudioUnavailable("Audio output did not provide a device to write to")
        elif hasattr(self._audio_output, "resume"):
            self._audio_output.resume()
        if self._timer is None and self._timer_factory is not None:
            self._timer = self._timer_factory()
            self._timer.timeout.connect(self.pump)
        if self._timer is not None:
            self._timer.start(self._pump_interval_ms)
        self.state = RUNNING
        self.pump()

    def suspend(self) -> None:
        if self.state != RUNNING:
            return
        if self._timer is not None:
            self._timer.stop()
        if hasattr(self._audio_output, "suspend"):
            self._audio_output.suspend()
        self.state = SUSPENDED

    def close(self) -> None:
        if self.state == CLOSED:
            return
        if self._timer is not None:
            self._timer.stop()
            self._timer = None
        self._audio_output.stop()
        self._sink = None
        self.state = CLOSED
        logger.debug("Audio context closed")

    def pump(self) -> int:
        """Render as many frames as the output can take and write them. Returns the frame count."""
        if self.state != RUNNING or self._sink is None:
            return 0
        frames = int(self._audio_output.bytesFree()) // _BYTES_PER_FRAME
        if frames <= 0:
            return 0
        self._sink.write(float_to_pcm(self.render(frames)))
        return frames

    def render(self, frames: int) -> np.ndarray:
        """Advance the clock by ``frames`` and return the stereo mix as float32."""
        start_time = self.current_time
        self._block_serial += 1
        out = self.destination._output(frames, start_time)
        self._frames_rendered += frames
        return out.astype(np.float32)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _ensure_open(self) -> None:
        if self.state == CLOSED:
            raise InvalidStateError("Audio context is closed")

    def _build_format(self):
        if QAudioFormat is None:
            return None
        fmt = QAudioFormat()
        fmt.setCodec("audio/pcm")
        fmt.setSampleRate(self.sample_rate)
        fmt.setSampleSize(16)
        fmt.setChannelCount(2)
        fmt.setByteOrder(QAudioFormat.LittleEndian)
        fmt.setSampleType(QAudioFormat.SignedInt)

        if self._validate_format and QAudioDeviceInfo is not None:
            device_info = QAudioDeviceInfo.defaultOutputDevice()
            if device_info.isNull() or not device_info.isFormatSupported(fmt):  # pragma: no cover - hardware dependent
                raise AudioUnavailable("Default output device does not support 16-bit stereo PCM")
        return fmt


_shared_context: Optional[AudioContext] = None


def get_shared_context(**kwargs) -> AudioContext:
    """Return the process-wide context, creating it on first use."""
    global _shared_context
    if _shared_context is None:
        _shared_context = AudioContext(**kwargs)
    return _shared_context


def reset_shared_context() -> None:
    global _shared_context
    if _shared_context is not None:
        _shared_context.close()
    _shared_context = None


__all__ = [
    "AudioContext",
    "AudioNode",
    "AudioParam",
    "GainNode",
    "OscillatorNode",
    "StereoPannerNode",
    "QT_MULTIMEDIA_AVAILABLE",
    "float_to_pcm",
    "get_shared_context",
    "reset_shared_context",
]
