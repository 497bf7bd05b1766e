import math

import numpy as np
import pytest

import src.audio.graph as graph
from src.audio.graph import AudioParam, float_to_pcm
from src.errors import AudioUnavailable, InvalidStateError

from conftest import FakeAudioOutput, FakeTimer, make_context


def _peak_hz(signal, sample_rate):
    spectrum = np.abs(np.fft.rfft(signal))
    freqs = np.fft.rfftfreq(signal.shape[0], 1.0 / sample_rate)
    return freqs[int(np.argmax(spectrum))]


def test_empty_graph_renders_silence(context):
    block = context.render(256)
    assert block.shape == (256, 2)
    assert block.dtype == np.float32
    assert not block.any()
    assert context.current_time == pytest.approx(256 / 8000)


def test_oscillator_renders_sine_at_its_frequency(context):
    osc = context.create_oscillator()
    osc.frequency.value = 440.0
    osc.connect(context.destination)
    osc.start()

    block = context.render(8000)

    assert _peak_hz(block[:, 0], 8000) == pytest.approx(440.0)
    # Mono source is upmixed to both channels at the destination
    np.testing.assert_allclose(block[:, 0], block[:, 1])
    assert block[0, 0] == pytest.approx(0.0)


def test_oscillator_phase_is_continuous_across_blocks(context):
    osc = context.create_oscillator()
    osc.frequency.value = 100.0
    osc.connect(context.destination)
    osc.start()

    joined = np.concatenate([context.render(100), context.render(100)])
    expected = np.sin(2 * math.pi * 100.0 * np.arange(200) / 8000)
    np.testing.assert_allclose(joined[:, 0], expected, atol=1e-5)


def test_oscillator_stop_rules_mirror_platform(context):
    osc = context.create_oscillator()
    with pytest.raises(InvalidStateError):
        osc.stop()
    osc.start()
    with pytest.raises(InvalidStateError):
        osc.start()
    osc.stop()
    with pytest.raises(InvalidStateError):
        osc.stop()


def test_stopped_oscillator_is_silent(context):
    osc = context.create_oscillator()
    osc.connect(context.destination)
    osc.start()
    context.render(64)
    osc.stop()
    assert not context.render(64).any()


@pytest.mark.parametrize(
    "pan, left, right",
    [(-1.0, 1.0, 0.0), (1.0, 0.0, 1.0), (0.0, math.sqrt(0.5), math.sqrt(0.5))],
)
def test_stereo_panner_equal_power_on_mono_input(context, pan, left, right):
    osc = context.create_oscillator()
    osc.frequency.value = 1000.0
    panner = context.create_stereo_panner()
    panner.pan.value = pan
    osc.connect(panner)
    panner.connect(context.destination)
    osc.start()

    block = context.render(800)

    assert np.max(np.abs(block[:, 0])) == pytest.approx(left, abs=1e-3)
    assert np.max(np.abs(block[:, 1])) == pytest.approx(right, abs=1e-3)


def test_gain_scales_signal_and_disconnect_removes_it(context):
    osc = context.create_oscillator()
    osc.frequency.value = 1000.0
    gain = context.create_gain()
    gain.gain.value = 0.25
    osc.connect(gain)
    gain.connect(context.destination)
    osc.start()

    assert np.max(np.abs(context.render(800))) == pytest.approx(0.25, abs=1e-3)

    gain.disconnect()
    assert not gain.connected
    assert not context.render(800).any()


def test_set_target_at_time_approaches_exponentially(context):
    param = AudioParam(context, 1.0)
    param.set_target_at_time(0.0, 0.0, 0.1)

    values = param._values(0.0, 8000)

    assert values[0] == pytest.approx(1.0)
    assert values[800] == pytest.approx(math.exp(-1.0), rel=1e-6)
    assert np.all(np.diff(values) < 0)
    assert param.value == pytest.approx(values[-1])


def test_set_value_at_time_applies_at_the_scheduled_frame(context):
    param = AudioParam(context, 0.0)
    param.set_value_at_time(2.0, 0.01)

    values = param._values(0.0, 160)

    assert values[79] == pytest.approx(0.0)
    assert values[80] == pytest.approx(2.0)


def test_param_clamps_to_its_range(context):
    panner = context.create_stereo_panner()
    panner.pan.value = 5.0
    assert panner.pan.value == 1.0


def test_resume_starts_stream_and_pump_writes_pcm(context):
    output = context._audio_output
    context.resume()
    assert context.state == graph.RUNNING
    assert output.start_calls == 1
    assert context._timer.active
    # resume primes the device once
    assert len(output.sink.chunks) == 1
    assert len(output.sink.chunks[0]) == output.free_bytes

    output.free_bytes = 400
    context._timer.timeout.emit()
    assert len(output.sink.chunks[-1]) == 400

    context.resume()
    assert output.start_calls == 1


def test_pump_is_idle_while_suspended(context):
    context.resume()
    context.suspend()
    assert context._audio_output.suspended
    assert context.pump() == 0


def test_closed_context_refuses_new_nodes(context):
    context.close()
    assert context._audio_output.stopped
    with pytest.raises(InvalidStateError):
        context.create_oscillator()


def test_failing_output_factory_reports_audio_unavailable():
    def broken(fmt, parent=None):
        raise OSError("no device")

    with pytest.raises(AudioUnavailable):
        graph.AudioContext(audio_output_factory=broken, timer_factory=FakeTimer, validate_format=False)


def test_missing_device_on_resume_reports_audio_unavailable():
    class NoDeviceOutput(FakeAudioOutput):
        def start(self):
            return None

    ctx = graph.AudioContext(
        audio_output_factory=NoDeviceOutput, timer_factory=FakeTimer, validate_format=False
    )
    with pytest.raises(AudioUnavailable):
        ctx.resume()


def test_shared_context_is_created_once(monkeypatch):
    monkeypatch.setattr(graph, "_shared_context", None)
    created = []

    class CountingContext(graph.AudioContext):
        def __init__(self, **kwargs):
            created.append(kwargs)
            super().__init__(
                audio_output_factory=FakeAudioOutput, timer_factory=FakeTimer, validate_format=False
            )

    monkeypatch.setattr(graph, "AudioContext", CountingContext)

    first = graph.get_shared_context()
    second = graph.get_shared_context()

    assert first is second
    assert len(created) == 1
    graph.reset_shared_context()
    assert graph._shared_context is None


def test_float_to_pcm_clips_and_interleaves():
    pcm = float_to_pcm(np.array([[2.0, -2.0], [0.5, 0.0]], dtype=np.float32))
    values = np.frombuffer(pcm, dtype="<i2")
    assert values.tolist() == [32767, -32767, 16384, 0]
