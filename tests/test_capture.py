"""Tests for microphone capture against a fake audio backend."""

import asyncio
import time

import numpy as np
import pytest

from chord_listener.core import (
    AnalysisConfig,
    CaptureError,
    ConfigUnavailable,
    DeviceStreamError,
    DeviceUnavailable,
    DurationTooShort,
    InvalidDuration,
    Note,
    PitchClass,
)
from chord_listener.input import AudioWindow, CaptureSession, SampleBuffer
from chord_listener.input import capture as capture_module
from chord_listener.pipeline import (
    capture_audio,
    capture_audio_async,
    capture_chords,
    capture_notes,
)

from conftest import (
    SAMPLE_RATE,
    FakeSoundDevice,
    NoDeviceAccess,
    generate_chord,
    generate_tone,
    parse_notes,
    stereo_blocks,
)


class TestSampleBuffer:
    """Tests for the single-writer sample buffer."""

    def test_drain_mixes_to_mono(self):
        buffer = SampleBuffer(channels=2)
        buffer.write(np.array([[1.0, 0.0], [0.5, 0.5]], dtype=np.float32), 2, None, None)
        buffer.write(np.array([[0.0, -1.0]], dtype=np.float32), 1, None, None)
        buffer.seal()

        samples = buffer.drain()
        assert samples.dtype == np.float32
        np.testing.assert_allclose(samples, [0.5, 0.5, -0.5])

    def test_block_is_copied(self):
        buffer = SampleBuffer()
        block = np.ones((4, 1), dtype=np.float32)
        buffer.write(block, 4, None, None)
        block[:] = 0.0
        buffer.seal()

        np.testing.assert_array_equal(buffer.drain(), np.ones(4))

    def test_write_after_seal(self):
        buffer = SampleBuffer()
        assert not buffer.sealed
        buffer.seal()
        assert buffer.sealed
        with pytest.raises(RuntimeError):
            buffer.write(np.zeros((1, 1)), 1, None, None)

    def test_drain_requires_seal(self):
        buffer = SampleBuffer()
        with pytest.raises(RuntimeError):
            buffer.drain()

    def test_drain_once(self):
        buffer = SampleBuffer()
        buffer.write(np.zeros((8, 1)), 8, None, None)
        buffer.seal()
        buffer.drain()
        with pytest.raises(RuntimeError):
            buffer.drain()

    def test_first_status_kept(self):
        buffer = SampleBuffer()
        buffer.write(np.zeros((1, 1)), 1, None, None)
        buffer.write(np.zeros((1, 1)), 1, None, "input overflow")
        buffer.write(np.zeros((1, 1)), 1, None, "input underflow")

        assert buffer.stream_error == "input overflow"
        assert buffer.frames == 3

    def test_empty_drain(self):
        buffer = SampleBuffer()
        buffer.seal()
        assert len(buffer.drain()) == 0


class TestAudioWindow:
    """Tests for AudioWindow construction."""

    def test_sample_rate_from_duration(self):
        window = AudioWindow.from_samples(np.zeros(22050), 0.5)
        assert window.sample_rate == 44100
        assert window.duration == pytest.approx(0.5)
        assert window.resolution == pytest.approx(2.0)

    def test_multichannel_frames_averaged(self):
        window = AudioWindow.from_samples(np.array([[1.0, 0.0], [0.0, 1.0]]), 1.0)
        np.testing.assert_allclose(window.samples, [0.5, 0.5])

    @pytest.mark.parametrize("duration", [0.0, -0.5])
    def test_invalid_duration(self, duration):
        with pytest.raises(InvalidDuration):
            AudioWindow.from_samples(np.zeros(100), duration)


class TestDurationCheck:
    """Too-short requests fail before the device is touched."""

    @pytest.mark.parametrize("duration", [0.0, 0.1, 0.199, -1.0])
    def test_session_rejects_short_duration(self, duration):
        with pytest.raises(DurationTooShort) as exc_info:
            CaptureSession(duration, backend=NoDeviceAccess())
        assert exc_info.value.minimum == pytest.approx(0.2)
        assert exc_info.value.stage == "capture"

    def test_capture_notes_rejects_short_duration(self):
        with pytest.raises(DurationTooShort):
            capture_notes(0.1, backend=NoDeviceAccess())

    def test_capture_audio_rejects_short_duration(self):
        with pytest.raises(CaptureError):
            capture_audio(0.05, backend=NoDeviceAccess())

    def test_minimum_is_configurable(self):
        config = AnalysisConfig(min_capture_seconds=1.0)
        with pytest.raises(DurationTooShort):
            CaptureSession(0.5, config=config, backend=NoDeviceAccess())


class TestCaptureSession:
    """Recording through the fake backend."""

    def test_capture_notes(self, fake_backend):
        notes = capture_notes(0.2, backend=fake_backend)
        assert notes == [Note(PitchClass.A, 4)]

    def test_capture_audio(self, fake_backend):
        window = capture_audio(0.2, backend=fake_backend)

        assert window.sample_rate == SAMPLE_RATE
        assert window.samples.ndim == 1
        assert len(window.samples) == int(0.25 * SAMPLE_RATE)

    def test_stream_settings(self, fake_backend):
        capture_audio(0.2, backend=fake_backend)
        stream = fake_backend.streams[0]

        assert stream.device == 3
        assert stream.samplerate == SAMPLE_RATE
        assert stream.channels == 2
        assert stream.dtype == "float32"

    def test_stream_stopped_and_closed(self, fake_backend):
        capture_audio(0.2, backend=fake_backend)

        assert fake_backend.events == ["query", "start", "stop", "close"]
        assert fake_backend.streams[0].closed

    def test_async_capture(self, fake_backend):
        window = asyncio.run(capture_audio_async(0.2, backend=fake_backend))
        assert len(window.samples) > 0

    def test_capture_chords(self):
        audio = generate_chord(parse_notes("C4", "E4", "G4"), 0.5)
        backend = FakeSoundDevice(blocks=stereo_blocks(audio))

        notes, ranking = capture_chords(0.2, backend=backend)

        assert notes == parse_notes("C4", "E4", "G4")
        assert ranking.top.symbol == "C"

    def test_no_input_device(self):
        backend = FakeSoundDevice(no_device=True)
        with pytest.raises(DeviceUnavailable):
            capture_notes(0.2, backend=backend)
        assert backend.streams == []

    def test_device_without_input_channels(self):
        backend = FakeSoundDevice(device_info={
            "name": "Speakers",
            "index": 1,
            "max_input_channels": 0,
            "default_samplerate": 48000.0,
        })
        with pytest.raises(ConfigUnavailable):
            capture_notes(0.2, backend=backend)

    def test_unsupported_settings(self):
        with pytest.raises(ConfigUnavailable):
            capture_notes(0.2, backend=FakeSoundDevice(fail_settings=True))

    def test_stream_status_is_an_error(self):
        backend = FakeSoundDevice(
            blocks=stereo_blocks(generate_tone(0.25, [440.0])),
            status="input overflow",
        )
        with pytest.raises(DeviceStreamError, match="input overflow"):
            capture_notes(0.2, backend=backend)
        assert backend.events[-2:] == ["stop", "close"]

    def test_start_failure_closes_stream(self):
        backend = FakeSoundDevice(fail_start=True)
        with pytest.raises(DeviceStreamError):
            capture_notes(0.2, backend=backend)

        assert backend.streams[0].closed
        assert backend.events[-2:] == ["stop", "close"]

    def test_stop_failure_still_closes_stream(self, fake_backend):
        backend = FakeSoundDevice(
            blocks=stereo_blocks(generate_tone(0.25, [440.0])),
            fail_stop=True,
        )
        with pytest.raises(DeviceStreamError, match="Error stopping stream"):
            capture_audio(0.2, backend=backend)

        assert backend.streams[0].closed
        assert backend.events[-2:] == ["stop", "close"]
        # The device is free again
        assert capture_notes(0.2, backend=fake_backend) == [Note(PitchClass.A, 4)]

    def test_waits_for_full_duration(self, monkeypatch, fake_backend):
        waits = []

        async def fake_sleep(seconds):
            waits.append(seconds)
            fake_backend.events.append("sleep")

        monkeypatch.setattr(capture_module.asyncio, "sleep", fake_sleep)
        capture_audio(0.2, backend=fake_backend)

        assert waits == [0.2]
        assert fake_backend.events == ["query", "start", "sleep", "stop", "close"]

    def test_wall_clock_duration(self, fake_backend):
        started = time.monotonic()
        capture_audio(0.3, backend=fake_backend)
        assert time.monotonic() - started >= 0.3

    def test_device_lock_released_after_failure(self, fake_backend):
        with pytest.raises(DeviceStreamError):
            capture_notes(0.2, backend=FakeSoundDevice(fail_start=True))
        assert capture_notes(0.2, backend=fake_backend) == [Note(PitchClass.A, 4)]

    def test_device_busy(self, fake_backend):
        assert capture_module._DEVICE_LOCK.acquire(blocking=False)
        try:
            with pytest.raises(DeviceUnavailable):
                capture_audio(0.2, backend=fake_backend)
        finally:
            capture_module._DEVICE_LOCK.release()
        assert fake_backend.events == []

    def test_default_backend_is_loaded_lazily(self, monkeypatch, fake_backend):
        monkeypatch.setattr(capture_module, "_load_backend", lambda: fake_backend)
        assert capture_notes(0.2) == [Note(PitchClass.A, 4)]

    def test_missing_portaudio(self, monkeypatch):
        def no_portaudio():
            raise DeviceUnavailable("PortAudio library not available.")

        monkeypatch.setattr(capture_module, "_load_backend", no_portaudio)
        with pytest.raises(DeviceUnavailable):
            capture_notes(0.2)
