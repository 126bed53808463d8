"""Shared fixtures: synthetic audio and a fake sounddevice backend."""

import threading

import numpy as np
import pytest

from chord_listener.core import Note

SAMPLE_RATE = 44100


def generate_tone(duration: float, frequencies, sr: int = SAMPLE_RATE, amplitudes=None) -> np.ndarray:
    """Sum of sine waves, 0.5 / n amplitude each unless given."""
    t = np.arange(int(duration * sr)) / sr
    if amplitudes is None:
        amplitudes = [0.5 / len(frequencies)] * len(frequencies)
    audio = np.zeros_like(t)
    for freq, amp in zip(frequencies, amplitudes):
        audio += amp * np.sin(2 * np.pi * freq * t)
    return audio.astype(np.float32)


def generate_chord(notes, duration: float, sr: int = SAMPLE_RATE, with_harmonics: bool = True) -> np.ndarray:
    """Chord of notes with a decaying overtone series and a short envelope."""
    t = np.arange(int(duration * sr)) / sr
    audio = np.zeros_like(t)
    for note in notes:
        audio += 0.1 * np.sin(2 * np.pi * note.frequency * t)
        if with_harmonics:
            audio += 0.03 * np.sin(2 * np.pi * note.frequency * 2 * t)
            audio += 0.015 * np.sin(2 * np.pi * note.frequency * 3 * t)

    # Envelope to avoid clicks
    envelope = np.ones_like(audio)
    attack = int(0.02 * sr)
    release = int(0.02 * sr)
    envelope[:attack] = np.linspace(0, 1, attack)
    envelope[-release:] = np.linspace(1, 0, release)
    return (audio * envelope).astype(np.float32)


def parse_notes(*names):
    return [Note.parse(name) for name in names]


# ============================================================================
# Stub chord scorers
# ============================================================================


class StaticScorer:
    """Returns fixed scores and records what it was asked."""

    def __init__(self, scores):
        self.scores = scores
        self.calls = []

    def score(self, features):
        self.calls.append(features)
        return dict(self.scores)


class BrokenScorer:
    def score(self, features):
        raise RuntimeError("weights corrupted")


# ============================================================================
# Fake audio backend
# ============================================================================


class FakePortAudioError(Exception):
    pass


class FakeInputStream:
    """Delivers pre-baked blocks from a separate thread, like PortAudio."""

    def __init__(self, backend, device, samplerate, channels, dtype, callback):
        self.backend = backend
        self.device = device
        self.samplerate = samplerate
        self.channels = channels
        self.dtype = dtype
        self.callback = callback
        self.closed = False
        self._thread = None

    def _run(self):
        for block in self.backend.blocks:
            self.callback(block, len(block), None, self.backend.status)

    def start(self):
        self.backend.events.append("start")
        if self.backend.fail_start:
            raise FakePortAudioError("Device unavailable [PaErrorCode -9985]")
        self._thread = threading.Thread(target=self._run)
        self._thread.start()

    def stop(self, ignore_errors=True):
        if self._thread is not None:
            self._thread.join()
        self.backend.events.append("stop")
        if self.backend.fail_stop:
            raise FakePortAudioError("Error stopping stream [PaErrorCode -9999]")

    def close(self, ignore_errors=True):
        self.closed = True
        self.backend.events.append("close")


class FakeSoundDevice:
    """Stand-in for the sounddevice module."""

    PortAudioError = FakePortAudioError

    def __init__(
        self,
        blocks=(),
        status=None,
        device_info=None,
        no_device=False,
        fail_settings=False,
        fail_start=False,
        fail_stop=False,
    ):
        self.blocks = list(blocks)
        self.status = status
        self.device_info = device_info or {
            "name": "Fake Microphone",
            "index": 3,
            "max_input_channels": 2,
            "default_samplerate": float(SAMPLE_RATE),
        }
        self.no_device = no_device
        self.fail_settings = fail_settings
        self.fail_start = fail_start
        self.fail_stop = fail_stop
        self.events = []
        self.streams = []

    def query_devices(self, kind=None):
        self.events.append("query")
        if self.no_device:
            raise FakePortAudioError("Error querying device -1")
        return dict(self.device_info)

    def check_input_settings(self, **kwargs):
        if self.fail_settings:
            raise FakePortAudioError("Invalid sample rate [PaErrorCode -9997]")

    def InputStream(self, **kwargs):
        stream = FakeInputStream(self, **kwargs)
        self.streams.append(stream)
        return stream


def stereo_blocks(audio: np.ndarray, block_size: int = 1024):
    """Split mono audio into (frames, 2) float32 blocks."""
    stereo = np.stack([audio, audio], axis=1).astype(np.float32)
    return [stereo[i:i + block_size] for i in range(0, len(stereo), block_size)]


class NoDeviceAccess:
    """Backend that fails the test on any use."""

    def __getattr__(self, name):
        raise AssertionError(f"audio backend touched: {name}")


@pytest.fixture
def fake_backend():
    """A working fake device delivering 0.25s of A4."""
    return FakeSoundDevice(blocks=stereo_blocks(generate_tone(0.25, [440.0])))
