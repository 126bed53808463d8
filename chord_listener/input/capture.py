"""Microphone capture - record a fixed-length window from the default input.

The PortAudio callback runs on its own thread and is the only writer of the
session's SampleBuffer. The awaiting caller becomes the only reader once the
stream has been stopped and closed, which revokes the callback for good.
"""

import asyncio
import logging
import threading
from dataclasses import dataclass
from typing import List, Optional, Tuple

import numpy as np

from ..core.config import AnalysisConfig, DEFAULT_CONFIG
from ..core.errors import (
    ConfigUnavailable,
    DeviceStreamError,
    DeviceUnavailable,
    DurationTooShort,
    InvalidDuration,
)

logger = logging.getLogger(__name__)

# One capture at a time may own the input device.
_DEVICE_LOCK = threading.Lock()


@dataclass(frozen=True)
class AudioWindow:
    """Mono samples plus the rate they were recorded at."""

    samples: np.ndarray
    sample_rate: int

    @property
    def duration(self) -> float:
        """Window length in seconds."""
        return len(self.samples) / self.sample_rate

    @property
    def resolution(self) -> float:
        """Frequency resolution (Hz) of an unpadded transform of this window."""
        if len(self.samples) == 0:
            return float("inf")
        return self.sample_rate / len(self.samples)

    @classmethod
    def from_samples(cls, samples, duration_seconds: float) -> "AudioWindow":
        """
        Build a window from raw samples covering ``duration_seconds``.

        The sample rate is implied by the sample count and the duration.

        Raises:
            InvalidDuration: If duration_seconds <= 0
        """
        if not duration_seconds > 0:
            raise InvalidDuration(duration_seconds)

        data = np.asarray(samples, dtype=np.float32)
        if data.ndim > 1:
            data = data.mean(axis=1)

        sample_rate = max(1, int(round(len(data) / duration_seconds)))
        return cls(samples=data, sample_rate=sample_rate)


class SampleBuffer:
    """Single-writer accumulator drained exactly once.

    ``write`` has the sounddevice callback signature and is handed to the
    stream. ``seal`` is called after the stream is closed; from then on
    writes are rejected and ``drain`` moves the samples out.
    """

    def __init__(self, channels: int = 1):
        self.channels = channels
        self._blocks: List[np.ndarray] = []
        self._status: Optional[str] = None
        self._sealed = False
        self._drained = False

    def write(self, indata, frames, time, status) -> None:
        """Append one block delivered by the audio callback."""
        if self._sealed:
            raise RuntimeError("SampleBuffer is sealed; the writer was revoked")
        if status and self._status is None:
            self._status = str(status)
        # PortAudio reuses indata between callbacks
        self._blocks.append(np.array(indata, dtype=np.float32, copy=True))

    def seal(self) -> None:
        """Revoke writer access."""
        self._sealed = True

    @property
    def sealed(self) -> bool:
        return self._sealed

    @property
    def stream_error(self) -> Optional[str]:
        """First device status reported by the callback, if any."""
        return self._status

    @property
    def frames(self) -> int:
        return sum(len(block) for block in self._blocks)

    def drain(self) -> np.ndarray:
        """
        Move the accumulated samples out as a mono float32 array.

        Raises:
            RuntimeError: If the buffer still has a writer or was already drained
        """
        if not self._sealed:
            raise RuntimeError("Cannot drain a SampleBuffer that still has a writer")
        if self._drained:
            raise RuntimeError("SampleBuffer was already drained")

        self._drained = True
        blocks, self._blocks = self._blocks, []

        if not blocks:
            return np.zeros(0, dtype=np.float32)

        data = np.concatenate(blocks, axis=0)
        if data.ndim > 1:
            data = data.mean(axis=1)
        return data.astype(np.float32, copy=False)


def _load_backend():
    """Import sounddevice, mapping a missing PortAudio library to DeviceUnavailable."""
    try:
        import sounddevice
    except OSError as exc:
        raise DeviceUnavailable("PortAudio library not available.") from exc
    return sounddevice


class CaptureSession:
    """One fixed-duration recording from the default input device."""

    def __init__(
        self,
        duration_seconds: float,
        config: AnalysisConfig = DEFAULT_CONFIG,
        backend=None,
    ):
        """
        Initialize CaptureSession.

        Args:
            duration_seconds: Length of the recording in seconds
            config: Analysis configuration (provides the minimum length)
            backend: sounddevice-compatible module (default: sounddevice)

        Raises:
            DurationTooShort: If duration_seconds is below the minimum
        """
        if not duration_seconds >= config.min_capture_seconds:
            raise DurationTooShort(duration_seconds, config.min_capture_seconds)

        self.duration_seconds = float(duration_seconds)
        self.config = config
        self._backend = backend

    def _default_input(self, sd) -> Tuple[int, int, int]:
        """Resolve the default input device and its default stream settings."""
        try:
            info = sd.query_devices(kind="input")
        except (sd.PortAudioError, ValueError) as exc:
            raise DeviceUnavailable("Failed to get default input device.") from exc

        channels = int(info.get("max_input_channels", 0))
        sample_rate = int(info.get("default_samplerate") or 0)
        if channels < 1 or sample_rate <= 0:
            raise ConfigUnavailable(
                f"Device '{info.get('name')}' reports no usable input configuration."
            )

        device = info.get("index")
        try:
            sd.check_input_settings(
                device=device,
                channels=channels,
                samplerate=sample_rate,
                dtype="float32",
            )
        except (sd.PortAudioError, ValueError) as exc:
            raise ConfigUnavailable("Could not get default input config.") from exc

        logger.info(
            "Recording from '%s' at %d Hz, %d channel(s)",
            info.get("name"), sample_rate, channels,
        )
        return device, sample_rate, channels

    async def record(self) -> AudioWindow:
        """
        Record for exactly ``duration_seconds`` of wall-clock time.

        Returns:
            AudioWindow with the mono-reduced samples

        Raises:
            DeviceUnavailable: No input device, or the device is already in use
            ConfigUnavailable: The device cannot report a supported format
            DeviceStreamError: The device reported an error while recording
        """
        if not _DEVICE_LOCK.acquire(blocking=False):
            raise DeviceUnavailable("Input device is already in use by another capture.")

        try:
            sd = self._backend or _load_backend()
            device, sample_rate, channels = self._default_input(sd)
            buffer = SampleBuffer(channels)

            try:
                stream = sd.InputStream(
                    device=device,
                    samplerate=sample_rate,
                    channels=channels,
                    dtype="float32",
                    callback=buffer.write,
                )
            except (sd.PortAudioError, ValueError) as exc:
                raise ConfigUnavailable("Could not open input stream.") from exc

            try:
                try:
                    stream.start()
                    await asyncio.sleep(self.duration_seconds)
                finally:
                    try:
                        stream.stop()
                    finally:
                        try:
                            stream.close()
                        finally:
                            buffer.seal()
            except sd.PortAudioError as exc:
                raise DeviceStreamError(f"Input stream failed: {exc}") from exc
        finally:
            _DEVICE_LOCK.release()

        if buffer.stream_error is not None:
            logger.warning("Input stream reported: %s", buffer.stream_error)
            raise DeviceStreamError(f"Input stream reported: {buffer.stream_error}")

        samples = buffer.drain()
        logger.debug("Captured %d samples at %d Hz", len(samples), sample_rate)
        return AudioWindow(samples=samples, sample_rate=sample_rate)
