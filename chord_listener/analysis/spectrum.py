"""Spectral analysis - magnitude spectrum and peak extraction.

Frequency resolution of a window is ``sample_rate / len(samples)``. Callers
should pick a window long enough that this separates neighbouring
semitones at the lowest pitch of interest (about 5 Hz at 82 Hz, the low E
of a guitar). Zero padding and peak interpolation refine the estimate of a
resolved peak but cannot separate two unresolved tones.
"""

import logging
from dataclasses import dataclass
from typing import List, Tuple

import numpy as np
from scipy.signal import get_window

from ..core.config import AnalysisConfig, DEFAULT_CONFIG
from ..input.capture import AudioWindow

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SpectralPeak:
    """A local maximum of the magnitude spectrum."""

    frequency: float  # Hz
    magnitude: float  # Linear amplitude (a full-scale sine is ~1.0)


def _next_power_of_two(n: int) -> int:
    return 1 << max(0, int(n - 1).bit_length())


class SpectralAnalyzer:
    """Transforms an AudioWindow into spectral peaks."""

    def __init__(self, config: AnalysisConfig = DEFAULT_CONFIG):
        self.config = config

    def spectrum(self, window: AudioWindow) -> Tuple[np.ndarray, np.ndarray]:
        """
        Compute the one-sided magnitude spectrum of a window.

        The samples are DC-corrected, tapered and zero padded. Magnitudes are
        scaled so that a sine of amplitude A peaks at about A.

        Returns:
            Tuple of (frequencies in Hz, magnitudes)
        """
        samples = np.asarray(window.samples, dtype=np.float64)
        n = len(samples)
        if n < 3:
            return np.zeros(0), np.zeros(0)

        samples = samples - samples.mean()
        taper = get_window(self.config.window, n)
        n_fft = _next_power_of_two(n * self.config.zero_padding)

        magnitudes = np.abs(np.fft.rfft(samples * taper, n=n_fft)) * (2.0 / taper.sum())
        freqs = np.fft.rfftfreq(n_fft, d=1.0 / window.sample_rate)
        return freqs, magnitudes

    def noise_floor(self, magnitudes: np.ndarray) -> float:
        """Threshold a bin must reach to count as a peak."""
        if magnitudes.size == 0:
            return float("inf")
        return max(
            self.config.min_magnitude,
            self.config.relative_threshold * float(magnitudes.max()),
            self.config.noise_floor_factor * float(magnitudes.mean()),
        )

    def analyze(self, window: AudioWindow) -> List[SpectralPeak]:
        """
        Extract the salient peaks of a window.

        A bin is a peak if it is a local maximum inside the configured band
        and reaches the noise floor. Of two equal neighbouring bins only the
        lower one is a peak.

        Args:
            window: Audio to analyze

        Returns:
            Peaks sorted by ascending frequency (empty for silence)
        """
        freqs, magnitudes = self.spectrum(window)
        if magnitudes.size < 3:
            return []

        band = (freqs >= self.config.min_frequency) & (freqs <= self.config.max_frequency)
        if not band.any():
            return []

        threshold = self.noise_floor(magnitudes[band])

        inner = magnitudes[1:-1]
        is_peak = (
            (inner > magnitudes[:-2])
            & (inner >= magnitudes[2:])
            & (inner >= threshold)
            & band[1:-1]
        )
        bins = np.flatnonzero(is_peak) + 1

        if len(bins) > self.config.max_peaks:
            strongest = np.argsort(-magnitudes[bins], kind="stable")[: self.config.max_peaks]
            bins = np.sort(bins[strongest])

        bin_hz = freqs[1] - freqs[0]
        peaks = [self._interpolate(magnitudes, int(k), bin_hz) for k in bins]

        logger.debug(
            "Found %d peaks above %.2e (resolution %.2f Hz)",
            len(peaks), threshold, window.resolution,
        )
        return peaks

    @staticmethod
    def _interpolate(magnitudes: np.ndarray, k: int, bin_hz: float) -> SpectralPeak:
        """Refine a peak bin with a parabola through the log magnitudes."""
        alpha, beta, gamma = np.log(np.maximum(magnitudes[k - 1:k + 2], 1e-12))
        denominator = alpha - 2.0 * beta + gamma

        offset = 0.0
        if denominator < 0:
            offset = 0.5 * (alpha - gamma) / denominator

        frequency = (k + offset) * bin_hz
        magnitude = float(np.exp(beta - 0.25 * (alpha - gamma) * offset))
        return SpectralPeak(frequency=float(frequency), magnitude=magnitude)
