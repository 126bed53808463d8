"""
Configuration for the signal-to-chord pipeline.

The noise floor and harmonic tolerance have no closed-form derivation;
they are tunables calibrated against recordings. Defaults below work for
guitar and piano at typical microphone levels.
"""

from dataclasses import dataclass, field
from typing import Tuple

from .constants import MIN_CAPTURE_SECONDS

BLEND_MODES = frozenset({"fallback", "ensemble"})


@dataclass(frozen=True)
class AnalysisConfig:
    """Tunable parameters for analysis, classification and recognition.

    Attributes:
        min_capture_seconds: Shortest capture window accepted (default: 0.2)
        min_frequency: Lowest frequency searched for peaks in Hz (default: 20)
        max_frequency: Highest frequency searched for peaks in Hz (default: 10000)
        zero_padding: FFT length is the next power of two >= padding * samples (default: 4)
        window: Taper applied before the transform, any scipy window name (default: "hann")
        relative_threshold: Fraction of the strongest in-band bin a peak must reach (default: 0.1)
        noise_floor_factor: Multiple of the mean in-band magnitude a peak must exceed (default: 4.0)
        min_magnitude: Absolute amplitude floor, rejects silence (default: 1e-4)
        max_peaks: Strongest peaks kept per window (default: 24)
        harmonic_tolerance_cents: Distance from n * f0 still treated as an overtone (default: 50)
        harmonic_ratios: Overtone multiples checked (default: 2-8)
        harmonic_magnitude_ratio: An overtone must be weaker than this fraction of
            its fundamental; louder peaks are kept as notes (default: 0.6)
        max_missing_tones: Template tones allowed to be absent from a match; the
            root is one of them, so 0 requires a sounded root (default: 0)
        confidence_threshold: Rule score below which the learned model is consulted (default: 0.75)
        blend_mode: "fallback" or "ensemble" (default: "fallback")
        model_weight: Weight of model probability in ensemble mode (default: 0.5)
    """

    min_capture_seconds: float = MIN_CAPTURE_SECONDS
    min_frequency: float = 20.0
    max_frequency: float = 10000.0
    zero_padding: int = 4
    window: str = "hann"
    relative_threshold: float = 0.1
    noise_floor_factor: float = 4.0
    min_magnitude: float = 1e-4
    max_peaks: int = 24
    harmonic_tolerance_cents: float = 50.0
    harmonic_ratios: Tuple[int, ...] = field(default=(2, 3, 4, 5, 6, 7, 8))
    harmonic_magnitude_ratio: float = 0.6
    max_missing_tones: int = 0
    confidence_threshold: float = 0.75
    blend_mode: str = "fallback"
    model_weight: float = 0.5

    def __post_init__(self) -> None:
        """Validate configuration parameters."""
        if self.min_capture_seconds <= 0:
            raise ValueError(
                f"min_capture_seconds must be positive, got {self.min_capture_seconds}"
            )
        if not 0 < self.min_frequency < self.max_frequency:
            raise ValueError(
                f"frequency band must satisfy 0 < min < max, "
                f"got ({self.min_frequency}, {self.max_frequency})"
            )
        if self.zero_padding < 1:
            raise ValueError(f"zero_padding must be >= 1, got {self.zero_padding}")
        if not 0.0 <= self.relative_threshold < 1.0:
            raise ValueError(
                f"relative_threshold must be in [0, 1), got {self.relative_threshold}"
            )
        if self.noise_floor_factor < 0 or self.min_magnitude < 0:
            raise ValueError("noise floor parameters must be non-negative")
        if self.max_peaks < 1:
            raise ValueError(f"max_peaks must be positive, got {self.max_peaks}")
        if self.harmonic_tolerance_cents < 0:
            raise ValueError(
                f"harmonic_tolerance_cents must be non-negative, "
                f"got {self.harmonic_tolerance_cents}"
            )
        if any(ratio < 2 for ratio in self.harmonic_ratios):
            raise ValueError(f"harmonic_ratios must all be >= 2, got {self.harmonic_ratios}")
        if not self.harmonic_magnitude_ratio > 0:
            raise ValueError(
                f"harmonic_magnitude_ratio must be positive, "
                f"got {self.harmonic_magnitude_ratio}"
            )
        if self.max_missing_tones < 0:
            raise ValueError(
                f"max_missing_tones must be non-negative, got {self.max_missing_tones}"
            )
        if not 0.0 <= self.confidence_threshold <= 1.0:
            raise ValueError(
                f"confidence_threshold must be in [0, 1], got {self.confidence_threshold}"
            )
        if self.blend_mode not in BLEND_MODES:
            raise ValueError(
                f"Unknown blend_mode {self.blend_mode!r}, "
                f"valid options: {sorted(BLEND_MODES)}"
            )
        if not 0.0 <= self.model_weight <= 1.0:
            raise ValueError(f"model_weight must be in [0, 1], got {self.model_weight}")


DEFAULT_CONFIG = AnalysisConfig()
"""Default configuration used by every entry point."""
