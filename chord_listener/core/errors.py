"""Error taxonomy for the capture-to-chord pipeline.

Each failure cause is its own exception class so callers can branch on
type. Every error carries the pipeline ``stage`` it came from.
"""

from typing import Optional


class ChordListenerError(Exception):
    """Base class for all pipeline errors."""

    stage = "pipeline"

    def __init__(self, message: str, stage: Optional[str] = None):
        super().__init__(message)
        if stage is not None:
            self.stage = stage

    def __str__(self) -> str:
        return f"[{self.stage}] {super().__str__()}"


# Capture layer


class CaptureError(ChordListenerError):
    """Raised when audio cannot be recorded."""

    stage = "capture"


class DurationTooShort(CaptureError):
    """Requested capture window is below the minimum length."""

    def __init__(self, duration: float, minimum: float):
        super().__init__(
            f"Listening length must be at least {minimum} seconds (got {duration})."
        )
        self.duration = duration
        self.minimum = minimum


class DeviceUnavailable(CaptureError):
    """No default input device exists (or the audio backend is missing)."""


class ConfigUnavailable(CaptureError):
    """The input device cannot report a usable stream configuration."""


class DeviceStreamError(CaptureError):
    """The device reported an error (e.g. overflow) while recording."""


# Classification layer


class ClassificationError(ChordListenerError):
    """Raised when samples cannot be turned into notes."""

    stage = "classify"


class EmptySpectrum(ClassificationError):
    """No spectral peak rose above the noise floor."""


class InvalidDuration(ClassificationError):
    """Duration must be strictly positive."""

    def __init__(self, duration: float):
        super().__init__(f"Duration must be positive (got {duration}).")
        self.duration = duration


class InvalidPitchIndex(ClassificationError):
    """Pitch class index outside 0-11."""

    def __init__(self, index):
        super().__init__(f"Invalid pitch index: {index!r} (expected 0-11).")
        self.index = index


# Collaborator layer


class InferenceUnavailable(ChordListenerError):
    """The learned model could not produce a ranking."""

    stage = "inference"
