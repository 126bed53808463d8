"""Core types and constants for Chord Listener."""

from .pitch import PitchClass, ALL_PITCHES
from .note import Note, ALL_PITCH_NOTES
from .config import AnalysisConfig, DEFAULT_CONFIG
from .constants import (
    PITCH_NAMES,
    BASE_FREQUENCIES,
    MIN_CAPTURE_SECONDS,
    DEFAULT_CAPTURE_SECONDS,
)
from .errors import (
    ChordListenerError,
    CaptureError,
    DurationTooShort,
    DeviceUnavailable,
    ConfigUnavailable,
    DeviceStreamError,
    ClassificationError,
    EmptySpectrum,
    InvalidDuration,
    InvalidPitchIndex,
    InferenceUnavailable,
)

__all__ = [
    "PitchClass",
    "ALL_PITCHES",
    "Note",
    "ALL_PITCH_NOTES",
    "AnalysisConfig",
    "DEFAULT_CONFIG",
    "PITCH_NAMES",
    "BASE_FREQUENCIES",
    "MIN_CAPTURE_SECONDS",
    "DEFAULT_CAPTURE_SECONDS",
    "ChordListenerError",
    "CaptureError",
    "DurationTooShort",
    "DeviceUnavailable",
    "ConfigUnavailable",
    "DeviceStreamError",
    "ClassificationError",
    "EmptySpectrum",
    "InvalidDuration",
    "InvalidPitchIndex",
    "InferenceUnavailable",
]
