"""Chord Listener - Audio to pitch classes, notes and chords.

Architecture Layers:
    1. core/      - Pitch table, notes, errors, configuration
    2. input/     - Microphone capture and audio file loading
    3. analysis/  - Spectrum, peak extraction, pitch classification
    4. inference/ - Chord templates, learned model, blending
    5. pipeline   - End-to-end entry points
"""

__version__ = "0.1.0"

# Core types
from .core import (
    PitchClass,
    Note,
    AnalysisConfig,
    DEFAULT_CONFIG,
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

# Input layer
from .input import AudioWindow, AudioLoader, CaptureSession

# Analysis layer
from .analysis import SpectralAnalyzer, SpectralPeak, PitchClassifier

# Inference layer
from .inference import (
    Chord,
    ChordRecognizer,
    ChordIdentifier,
    ChordRanking,
    LinearChordModel,
    RankedChord,
)

# Entry points
from .pipeline import (
    capture_audio,
    capture_audio_async,
    capture_notes,
    capture_notes_async,
    capture_chords,
    notes_from_audio,
    notes_from_file,
    notes_from_window,
    recognize_chords,
    infer_chord,
    identify_chord,
)

__all__ = [
    # Core
    "PitchClass",
    "Note",
    "AnalysisConfig",
    "DEFAULT_CONFIG",
    # Errors
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
    # Input
    "AudioWindow",
    "AudioLoader",
    "CaptureSession",
    # Analysis
    "SpectralAnalyzer",
    "SpectralPeak",
    "PitchClassifier",
    # Inference
    "Chord",
    "ChordRecognizer",
    "ChordIdentifier",
    "ChordRanking",
    "LinearChordModel",
    "RankedChord",
    # Entry points
    "capture_audio",
    "capture_audio_async",
    "capture_notes",
    "capture_notes_async",
    "capture_chords",
    "notes_from_audio",
    "notes_from_file",
    "notes_from_window",
    "recognize_chords",
    "infer_chord",
    "identify_chord",
]
