"""Inference layer - Musical understanding from notes.

Pipeline: Notes → [Chord templates, Learned model] → Ranked chords
"""

from .chords import (
    CHORD_TEMPLATES,
    QUALITY_SYMBOLS,
    Chord,
    ChordCandidate,
    ChordRecognizer,
)
from .learned import (
    FEATURE_SIZE,
    ChordScorer,
    LearnedInferencer,
    LinearChordModel,
    RankedChord,
    encode_features,
    load_scorer,
)
from .identify import ChordIdentifier, ChordRanking

__all__ = [
    # Chord recognition
    "CHORD_TEMPLATES",
    "QUALITY_SYMBOLS",
    "Chord",
    "ChordCandidate",
    "ChordRecognizer",
    # Learned inference
    "FEATURE_SIZE",
    "ChordScorer",
    "LearnedInferencer",
    "LinearChordModel",
    "RankedChord",
    "encode_features",
    "load_scorer",
    # Blending
    "ChordIdentifier",
    "ChordRanking",
]
