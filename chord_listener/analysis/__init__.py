"""Analysis layer - Low-level signal analysis.

This layer turns raw samples into notes:
- Magnitude spectrum and peak extraction
- Pitch classification with overtone suppression
"""

from .spectrum import SpectralAnalyzer, SpectralPeak
from .pitch import PitchClassifier

__all__ = [
    "SpectralAnalyzer",
    "SpectralPeak",
    "PitchClassifier",
]
