"""Pitch classification - spectral peaks to distinct notes."""

import logging
from typing import Dict, List, Sequence

import numpy as np

from ..core.config import AnalysisConfig, DEFAULT_CONFIG
from ..core.errors import ClassificationError, EmptySpectrum, InvalidDuration
from ..core.note import Note
from ..core.pitch import PitchClass
from .spectrum import SpectralPeak

logger = logging.getLogger(__name__)

SEMITONE_RATIO = 2.0 ** (1.0 / 12.0)


class PitchClassifier:
    """Maps spectral peaks to notes, dropping overtones and duplicates."""

    def __init__(self, config: AnalysisConfig = DEFAULT_CONFIG):
        self.config = config

    def note_for_frequency(self, frequency: float) -> Note:
        """
        Nearest equal-tempered note to a frequency.

        The pitch class is the rounded semitone distance from C modulo 12;
        the octave comes from the same rounded distance so that a tone a
        few cents flat of its pitch's octave-0 multiple is not pushed down
        an octave.
        """
        if not frequency > 0:
            raise ClassificationError(f"Cannot classify frequency {frequency} Hz.")

        semitone = int(round(12.0 * np.log2(frequency / PitchClass.C.base_frequency)))
        pitch = PitchClass.from_index(semitone % 12)
        return Note(pitch=pitch, octave=semitone // 12)

    def is_overtone(self, peak: SpectralPeak, fundamentals: Sequence[SpectralPeak]) -> bool:
        """
        Whether peak sits on an integer multiple of an accepted lower peak.

        Only a peak clearly weaker than that lower peak counts; a tone about
        as loud as its would-be fundamental is a sounded note.
        """
        tolerance = self.config.harmonic_tolerance_cents
        ceiling = self.config.harmonic_magnitude_ratio

        for fundamental in fundamentals:
            if fundamental.frequency >= peak.frequency:
                continue
            if peak.magnitude >= ceiling * fundamental.magnitude:
                continue
            for ratio in self.config.harmonic_ratios:
                cents = 1200.0 * np.log2(peak.frequency / (fundamental.frequency * ratio))
                if abs(cents) <= tolerance:
                    return True
        return False

    def classify(self, peaks: Sequence[SpectralPeak], duration_seconds: float) -> List[Note]:
        """
        Turn spectral peaks into a deduplicated set of notes.

        Peaks are visited strongest first; a clearly weaker peak on a
        harmonic of an already-accepted peak is discarded. Peaks resolving
        to the same note collapse into one.

        Args:
            peaks: Peaks from one analysis window
            duration_seconds: Length of the analyzed window

        Returns:
            Notes sorted by ascending frequency

        Raises:
            InvalidDuration: If duration_seconds <= 0
            EmptySpectrum: If there are no peaks
        """
        if not duration_seconds > 0:
            raise InvalidDuration(duration_seconds)
        if not peaks:
            raise EmptySpectrum("No spectral peak above the noise floor.")

        lowest = min(peak.frequency for peak in peaks)
        resolution = 1.0 / duration_seconds
        if lowest * (SEMITONE_RATIO - 1.0) < resolution:
            logger.debug(
                "Window of %.2fs cannot separate semitones at %.1f Hz",
                duration_seconds, lowest,
            )

        accepted: List[SpectralPeak] = []
        for peak in sorted(peaks, key=lambda p: (-p.magnitude, p.frequency)):
            if self.is_overtone(peak, accepted):
                logger.debug("Dropping overtone at %.1f Hz", peak.frequency)
                continue
            accepted.append(peak)

        notes: Dict[Note, SpectralPeak] = {}
        for peak in accepted:
            notes.setdefault(self.note_for_frequency(peak.frequency), peak)

        logger.debug(
            "Classified %d peaks into %d notes: %s",
            len(peaks), len(notes), " ".join(n.name for n in sorted(notes)),
        )
        return sorted(notes)
