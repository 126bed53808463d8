"""Note data class - a pitch class bound to an octave."""

import re
from dataclasses import dataclass
from functools import total_ordering
from typing import Tuple

from .constants import MAX_OCTAVE, MIN_OCTAVE
from .pitch import ALL_PITCHES, PitchClass

_NOTE_PATTERN = re.compile(r"^\s*([A-Ga-g][#♯b♭]*)(-?\d+)\s*$")


@total_ordering
@dataclass(frozen=True)
class Note:
    """Represents a musical note (e.g., A4 = 440 Hz)."""

    pitch: PitchClass
    octave: int

    @property
    def frequency(self) -> float:
        """Absolute frequency in Hz."""
        return self.pitch.base_frequency * (2.0 ** self.octave)

    @property
    def name(self) -> str:
        """Get note name (e.g., 'C4', 'A#3')."""
        return f"{self.pitch.label}{self.octave}"

    @property
    def semitone(self) -> int:
        """Semitones above C0."""
        return self.octave * 12 + self.pitch.value

    @classmethod
    def parse(cls, text: str) -> "Note":
        """Parse a note name such as 'C4', 'Bb2' or 'F♯5'."""
        match = _NOTE_PATTERN.match(text)
        if not match:
            raise ValueError(f"Invalid note name: {text!r}")
        return cls(PitchClass.parse(match.group(1)), int(match.group(2)))

    def __lt__(self, other: "Note") -> bool:
        if not isinstance(other, Note):
            return NotImplemented
        return self.semitone < other.semitone

    def __str__(self) -> str:
        return self.name


ALL_PITCH_NOTES: Tuple[Note, ...] = tuple(
    Note(pitch, octave)
    for octave in range(MIN_OCTAVE, MAX_OCTAVE + 1)
    for pitch in ALL_PITCHES
)
