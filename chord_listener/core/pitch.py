"""Pitch classes - the twelve equal-tempered chromatic tones."""

import operator
from enum import IntEnum
from typing import Tuple

from .constants import BASE_FREQUENCIES, PITCH_NAMES
from .errors import InvalidPitchIndex

_ACCIDENTALS = {"#": 1, "♯": 1, "b": -1, "♭": -1}


class PitchClass(IntEnum):
    """A pitch class, octave-independent.

    The integer value is the semitone index above C (0-11). Only sharps
    are represented; flats parse to the enharmonic sharp.
    """

    C = 0
    C_SHARP = 1
    D = 2
    D_SHARP = 3
    E = 4
    F = 5
    F_SHARP = 6
    G = 7
    G_SHARP = 8
    A = 9
    A_SHARP = 10
    B = 11

    @property
    def base_frequency(self) -> float:
        """Frequency (Hz) of this pitch class in octave 0."""
        return BASE_FREQUENCIES[self.value]

    @property
    def label(self) -> str:
        """Display name (e.g., 'C#')."""
        return PITCH_NAMES[self.value]

    def transpose(self, semitones: int) -> "PitchClass":
        """Pitch class the given number of semitones above this one."""
        return PitchClass((self.value + semitones) % 12)

    @classmethod
    def from_index(cls, index: int) -> "PitchClass":
        """
        Bounds-checked conversion from a semitone index.

        Raises:
            InvalidPitchIndex: If index is outside 0-11
        """
        if isinstance(index, bool):
            raise InvalidPitchIndex(index)
        try:
            value = operator.index(index)
        except TypeError:
            raise InvalidPitchIndex(index) from None
        if not 0 <= value <= 11:
            raise InvalidPitchIndex(index)
        return cls(value)

    @classmethod
    def parse(cls, name: str) -> "PitchClass":
        """
        Parse a pitch name such as 'C', 'F#', 'Bb', 'D♭'.

        Raises:
            ValueError: If the name is not a pitch
        """
        text = name.strip()
        if not text or text[0].upper() not in "CDEFGAB":
            raise ValueError(f"Invalid pitch name: {name!r}")

        index = PITCH_NAMES.index(text[0].upper())
        for char in text[1:]:
            if char not in _ACCIDENTALS:
                raise ValueError(f"Invalid pitch name: {name!r}")
            index += _ACCIDENTALS[char]

        return cls(index % 12)


ALL_PITCHES: Tuple[PitchClass, ...] = tuple(PitchClass)
