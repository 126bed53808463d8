"""Chord recognition - match a pitch-class set against chord templates.

All twelve pitch classes are tried as roots against every template. A
candidate must contain all but ``max_missing_tones`` of its template tones.
The root counts as a tone, so the default of 0 requires a sounded root.
Observed tones outside the template are extras (extensions or alterations)
that lower the score without disqualifying the match.

Candidates rank by:
    1. fewest missing template tones
    2. fewest extra tones
    3. larger templates over their subsets
    4. lower root pitch class
    5. template library order
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Set, Tuple

from ..core.config import AnalysisConfig, DEFAULT_CONFIG
from ..core.pitch import ALL_PITCHES, PitchClass

logger = logging.getLogger(__name__)

# Chord templates (intervals from root in semitones), in library order
CHORD_TEMPLATES: Dict[str, Tuple[int, ...]] = {
    # Dyads and triads
    "power": (0, 7),
    "major": (0, 4, 7),
    "minor": (0, 3, 7),
    "diminished": (0, 3, 6),
    "augmented": (0, 4, 8),
    "sus2": (0, 2, 7),
    "sus4": (0, 5, 7),
    # Sixths and added tones
    "6": (0, 4, 7, 9),
    "minor6": (0, 3, 7, 9),
    "add9": (0, 2, 4, 7),
    "minor_add9": (0, 2, 3, 7),
    # Seventh chords
    "dominant7": (0, 4, 7, 10),
    "major7": (0, 4, 7, 11),
    "minor7": (0, 3, 7, 10),
    "minor_major7": (0, 3, 7, 11),
    "diminished7": (0, 3, 6, 9),
    "half_diminished7": (0, 3, 6, 10),
    "augmented7": (0, 4, 8, 10),
    "dominant7_sus4": (0, 5, 7, 10),
    "dominant7_flat5": (0, 4, 6, 10),
    # Extended and altered
    "6/9": (0, 2, 4, 7, 9),
    "dominant9": (0, 2, 4, 7, 10),
    "major9": (0, 2, 4, 7, 11),
    "minor9": (0, 2, 3, 7, 10),
    "dominant7_flat9": (0, 1, 4, 7, 10),
    "dominant7_sharp9": (0, 3, 4, 7, 10),
    "dominant11": (0, 2, 4, 5, 7, 10),
    "dominant13": (0, 2, 4, 7, 9, 10),
}

QUALITY_SYMBOLS: Dict[str, str] = {
    "power": "5",
    "major": "",
    "minor": "m",
    "diminished": "dim",
    "augmented": "aug",
    "sus2": "sus2",
    "sus4": "sus4",
    "6": "6",
    "minor6": "m6",
    "add9": "add9",
    "minor_add9": "madd9",
    "dominant7": "7",
    "major7": "maj7",
    "minor7": "m7",
    "minor_major7": "mMaj7",
    "diminished7": "dim7",
    "half_diminished7": "m7b5",
    "augmented7": "aug7",
    "dominant7_sus4": "7sus4",
    "dominant7_flat5": "7b5",
    "6/9": "6/9",
    "dominant9": "9",
    "major9": "maj9",
    "minor9": "m9",
    "dominant7_flat9": "7b9",
    "dominant7_sharp9": "7#9",
    "dominant11": "11",
    "dominant13": "13",
}

# Alternative spellings accepted by Chord.parse
_SYMBOL_ALIASES: Dict[str, str] = {
    "maj": "major",
    "M": "major",
    "min": "minor",
    "-": "minor",
    "°": "diminished",
    "o": "diminished",
    "+": "augmented",
    "°7": "diminished7",
    "o7": "diminished7",
    "ø": "half_diminished7",
    "ø7": "half_diminished7",
    "+7": "augmented7",
    "7#5": "augmented7",
    "M7": "major7",
    "min7": "minor7",
    "-7": "minor7",
    "69": "6/9",
    "dom7": "dominant7",
}

_SYMBOL_TO_QUALITY: Dict[str, str] = {
    **{symbol: quality for quality, symbol in QUALITY_SYMBOLS.items()},
    **_SYMBOL_ALIASES,
}

_ACCIDENTALS = ("#", "♯", "b", "♭")


@dataclass(frozen=True)
class Chord:
    """A chord quality rooted on a pitch class."""

    root: PitchClass
    quality: str
    intervals: Tuple[int, ...]

    def __post_init__(self):
        reduced = [i % 12 for i in self.intervals]
        if 0 not in reduced:
            raise ValueError(f"Chord intervals must include the root: {self.intervals}")
        if len(set(reduced)) != len(reduced):
            raise ValueError(f"Chord intervals must be unique modulo 12: {self.intervals}")

    @classmethod
    def from_template(cls, root: PitchClass, quality: str) -> "Chord":
        """Build a chord from a library template."""
        if quality not in CHORD_TEMPLATES:
            raise ValueError(f"Unknown chord quality: {quality!r}")
        return cls(root=root, quality=quality, intervals=CHORD_TEMPLATES[quality])

    @classmethod
    def parse(cls, symbol: str) -> "Chord":
        """
        Parse a chord symbol such as 'C7b9', 'F#m7', 'B♭maj7' or 'Eø'.

        Raises:
            ValueError: If the root or the quality is not recognised
        """
        text = symbol.strip()
        if not text:
            raise ValueError("Empty chord symbol")

        # Prefer a root with an accidental, then fall back to the bare letter
        roots = [text[:2], text[:1]] if text[1:2] in _ACCIDENTALS else [text[:1]]
        for root_text in roots:
            suffix = text[len(root_text):]
            quality = _SYMBOL_TO_QUALITY.get(suffix)
            if quality is None:
                quality = _SYMBOL_TO_QUALITY.get(
                    suffix.replace("♭", "b").replace("♯", "#")
                )
            if quality is not None:
                return cls.from_template(PitchClass.parse(root_text), quality)

        raise ValueError(f"Unrecognised chord symbol: {symbol!r}")

    @property
    def symbol(self) -> str:
        """Get chord symbol (e.g., 'C7b9', 'Am', 'F#maj7')."""
        return f"{self.root.label}{QUALITY_SYMBOLS.get(self.quality, self.quality)}"

    @property
    def pitch_classes(self) -> List[PitchClass]:
        """Chord tones, root first."""
        return [self.root.transpose(i) for i in self.intervals]

    def __str__(self) -> str:
        return self.symbol


@dataclass
class ChordCandidate:
    """A candidate chord with its match details."""

    chord: Chord
    score: float
    matched_intervals: List[int] = field(default_factory=list)
    missing_intervals: List[int] = field(default_factory=list)
    extra_intervals: List[int] = field(default_factory=list)
    template_index: int = 0

    @property
    def rank_key(self) -> Tuple[int, int, int, int, int]:
        return (
            len(self.missing_intervals),
            len(self.extra_intervals),
            -len(self.chord.intervals),
            self.chord.root.value,
            self.template_index,
        )


class ChordRecognizer:
    """Rank chord interpretations of a set of notes."""

    CHORD_TEMPLATES = CHORD_TEMPLATES

    def __init__(self, config: AnalysisConfig = DEFAULT_CONFIG):
        self.config = config

    def notes_to_pitch_classes(self, notes: Iterable) -> Set[PitchClass]:
        """Convert notes (or pitch classes) to an octave-independent set."""
        pitch_classes = set()
        for note in notes:
            pitch = getattr(note, "pitch", note)
            pitch_classes.add(PitchClass.from_index(pitch))
        return pitch_classes

    def rank(self, notes: Iterable) -> List[ChordCandidate]:
        """
        Score every (root, template) pair against the observed notes.

        Returns:
            Matching candidates, best first (empty if nothing matches)
        """
        pitch_classes = self.notes_to_pitch_classes(notes)
        if not pitch_classes:
            return []

        candidates = []
        for root in ALL_PITCHES:
            for index, (quality, template) in enumerate(self.CHORD_TEMPLATES.items()):
                candidate = self._score_chord_match(pitch_classes, root, quality, template)
                if candidate is not None:
                    candidate.template_index = index
                    candidates.append(candidate)

        candidates.sort(key=lambda c: c.rank_key)
        logger.debug(
            "Ranked %d chord candidates for %s",
            len(candidates), sorted(p.label for p in pitch_classes),
        )
        return candidates

    def recognize(self, notes: Iterable) -> List[Chord]:
        """Ranked chords for the notes, best first."""
        return [candidate.chord for candidate in self.rank(notes)]

    def _score_chord_match(
        self,
        pitch_classes: Set[PitchClass],
        root: PitchClass,
        quality: str,
        template: Tuple[int, ...],
    ):
        """
        Compare a rooted template with the observed pitch classes.

        Returns:
            ChordCandidate, or None if too many template tones are missing
        """
        intervals = {(pc - root) % 12 for pc in pitch_classes}
        template_intervals = {i % 12 for i in template}

        matched = sorted(intervals & template_intervals)
        missing = sorted(template_intervals - intervals)
        extra = sorted(intervals - template_intervals)

        if len(missing) > self.config.max_missing_tones:
            return None

        score = len(matched) / (len(template_intervals) + len(extra))

        return ChordCandidate(
            chord=Chord(root=root, quality=quality, intervals=template),
            score=score,
            matched_intervals=matched,
            missing_intervals=missing,
            extra_intervals=extra,
        )
