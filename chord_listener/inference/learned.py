"""Learned chord inference - an optional model scoring the same notes.

The model is a collaborator behind a narrow interface: a fixed-size
feature vector goes in, a mapping of chord symbol to score comes out.
Anything with a ``score(features)`` method can stand in for it.

Feature encoding (``FEATURE_SIZE`` = 24):
    [0:12]   1.0 for each pitch class present, else 0.0
    [12:24]  one-hot pitch class of the lowest note (bass)
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Protocol, Sequence

import numpy as np

from ..core.errors import InferenceUnavailable
from ..core.pitch import ALL_PITCHES, PitchClass
from .chords import CHORD_TEMPLATES, Chord

logger = logging.getLogger(__name__)

FEATURE_SIZE = 24


def encode_features(notes: Iterable) -> np.ndarray:
    """
    Encode notes as the model's feature vector.

    Args:
        notes: Notes sorted by ascending frequency (the first is the bass)

    Returns:
        float32 array of shape (FEATURE_SIZE,)
    """
    features = np.zeros(FEATURE_SIZE, dtype=np.float32)
    notes = list(notes)
    for note in notes:
        features[PitchClass.from_index(note.pitch)] = 1.0
    if notes:
        bass = min(notes)
        features[12 + bass.pitch] = 1.0
    return features


class ChordScorer(Protocol):
    """Anything that maps a feature vector to chord-symbol scores."""

    def score(self, features: np.ndarray) -> Mapping[str, float]:
        ...


@dataclass(frozen=True)
class RankedChord:
    """A chord with the score that ranked it and where the score came from."""

    chord: Chord
    score: float
    source: str  # "rules", "model" or "ensemble"

    @property
    def symbol(self) -> str:
        return self.chord.symbol


class LinearChordModel:
    """Softmax over a linear layer: one weight row per chord label."""

    def __init__(self, weights: np.ndarray, bias: np.ndarray, labels: Sequence[str]):
        weights = np.asarray(weights, dtype=np.float64)
        bias = np.asarray(bias, dtype=np.float64)
        if weights.ndim != 2 or weights.shape[1] != FEATURE_SIZE:
            raise ValueError(
                f"weights must have shape (n_labels, {FEATURE_SIZE}), got {weights.shape}"
            )
        if bias.shape != (weights.shape[0],) or len(labels) != weights.shape[0]:
            raise ValueError("bias and labels must have one entry per weight row")

        self.weights = weights
        self.bias = bias
        self.labels = [str(label) for label in labels]

    @classmethod
    def from_templates(cls, sharpness: float = 4.0) -> "LinearChordModel":
        """
        Untrained model whose rows are the chord templates themselves.

        The logit of a chord is 2 * matched - extra - template size, plus
        0.5 when the bass is its root, so absent chord tones cost as much
        as extra ones.
        Useful as a baseline and as a stand-in before a trained model exists.
        """
        weights, bias, labels = [], [], []
        for root in ALL_PITCHES:
            for quality, template in CHORD_TEMPLATES.items():
                row = np.full(FEATURE_SIZE, 0.0)
                row[:12] = -1.0
                for interval in template:
                    row[root.transpose(interval)] = 2.0
                row[12 + root] = 0.5
                weights.append(row * sharpness)
                bias.append(-len(template) * sharpness)
                labels.append(Chord.from_template(root, quality).symbol)
        return cls(np.array(weights), np.array(bias), labels)

    @classmethod
    def load(cls, path) -> "LinearChordModel":
        """Load a model from a .npz archive with weights, bias and labels."""
        with np.load(Path(path), allow_pickle=False) as archive:
            return cls(archive["weights"], archive["bias"], archive["labels"].tolist())

    def save(self, path) -> None:
        """Write the model as a .npz archive."""
        np.savez(
            Path(path),
            weights=self.weights,
            bias=self.bias,
            labels=np.array(self.labels),
        )

    def score(self, features: np.ndarray) -> Dict[str, float]:
        """Probability of each chord label."""
        logits = self.weights @ np.asarray(features, dtype=np.float64) + self.bias
        logits -= logits.max()
        probabilities = np.exp(logits)
        probabilities /= probabilities.sum()
        return dict(zip(self.labels, probabilities.tolist()))


def load_scorer(path) -> LinearChordModel:
    """
    Load a chord model, or the template baseline for ``"templates"``.

    Raises:
        InferenceUnavailable: If the model file cannot be read
    """
    if str(path) == "templates":
        return LinearChordModel.from_templates()
    logger.info("Loading chord model from %s", path)
    try:
        return LinearChordModel.load(path)
    except (OSError, KeyError, ValueError) as exc:
        raise InferenceUnavailable(f"Could not load chord model from {path}: {exc}") from exc


class LearnedInferencer:
    """Ranks chords with a ChordScorer, failing only with InferenceUnavailable."""

    def __init__(self, scorer: Optional[ChordScorer] = None):
        self.scorer = scorer

    @property
    def available(self) -> bool:
        return self.scorer is not None

    def infer(self, features) -> List[RankedChord]:
        """
        Score a feature vector.

        Returns:
            Chords ranked by model score, best first

        Raises:
            InferenceUnavailable: No model, malformed features, or the model failed
        """
        if self.scorer is None:
            raise InferenceUnavailable("No chord model loaded.")

        try:
            vector = np.asarray(features, dtype=np.float32)
        except (TypeError, ValueError) as exc:
            raise InferenceUnavailable(f"Malformed feature vector: {exc}") from exc
        if vector.shape != (FEATURE_SIZE,) or not np.all(np.isfinite(vector)):
            raise InferenceUnavailable(
                f"Malformed feature vector: expected {FEATURE_SIZE} finite values, "
                f"got shape {vector.shape}"
            )

        try:
            scores = self.scorer.score(vector)
        except Exception as exc:
            raise InferenceUnavailable(f"Chord model failed: {exc}") from exc

        ranked = []
        for label, score in scores.items():
            try:
                chord = Chord.parse(label)
            except ValueError as exc:
                raise InferenceUnavailable(
                    f"Chord model produced unknown label {label!r}"
                ) from exc
            ranked.append(RankedChord(chord=chord, score=float(score), source="model"))

        if not ranked:
            raise InferenceUnavailable("Chord model returned no scores.")

        ranked.sort(key=lambda r: (-r.score, r.chord.root.value, r.symbol))
        logger.debug("Chord model ranked %d chords, top %s", len(ranked), ranked[0].symbol)
        return ranked
