"""Chord identification - blend rule-based ranking with the learned model.

In ``fallback`` mode the model is consulted only when the best rule-based
candidate scores below the confidence threshold (or nothing matched). In
``ensemble`` mode both rankings are always combined with a weighted sum.
A failing model never fails identification: the rule-based ranking is
returned with the error attached.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from ..core.config import AnalysisConfig, DEFAULT_CONFIG
from ..core.errors import InferenceUnavailable
from .chords import Chord, ChordRecognizer
from .learned import ChordScorer, LearnedInferencer, RankedChord, encode_features

logger = logging.getLogger(__name__)


@dataclass
class ChordRanking:
    """Ordered chord interpretations and how they were produced."""

    chords: List[RankedChord] = field(default_factory=list)
    source: str = "rules"
    inference_error: Optional[InferenceUnavailable] = None

    @property
    def top(self) -> Optional[RankedChord]:
        return self.chords[0] if self.chords else None

    @property
    def symbols(self) -> List[str]:
        return [ranked.symbol for ranked in self.chords]


class ChordIdentifier:
    """Rule-based recognition with an optional learned second opinion."""

    def __init__(
        self,
        scorer: Optional[ChordScorer] = None,
        config: AnalysisConfig = DEFAULT_CONFIG,
    ):
        self.config = config
        self.recognizer = ChordRecognizer(config)
        self.inferencer = LearnedInferencer(scorer)

    def identify(self, notes: Iterable) -> ChordRanking:
        """
        Rank chord interpretations of notes.

        Args:
            notes: Notes sorted by ascending frequency

        Returns:
            ChordRanking, best first
        """
        notes = list(notes)
        candidates = self.recognizer.rank(notes)
        rule_ranked = [RankedChord(c.chord, c.score, "rules") for c in candidates]

        if not self.inferencer.available:
            return ChordRanking(rule_ranked, "rules")

        confident = bool(candidates) and candidates[0].score >= self.config.confidence_threshold
        if self.config.blend_mode == "fallback" and confident:
            return ChordRanking(rule_ranked, "rules")

        try:
            model_ranked = self.inferencer.infer(encode_features(notes))
        except InferenceUnavailable as exc:
            logger.warning("Chord model unavailable, using rule-based ranking: %s", exc)
            return ChordRanking(rule_ranked, "rules", inference_error=exc)

        if self.config.blend_mode == "fallback":
            logger.info(
                "Rule-based confidence below %.2f, using chord model",
                self.config.confidence_threshold,
            )
            return ChordRanking(self._fallback(model_ranked, rule_ranked), "model")

        return ChordRanking(self._blend(rule_ranked, model_ranked), "ensemble")

    @staticmethod
    def _fallback(model_ranked: List[RankedChord], rule_ranked: List[RankedChord]) -> List[RankedChord]:
        """Model ranking first, then rule-only chords in rule order."""
        seen = {ranked.chord for ranked in model_ranked}
        return model_ranked + [r for r in rule_ranked if r.chord not in seen]

    def _blend(self, rule_ranked: List[RankedChord], model_ranked: List[RankedChord]) -> List[RankedChord]:
        """Weighted sum of rule score and model score per chord."""
        weight = self.config.model_weight
        rule_scores: Dict[Chord, float] = {r.chord: r.score for r in rule_ranked}
        model_scores: Dict[Chord, float] = {r.chord: r.score for r in model_ranked}
        rule_order = {r.chord: i for i, r in enumerate(rule_ranked)}

        blended = [
            RankedChord(
                chord=chord,
                score=(1.0 - weight) * rule_scores.get(chord, 0.0)
                + weight * model_scores.get(chord, 0.0),
                source="ensemble",
            )
            for chord in {**rule_scores, **model_scores}
        ]
        blended.sort(
            key=lambda r: (
                -r.score,
                rule_order.get(r.chord, len(rule_order)),
                r.chord.root.value,
                r.symbol,
            )
        )
        return blended
