"""Entry points - capture, classify and recognize.

    capture_audio   microphone → AudioWindow
    capture_notes   microphone → notes
    notes_from_audio  samples → notes (deterministic, no device)
    notes_from_file   audio file → notes
    recognize_chords  notes → ranked chords (rules only)
    infer_chord       features → ranked chords (learned model)
    identify_chord    notes → ChordRanking (rules + optional model)

The ``*_async`` variants suspend on the running event loop for the capture
window; the plain variants run their own loop and must not be called from
inside one.
"""

import asyncio
import logging
from typing import List, Optional, Sequence, Tuple

from .analysis import PitchClassifier, SpectralAnalyzer
from .core.config import AnalysisConfig, DEFAULT_CONFIG
from .core.errors import EmptySpectrum
from .core.note import Note
from .inference import (
    Chord,
    ChordIdentifier,
    ChordRanking,
    ChordRecognizer,
    ChordScorer,
    LearnedInferencer,
    RankedChord,
)
from .input import AudioLoader, AudioWindow, CaptureSession

logger = logging.getLogger(__name__)


async def capture_audio_async(
    duration_seconds: float,
    config: AnalysisConfig = DEFAULT_CONFIG,
    backend=None,
) -> AudioWindow:
    """Record ``duration_seconds`` from the default input device."""
    session = CaptureSession(duration_seconds, config=config, backend=backend)
    return await session.record()


def capture_audio(
    duration_seconds: float,
    config: AnalysisConfig = DEFAULT_CONFIG,
    backend=None,
) -> AudioWindow:
    """Blocking variant of capture_audio_async."""
    # Validate before an event loop (or a device) is touched
    session = CaptureSession(duration_seconds, config=config, backend=backend)
    return asyncio.run(session.record())


async def capture_notes_async(
    duration_seconds: float,
    config: AnalysisConfig = DEFAULT_CONFIG,
    backend=None,
) -> List[Note]:
    """Record from the microphone and classify the recording."""
    window = await capture_audio_async(duration_seconds, config=config, backend=backend)
    return notes_from_window(window, config=config)


def capture_notes(
    duration_seconds: float,
    config: AnalysisConfig = DEFAULT_CONFIG,
    backend=None,
) -> List[Note]:
    """Blocking variant of capture_notes_async."""
    window = capture_audio(duration_seconds, config=config, backend=backend)
    return notes_from_window(window, config=config)


def notes_from_window(window: AudioWindow, config: AnalysisConfig = DEFAULT_CONFIG) -> List[Note]:
    """
    Classify an AudioWindow into notes.

    Raises:
        EmptySpectrum: If the window is empty or silent
    """
    if len(window.samples) == 0:
        raise EmptySpectrum("Audio window contains no samples.")

    peaks = SpectralAnalyzer(config).analyze(window)
    return PitchClassifier(config).classify(peaks, window.duration)


def notes_from_audio(
    samples: Sequence[float],
    duration_seconds: float,
    config: AnalysisConfig = DEFAULT_CONFIG,
) -> List[Note]:
    """
    Classify pre-recorded samples spanning ``duration_seconds``.

    Args:
        samples: Mono samples (multi-channel frames are averaged)
        duration_seconds: Length of the recording; implies the sample rate

    Returns:
        Distinct notes sorted by ascending frequency

    Raises:
        InvalidDuration: If duration_seconds <= 0
        EmptySpectrum: If the samples are empty or silent
    """
    window = AudioWindow.from_samples(samples, duration_seconds)
    return notes_from_window(window, config=config)


def notes_from_file(
    path,
    offset: float = 0.0,
    duration: Optional[float] = None,
    config: AnalysisConfig = DEFAULT_CONFIG,
) -> List[Note]:
    """Classify (a slice of) an audio file."""
    window = AudioLoader().load(path, offset=offset, duration=duration)
    return notes_from_window(window, config=config)


def recognize_chords(notes: Sequence[Note], config: AnalysisConfig = DEFAULT_CONFIG) -> List[Chord]:
    """Rule-based chord candidates for notes, best first (possibly empty)."""
    return ChordRecognizer(config).recognize(notes)


def infer_chord(features, scorer: Optional[ChordScorer]) -> List[RankedChord]:
    """
    Rank chords for a feature vector with a learned model.

    Raises:
        InferenceUnavailable: No model, malformed features, or the model failed
    """
    return LearnedInferencer(scorer).infer(features)


def identify_chord(
    notes: Sequence[Note],
    scorer: Optional[ChordScorer] = None,
    config: AnalysisConfig = DEFAULT_CONFIG,
) -> ChordRanking:
    """Rule-based ranking, blended with or backed by a model when one is given."""
    return ChordIdentifier(scorer=scorer, config=config).identify(notes)


def capture_chords(
    duration_seconds: float,
    scorer: Optional[ChordScorer] = None,
    config: AnalysisConfig = DEFAULT_CONFIG,
    backend=None,
) -> Tuple[List[Note], ChordRanking]:
    """Record, classify and identify in one call."""
    notes = capture_notes(duration_seconds, config=config, backend=backend)
    ranking = identify_chord(notes, scorer=scorer, config=config)
    logger.info(
        "Heard %s -> %s",
        " ".join(n.name for n in notes),
        ranking.top.symbol if ranking.top else "no chord",
    )
    return notes, ranking
