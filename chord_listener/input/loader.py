"""Audio file loading for pre-recorded analysis."""

import logging
from pathlib import Path
from typing import Optional

import librosa
import numpy as np

from .capture import AudioWindow

logger = logging.getLogger(__name__)


class AudioLoader:
    """Loads audio files into AudioWindows."""

    SUPPORTED_FORMATS = {".wav", ".mp3", ".flac", ".ogg", ".m4a", ".aac", ".aiff"}

    def __init__(
        self,
        target_sr: Optional[int] = None,
        normalize: bool = True,
        trim_db: Optional[float] = None,
    ):
        """
        Initialize AudioLoader.

        Args:
            target_sr: Resample to this rate, or keep the file's rate if None
            normalize: Peak-normalize amplitude if True
            trim_db: Trim leading/trailing audio quieter than this many dB
                below peak, or keep everything if None
        """
        self.target_sr = target_sr
        self.normalize = normalize
        self.trim_db = trim_db

    def load(
        self,
        path,
        offset: float = 0.0,
        duration: Optional[float] = None,
    ) -> AudioWindow:
        """
        Load an audio file as a mono window.

        Args:
            path: Path to audio file
            offset: Start reading this many seconds in
            duration: Read at most this many seconds (whole file if None)

        Returns:
            AudioWindow with mono samples

        Raises:
            ValueError: If file format not supported
            FileNotFoundError: If file doesn't exist
        """
        path = Path(path)

        if not path.exists():
            raise FileNotFoundError(f"Audio file not found: {path}")

        if path.suffix.lower() not in self.SUPPORTED_FORMATS:
            raise ValueError(
                f"Unsupported format: {path.suffix}. "
                f"Supported: {sorted(self.SUPPORTED_FORMATS)}"
            )

        audio, sr = librosa.load(
            str(path),
            sr=self.target_sr,
            mono=True,
            offset=offset,
            duration=duration,
        )

        if self.trim_db is not None and len(audio) > 0:
            audio, _ = librosa.effects.trim(audio, top_db=self.trim_db)

        if self.normalize:
            audio = self._normalize(audio)

        logger.debug("Loaded %s: %d samples at %d Hz", path.name, len(audio), sr)
        return AudioWindow(samples=audio.astype(np.float32, copy=False), sample_rate=int(sr))

    def _normalize(self, audio: np.ndarray) -> np.ndarray:
        """Normalize audio to [-1, 1] range using peak normalization."""
        if len(audio) == 0:
            return audio
        peak = np.abs(audio).max()
        if peak > 0:
            audio = audio / peak
        return audio
