"""Input layer - Microphone capture and audio file loading."""

from .capture import AudioWindow, SampleBuffer, CaptureSession
from .loader import AudioLoader

__all__ = [
    "AudioWindow",
    "SampleBuffer",
    "CaptureSession",
    "AudioLoader",
]
