"""Global constants for Chord Listener."""

# Pitch names
PITCH_NAMES = ["C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B"]

# Octave-0 frequencies (Hz) for each pitch class, A4 = 440 Hz
BASE_FREQUENCIES = (
    16.35,  # C
    17.32,  # C#
    18.35,  # D
    19.45,  # D#
    20.60,  # E
    21.83,  # F
    23.12,  # F#
    24.50,  # G
    25.96,  # G#
    27.50,  # A
    29.14,  # A#
    30.87,  # B
)

# Capture defaults
MIN_CAPTURE_SECONDS = 0.2
DEFAULT_CAPTURE_SECONDS = 5.0

# Octaves enumerated by ALL_PITCH_NOTES
MIN_OCTAVE = 0
MAX_OCTAVE = 9
