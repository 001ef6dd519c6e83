"""Global constants and default settings."""

WINDOW_WIDTH = 800
WINDOW_HEIGHT = 520
FPS = 60
WINDOW_TITLE = "SightKey"

# Full MIDI range
MIDI_NUMBER_MIN = 0
MIDI_NUMBER_MAX = 127

# Targets are drawn from this inclusive range (E2 .. G5)
PRACTICE_RANGE_LOW = 40
PRACTICE_RANGE_HIGH = 79

# Grand staff split: below BASS_ONLY_BELOW -> bass, above TREBLE_ONLY_ABOVE -> treble,
# anything in between may go on either staff
BASS_ONLY_BELOW = 56
TREBLE_ONLY_ABOVE = 64

HIGHLIGHT_DURATION_MS = 500

# On-screen keyboard (pixels)
WHITE_KEY_WIDTH = 40
WHITE_KEY_HEIGHT = 160
BLACK_KEY_WIDTH = 20
BLACK_KEY_HEIGHT = 100
KEY_GAP = 0
KEYBOARD_OCTAVE = 4

# How long the last answer stays coloured in the HUD (seconds)
RESULT_DISPLAY_SECONDS = 1.5
