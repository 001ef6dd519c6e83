"""Color palette."""

# RGB tuples
BG = (18, 18, 24)
STAFF_LINE = (150, 150, 170)
LEDGER_LINE = (120, 120, 140)
NOTE_HEAD = (235, 235, 235)
NOTE_HIGHLIGHT = (220, 60, 60)
WHITE_KEY = (240, 240, 240)
WHITE_KEY_BORDER = (90, 90, 100)
BLACK_KEY = (30, 30, 30)
KEY_PRESSED = (66, 135, 245)
RESULT_CORRECT = (80, 220, 100)
RESULT_WRONG = (220, 60, 60)
HUD_TEXT = (220, 220, 220)
HINT_TEXT = (80, 80, 100)
