"""Note model: a single pitch, its spelling, and how notes compare."""

from __future__ import annotations

import random
import re
from dataclasses import dataclass
from enum import Enum

from sightkey.config import MIDI_NUMBER_MAX, MIDI_NUMBER_MIN

OCTAVE_NOTE_COUNT = 12

_NAMES_SHARP = ["C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B"]
_NAMES_FLAT = ["C", "Db", "D", "Eb", "E", "F", "Gb", "G", "Ab", "A", "Bb", "B"]

# Semitone of each natural letter above C
_LETTER_SEMITONES = {"C": 0, "D": 2, "E": 4, "F": 5, "G": 7, "A": 9, "B": 11}

_BLACK_KEY_SEMITONES = {1, 3, 6, 8, 10}

_FULL_NAME_RE = re.compile(r"^([A-Ga-g])([#bn]?)(-?\d+)$")


class DomainError(Exception):
    """Raised when a note, spelling or pitch lies outside the supported domain."""


class Accidental(Enum):
    SHARP = "#"
    FLAT = "b"
    NATURAL = "n"
    NONE = ""

    @property
    def offset(self) -> int:
        if self is Accidental.SHARP:
            return 1
        if self is Accidental.FLAT:
            return -1
        return 0

    @classmethod
    def coerce(cls, value: Accidental | str | None) -> Accidental:
        if isinstance(value, Accidental):
            return value
        try:
            return cls(value or "")
        except ValueError:
            raise DomainError(f"Unknown accidental: {value!r}") from None


def _is_tabled_spelling(name: str, accidental: Accidental) -> bool:
    if accidental is Accidental.SHARP:
        return f"{name}#" in _NAMES_SHARP
    if accidental is Accidental.FLAT:
        return f"{name}b" in _NAMES_FLAT
    return name in _LETTER_SEMITONES


def _check_midi_number(midi_number: int) -> None:
    if isinstance(midi_number, bool) or not isinstance(midi_number, int):
        raise DomainError(f"MIDI number must be an integer, got {midi_number!r}")
    if not MIDI_NUMBER_MIN <= midi_number <= MIDI_NUMBER_MAX:
        raise DomainError(
            f"MIDI number {midi_number} outside [{MIDI_NUMBER_MIN}, {MIDI_NUMBER_MAX}]"
        )


@dataclass(frozen=True)
class Note:
    """An immutable pitch with a fixed spelling.

    The spelling (``name`` + ``accidental``) is validated against
    ``midi_number`` on construction; ``octave`` is always derived, so the two
    representations cannot drift apart.

    Dataclass equality compares spelling too (C#4 != Db4). Use
    :meth:`is_equal` for musical comparisons.
    """

    midi_number: int  # 0-127
    name: str  # pitch letter A-G
    accidental: Accidental = Accidental.NONE

    def __post_init__(self) -> None:
        _check_midi_number(self.midi_number)
        if self.name not in _LETTER_SEMITONES:
            raise DomainError(f"Note name must be one of A-G, got {self.name!r}")
        if not isinstance(self.accidental, Accidental):
            raise DomainError(f"Unknown accidental: {self.accidental!r}")
        if not _is_tabled_spelling(self.name, self.accidental):
            raise DomainError(f"Unsupported spelling: {self.name}{self.accidental.value}")
        spelled = (_LETTER_SEMITONES[self.name] + self.accidental.offset) % OCTAVE_NOTE_COUNT
        if spelled != self.midi_number % OCTAVE_NOTE_COUNT:
            raise DomainError(
                f"{self.name}{self.accidental.value} does not spell MIDI number {self.midi_number}"
            )

    @classmethod
    def from_midi_number(
        cls, midi_number: int, accidental: Accidental = Accidental.SHARP
    ) -> Note:
        """Build a note from a MIDI number.

        ``accidental`` picks the sharp or flat spelling table for black keys;
        white keys are always spelled without an accidental.
        """
        _check_midi_number(midi_number)
        spelled = note_name(midi_number, accidental)
        name, acc = split_note_name(spelled)
        return cls(midi_number=midi_number, name=name, accidental=acc)

    @classmethod
    def from_name_and_octave(
        cls,
        name: str,
        accidental: Accidental | str | None,
        octave: int,
    ) -> Note:
        """Build a note from its spelling, e.g. ``("D", Accidental.FLAT, 4)``.

        Raises:
            DomainError: If the letter is not A-G, the spelling is not one of
                the twelve sharp/flat names, or the pitch lies outside 0-127.
        """
        letter = name.strip().upper() if isinstance(name, str) else name
        if letter not in _LETTER_SEMITONES:
            raise DomainError(f"Note name must be one of A-G, got {name!r}")
        acc = Accidental.coerce(accidental)
        if not _is_tabled_spelling(letter, acc):
            raise DomainError(f"Unsupported spelling: {letter}{acc.value}")
        if isinstance(octave, bool) or not isinstance(octave, int):
            raise DomainError(f"Octave must be an integer, got {octave!r}")
        midi_number = (octave + 1) * OCTAVE_NOTE_COUNT + _LETTER_SEMITONES[letter] + acc.offset
        _check_midi_number(midi_number)
        return cls(midi_number=midi_number, name=letter, accidental=acc)

    @classmethod
    def parse(cls, text: str) -> Note:
        """Parse a full name such as ``C4``, ``F#3`` or ``Bb-1``."""
        match = _FULL_NAME_RE.match(text.strip())
        if match is None:
            raise DomainError(f"Cannot parse note name: {text!r}")
        letter, symbol, octave = match.groups()
        return cls.from_name_and_octave(letter, symbol, int(octave))

    @property
    def octave(self) -> int:
        return self.midi_number // OCTAVE_NOTE_COUNT - 1

    @property
    def pitch_class(self) -> int:
        return self.midi_number % OCTAVE_NOTE_COUNT

    @property
    def is_black_key(self) -> bool:
        return self.pitch_class in _BLACK_KEY_SEMITONES

    @property
    def full_name(self) -> str:
        symbol = self.accidental.value if self.accidental.offset else ""
        return f"{self.name}{symbol}{self.octave}"

    def is_equal(self, other: Note, strict: bool = False) -> bool:
        """Compare two pitches.

        With ``strict`` the MIDI numbers must match exactly; otherwise any two
        notes of the same pitch class are equal, whatever their octave.
        """
        if strict:
            return self.midi_number == other.midi_number
        return (self.midi_number - other.midi_number) % OCTAVE_NOTE_COUNT == 0

    def __str__(self) -> str:
        return self.full_name


def note_name(midi_number: int, accidental: Accidental = Accidental.SHARP) -> str:
    """Return the pitch-class name (no octave) from the sharp or flat table."""
    table = _NAMES_FLAT if accidental is Accidental.FLAT else _NAMES_SHARP
    return table[midi_number % OCTAVE_NOTE_COUNT]


def split_note_name(text: str) -> tuple[str, Accidental]:
    """Split ``"C#"`` into ``("C", Accidental.SHARP)``."""
    if not text or text[0].upper() not in _LETTER_SEMITONES:
        raise DomainError(f"Cannot parse note name: {text!r}")
    return text[0].upper(), Accidental.coerce(text[1:])


def random_spelling(rng: random.Random) -> Accidental:
    """Pick the sharp or flat table with equal probability."""
    return Accidental.SHARP if rng.random() < 0.5 else Accidental.FLAT


def notes_in_range(start_midi_number: int, end_midi_number: int) -> list[Note]:
    """Return every note between two MIDI numbers, inclusive.

    Bounds are clamped to 0-127 and may be given in either order.
    """
    start = max(min(start_midi_number, MIDI_NUMBER_MAX), MIDI_NUMBER_MIN)
    end = max(min(end_midi_number, MIDI_NUMBER_MAX), MIDI_NUMBER_MIN)
    if start > end:
        start, end = end, start
    return [Note.from_midi_number(n) for n in range(start, end + 1)]


def notes_in_octave(octave: int) -> list[Note]:
    """Return the notes of one octave (-1 .. 9), C first."""
    if not -1 <= octave <= 9:
        raise DomainError(f"Octave {octave} outside [-1, 9]")
    start = (octave + 1) * OCTAVE_NOTE_COUNT
    return notes_in_range(start, start + OCTAVE_NOTE_COUNT - 1)
