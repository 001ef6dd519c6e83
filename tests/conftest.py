"""Shared test doubles."""

from __future__ import annotations

import pytest

from sightkey.models import Staff
from sightkey.note import Note


class ScriptedRandom:
    """Stand-in for random.Random that replays fixed MIDI numbers.

    ``randint`` returns the scripted values in order and then keeps repeating
    the last one; ``random`` always returns ``spelling`` (below 0.5 = sharps).
    """

    def __init__(self, midi_numbers: list[int], spelling: float = 0.1, choice_index: int = 0) -> None:
        self._values = list(midi_numbers)
        self._last = self._values[0]
        self._spelling = spelling
        self._choice_index = choice_index

    def randint(self, low: int, high: int) -> int:
        if self._values:
            self._last = self._values.pop(0)
        return self._last

    def random(self) -> float:
        return self._spelling

    def choice(self, seq):
        return seq[min(self._choice_index, len(seq) - 1)]


class RecordingHandle:
    def __init__(self, note: Note, staff: Staff, fail_on_dispose: bool = False) -> None:
        self.note = note
        self.staff = staff
        self.highlights: list[int] = []
        self.dispose_count = 0
        self._fail = fail_on_dispose

    def highlight(self, duration_ms: int) -> None:
        self.highlights.append(duration_ms)

    def dispose(self) -> None:
        self.dispose_count += 1
        if self._fail:
            raise RuntimeError(f"cannot dispose {self.note.full_name}")


class RecordingBackend:
    def __init__(self, failing: set[int] | None = None) -> None:
        self.handles: list[RecordingHandle] = []
        self._failing = failing or set()

    def draw_note(self, note: Note, staff: Staff) -> RecordingHandle:
        handle = RecordingHandle(note, staff, fail_on_dispose=note.midi_number in self._failing)
        self.handles.append(handle)
        return handle


@pytest.fixture
def backend() -> RecordingBackend:
    return RecordingBackend()
