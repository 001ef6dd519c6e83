"""Grand staff rendering: a pygame notation backend for the StaffManager."""

from __future__ import annotations

import time
from typing import Callable

import pygame

from sightkey.models import Staff
from sightkey.note import Note
from sightkey.renderer.colors import LEDGER_LINE, NOTE_HEAD, NOTE_HIGHLIGHT, STAFF_LINE

# Staff layout constants
_LINE_SPACING = 12  # pixels between staff lines
_STAFF_GAP = 60  # gap between treble and bass staves
_CLEF_MARGIN = 70  # pixels reserved left of the first note
_NOTE_SPACING = 50
_HEAD_RADIUS = 6

_LETTER_STEPS = {"C": 0, "D": 1, "E": 2, "F": 3, "G": 4, "A": 5, "B": 6}

# Diatonic step (C-1 = 0) of each staff's bottom line
_BOTTOM_LINE_STEP = {
    Staff.TREBLE: 37,  # E4
    Staff.BASS: 25,  # G2
}


def diatonic_step(note: Note) -> int:
    """Staff position of a note's written letter, counting lines and spaces up from C-1.

    Follows the spelling, so C#4 sits on the C line and Db4 on the D line.
    """
    return (note.octave + 1) * 7 + _LETTER_STEPS[note.name]


def ledger_steps(step: int, staff: Staff) -> list[int]:
    """Steps of the ledger lines needed to reach ``step`` from ``staff``."""
    bottom = _BOTTOM_LINE_STEP[staff]
    top = bottom + 8
    if step <= bottom - 2:
        return list(range(bottom - 2, step - 1, -2))
    if step >= top + 2:
        return list(range(top + 2, step + 1, 2))
    return []


def _step_y(step: int, staff: Staff, bottom_line_y: int) -> int:
    return int(bottom_line_y - (step - _BOTTOM_LINE_STEP[staff]) * _LINE_SPACING / 2)


class StaffNoteHandle:
    """Drawing state for one note on the staff."""

    def __init__(
        self,
        backend: PygameNotationBackend,
        note: Note,
        staff: Staff,
        clock: Callable[[], float],
    ) -> None:
        self._backend = backend
        self._clock = clock
        self.note = note
        self.staff = staff
        self.highlight_until = 0.0
        self.disposed = False

    def highlight(self, duration_ms: int) -> None:
        # Overlapping requests extend rather than cut short
        self.highlight_until = max(self.highlight_until, self._clock() + duration_ms / 1000.0)

    def is_highlighted(self, now: float | None = None) -> bool:
        if now is None:
            now = self._clock()
        return not self.disposed and now < self.highlight_until

    def dispose(self) -> None:
        if not self.disposed:
            self.disposed = True
            self._backend.release(self)


class PygameNotationBackend:
    """Keeps the notes currently on the grand staff and draws them each frame."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._handles: list[StaffNoteHandle] = []

    def draw_note(self, note: Note, staff: Staff) -> StaffNoteHandle:
        handle = StaffNoteHandle(self, note, staff, self._clock)
        self._handles.append(handle)
        return handle

    def release(self, handle: StaffNoteHandle) -> None:
        if handle in self._handles:
            self._handles.remove(handle)

    @property
    def handles(self) -> tuple[StaffNoteHandle, ...]:
        return tuple(self._handles)

    def render(self, surface: pygame.Surface, rect: pygame.Rect) -> None:
        """Draw both staves and every live note inside ``rect``."""
        surface.set_clip(rect)

        center_y = rect.y + rect.h // 2
        staff_height = 4 * _LINE_SPACING
        top_line_y = {
            Staff.TREBLE: center_y - _STAFF_GAP // 2 - staff_height,
            Staff.BASS: center_y + _STAFF_GAP // 2,
        }

        for top_y in top_line_y.values():
            for i in range(5):
                ly = top_y + i * _LINE_SPACING
                pygame.draw.line(surface, STAFF_LINE, (rect.x + 10, ly), (rect.right - 10, ly))

        font = pygame.font.SysFont("monospace", 28, bold=True)
        surface.blit(font.render("G", True, STAFF_LINE), (rect.x + 20, top_line_y[Staff.TREBLE] + 12))
        surface.blit(font.render("F", True, STAFF_LINE), (rect.x + 20, top_line_y[Staff.BASS] - 2))

        now = self._clock()
        accidental_font = pygame.font.SysFont("monospace", 16, bold=True)
        for idx, handle in enumerate(self.handles):
            note = handle.note
            step = diatonic_step(note)
            bottom_y = top_line_y[handle.staff] + staff_height

            note_x = rect.x + _CLEF_MARGIN + idx * _NOTE_SPACING
            note_y = _step_y(step, handle.staff, bottom_y)

            for ledger in ledger_steps(step, handle.staff):
                ly = _step_y(ledger, handle.staff, bottom_y)
                pygame.draw.line(surface, LEDGER_LINE, (note_x - 11, ly), (note_x + 11, ly))

            color = NOTE_HIGHLIGHT if handle.is_highlighted(now) else NOTE_HEAD
            # Whole note: open head
            pygame.draw.ellipse(
                surface, color,
                pygame.Rect(note_x - _HEAD_RADIUS - 2, note_y - _HEAD_RADIUS + 1,
                            2 * _HEAD_RADIUS + 4, 2 * _HEAD_RADIUS - 2),
                2,
            )

            if note.accidental.value:
                glyph = accidental_font.render(note.accidental.value, True, color)
                surface.blit(glyph, (note_x - _HEAD_RADIUS - 18, note_y - 9))

        surface.set_clip(None)
