"""Grand-staff bookkeeping: which staff a note goes on and what is on screen."""

from __future__ import annotations

import logging
import random
import threading
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from sightkey.config import BASS_ONLY_BELOW, HIGHLIGHT_DURATION_MS, TREBLE_ONLY_ABOVE
from sightkey.models import Staff
from sightkey.note import Note

logger = logging.getLogger(__name__)


@runtime_checkable
class NoteHandle(Protocol):
    """Opaque token for one drawn note, owned by the StaffManager."""
    def highlight(self, duration_ms: int) -> None: ...
    def dispose(self) -> None: ...


@runtime_checkable
class NotationBackend(Protocol):
    """Draws notes on a staff and hands back a handle for each."""
    def draw_note(self, note: Note, staff: Staff) -> NoteHandle: ...


class _NullHandle:
    def highlight(self, duration_ms: int) -> None:
        pass

    def dispose(self) -> None:
        pass


class NullNotationBackend:
    """Backend that draws nothing, for headless sessions."""

    def draw_note(self, note: Note, staff: Staff) -> NoteHandle:
        return _NullHandle()


@dataclass(frozen=True)
class DisplayedNote:
    note: Note
    staff: Staff
    handle: NoteHandle


def staves_for_note(note: Note) -> tuple[Staff, ...]:
    """Staves a note may be written on in a two-staff grand staff."""
    if note.midi_number < BASS_ONLY_BELOW:
        return (Staff.BASS,)
    if note.midi_number > TREBLE_ONLY_ABOVE:
        return (Staff.TREBLE,)
    return (Staff.BASS, Staff.TREBLE)


class StaffManager:
    """Keeps at most one displayed note per MIDI number and owns its handle."""

    def __init__(
        self,
        backend: NotationBackend | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self._backend = backend if backend is not None else NullNotationBackend()
        self._rng = rng if rng is not None else random.Random()
        self._displayed: dict[int, DisplayedNote] = {}
        self._lock = threading.RLock()

    def add_note(self, note: Note) -> DisplayedNote:
        """Show ``note``; a note with the same MIDI number already shown is kept as is."""
        with self._lock:
            existing = self._displayed.get(note.midi_number)
            if existing is not None:
                return existing
            staff = self._rng.choice(staves_for_note(note))
            handle = self._backend.draw_note(note, staff)
            displayed = DisplayedNote(note=note, staff=staff, handle=handle)
            self._displayed[note.midi_number] = displayed
            logger.debug("Displayed %s on %s staff", note.full_name, staff.name.lower())
            return displayed

    def clear(self) -> None:
        """Remove every displayed note and release its handle.

        All handles are released even if one of them fails; the first failure
        is re-raised once the manager is empty.
        """
        with self._lock:
            records = list(self._displayed.values())
            self._displayed.clear()

        first_error: Exception | None = None
        for record in records:
            try:
                record.handle.dispose()
            except Exception as exc:
                logger.error("Failed to dispose %s: %s", record.note.full_name, exc)
                if first_error is None:
                    first_error = exc
        if first_error is not None:
            raise first_error

    def highlight_note(self, note: Note, duration_ms: int = HIGHLIGHT_DURATION_MS) -> bool:
        """Briefly emphasise a displayed note.

        Returns False, without error, when the note is not on the staff.
        The emphasis runs on its own; this call does not wait for it.
        """
        with self._lock:
            displayed = self._displayed.get(note.midi_number)
        if displayed is None:
            logger.debug("Highlight ignored, %s is not displayed", note.full_name)
            return False
        displayed.handle.highlight(duration_ms)
        return True

    def staff_of(self, note: Note) -> Staff | None:
        with self._lock:
            displayed = self._displayed.get(note.midi_number)
        return displayed.staff if displayed is not None else None

    @property
    def displayed_notes(self) -> tuple[DisplayedNote, ...]:
        with self._lock:
            return tuple(self._displayed.values())

    def __len__(self) -> int:
        with self._lock:
            return len(self._displayed)

    def __contains__(self, note: object) -> bool:
        if not isinstance(note, Note):
            return False
        with self._lock:
            return note.midi_number in self._displayed
