"""Tests for staff assignment and displayed-note bookkeeping."""

import random
import threading

import pytest

from conftest import RecordingBackend
from sightkey.models import Staff
from sightkey.note import Note
from sightkey.sheet import (
    NotationBackend,
    NoteHandle,
    NullNotationBackend,
    StaffManager,
    staves_for_note,
)


def _note(midi_number: int) -> Note:
    return Note.from_midi_number(midi_number)


def test_staves_for_note_boundaries():
    assert staves_for_note(_note(55)) == (Staff.BASS,)
    assert staves_for_note(_note(65)) == (Staff.TREBLE,)
    for n in range(56, 65):
        assert set(staves_for_note(_note(n))) == {Staff.BASS, Staff.TREBLE}
    assert staves_for_note(_note(0)) == (Staff.BASS,)
    assert staves_for_note(_note(127)) == (Staff.TREBLE,)


def test_low_note_always_on_bass(backend):
    for seed in range(30):
        sheet = StaffManager(backend, random.Random(seed))
        assert sheet.add_note(_note(55)).staff is Staff.BASS


def test_high_note_always_on_treble(backend):
    for seed in range(30):
        sheet = StaffManager(backend, random.Random(seed))
        assert sheet.add_note(_note(65)).staff is Staff.TREBLE


def test_middle_c_goes_on_exactly_one_staff():
    seen = set()
    for seed in range(60):
        backend = RecordingBackend()
        sheet = StaffManager(backend, random.Random(seed))
        displayed = sheet.add_note(_note(60))
        assert displayed.staff in (Staff.BASS, Staff.TREBLE)
        assert [h.staff for h in backend.handles] == [displayed.staff]
        seen.add(displayed.staff)
    assert seen == {Staff.BASS, Staff.TREBLE}


def test_add_same_midi_number_twice_is_a_no_op(backend):
    sheet = StaffManager(backend, random.Random(1))
    first = sheet.add_note(_note(62))
    second = sheet.add_note(_note(62))
    assert first is second
    assert len(sheet) == 1
    assert len(backend.handles) == 1


def test_enharmonic_respelling_is_not_added_again(backend):
    sheet = StaffManager(backend, random.Random(1))
    sheet.add_note(Note.parse("C#4"))
    sheet.add_note(Note.parse("Db4"))
    assert len(sheet) == 1
    assert sheet.displayed_notes[0].note.full_name == "C#4"


def test_staff_is_fixed_for_the_life_of_a_note(backend):
    sheet = StaffManager(backend, random.Random(3))
    staff = sheet.add_note(_note(60)).staff
    for _ in range(20):
        sheet.add_note(_note(60))
        assert sheet.staff_of(_note(60)) is staff


def test_clear_releases_every_handle(backend):
    sheet = StaffManager(backend, random.Random(0))
    for n in (40, 60, 62, 80):
        sheet.add_note(_note(n))
    sheet.clear()
    assert len(sheet) == 0
    assert sheet.displayed_notes == ()
    assert [h.dispose_count for h in backend.handles] == [1, 1, 1, 1]


def test_clear_on_empty_manager(backend):
    sheet = StaffManager(backend)
    sheet.clear()
    assert len(sheet) == 0


def test_clear_keeps_going_when_a_handle_fails():
    backend = RecordingBackend(failing={60})
    sheet = StaffManager(backend, random.Random(0))
    for n in (48, 60, 72):
        sheet.add_note(_note(n))
    with pytest.raises(RuntimeError):
        sheet.clear()
    assert len(sheet) == 0
    assert [h.dispose_count for h in backend.handles] == [1, 1, 1]


def test_highlight_displayed_note(backend):
    sheet = StaffManager(backend, random.Random(0))
    sheet.add_note(_note(67))
    assert sheet.highlight_note(_note(67)) is True
    assert sheet.highlight_note(_note(67), duration_ms=1200) is True
    assert backend.handles[0].highlights == [500, 1200]


def test_highlight_matches_on_midi_number(backend):
    sheet = StaffManager(backend, random.Random(0))
    sheet.add_note(Note.parse("A#3"))
    assert sheet.highlight_note(Note.parse("Bb3"))
    assert backend.handles[0].highlights == [500]


def test_highlight_missing_note_is_ignored(backend):
    sheet = StaffManager(backend, random.Random(0))
    sheet.add_note(_note(60))
    assert sheet.highlight_note(_note(72)) is False
    assert backend.handles[0].highlights == []


def test_contains_and_staff_of():
    sheet = StaffManager(rng=random.Random(0))
    sheet.add_note(_note(45))
    assert _note(45) in sheet
    assert _note(46) not in sheet
    assert "A2" not in sheet
    assert sheet.staff_of(_note(45)) is Staff.BASS
    assert sheet.staff_of(_note(46)) is None


def test_null_backend_is_default():
    sheet = StaffManager()
    displayed = sheet.add_note(_note(70))
    sheet.highlight_note(_note(70))
    sheet.clear()
    assert len(sheet) == 0
    assert isinstance(displayed.handle, NoteHandle)
    assert isinstance(NullNotationBackend(), NotationBackend)


def test_len_and_contains_wait_for_the_lock(backend):
    sheet = StaffManager(backend, random.Random(0))
    sheet.add_note(_note(60))
    results = []
    reader = threading.Thread(target=lambda: results.append((len(sheet), _note(60) in sheet)))
    with sheet._lock:
        reader.start()
        reader.join(0.2)
        assert results == []
    reader.join(2.0)
    assert results == [(1, True)]
