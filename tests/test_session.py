"""Tests for the practice session controller."""

import random
import threading

import pytest

from conftest import RecordingBackend, ScriptedRandom
from sightkey.models import SessionPhase
from sightkey.note import DomainError, Note
from sightkey.session import PracticeSession
from sightkey.sheet import StaffManager


def test_scoring_scenario():
    session = PracticeSession(rng=ScriptedRandom([60]))
    assert session.start().midi_number == 60

    result = session.submit_attempt(Note.from_midi_number(60), strict=True)
    assert result.is_correct
    assert (session.state.correct_attempts, session.state.total_attempts) == (1, 1)
    assert session.target_note.midi_number == 60

    result = session.submit_attempt(Note.from_midi_number(72), strict=False)
    assert result.is_correct
    assert (session.state.correct_attempts, session.state.total_attempts) == (2, 2)

    result = session.submit_attempt(Note.from_midi_number(72), strict=True)
    assert not result.is_correct
    assert result.message == "WRONG NOTE: C4"
    assert (session.state.correct_attempts, session.state.total_attempts) == (2, 3)


def test_every_attempt_draws_a_new_target():
    session = PracticeSession(rng=ScriptedRandom([60, 62, 65]))
    session.start()
    session.submit_attempt(61)
    assert session.target_note.midi_number == 62
    session.submit_attempt(62, strict=True)
    assert session.target_note.midi_number == 65


def test_result_carries_target_name():
    session = PracticeSession(rng=ScriptedRandom([61], spelling=0.9))
    session.start()
    result = session.submit_attempt(61, strict=True)
    assert result.target.full_name == "Db4"
    assert result.message == "CORRECT NOTE: Db4"
    assert result.strict


def test_submit_before_start():
    session = PracticeSession(rng=ScriptedRandom([60]))
    assert session.phase is SessionPhase.IDLE
    with pytest.raises(RuntimeError):
        session.submit_attempt(60)


@pytest.mark.parametrize("bad", [128, -1, "C4", 60.5])
def test_invalid_attempt_leaves_state_untouched(bad):
    session = PracticeSession(rng=ScriptedRandom([60, 70]))
    session.start()
    with pytest.raises(DomainError):
        session.submit_attempt(bad)
    state = session.state
    assert (state.total_attempts, state.correct_attempts) == (0, 0)
    assert state.target_note.midi_number == 60
    assert session.last_result is None


@pytest.mark.parametrize("practice_range", [(80, 40), (-1, 10), (100, 128)])
def test_invalid_practice_range(practice_range):
    with pytest.raises(DomainError):
        PracticeSession(practice_range=practice_range)


def test_targets_stay_in_practice_range():
    session = PracticeSession(rng=random.Random(5), practice_range=(48, 52))
    seen = {session.start().midi_number}
    for _ in range(200):
        session.submit_attempt(60)
        seen.add(session.target_note.midi_number)
    assert seen == {48, 49, 50, 51, 52}


def test_phase_during_and_after_result():
    session = PracticeSession(rng=ScriptedRandom([60]))
    phases = []
    session.subscribe(lambda result: phases.append(session.phase))
    session.start()
    assert session.phase is SessionPhase.AWAITING_INPUT
    session.submit_attempt(60)
    assert phases == [SessionPhase.SHOWING_RESULT]
    assert session.phase is SessionPhase.AWAITING_INPUT


def test_unsubscribe_stops_notifications():
    session = PracticeSession(rng=ScriptedRandom([60]))
    results = []
    unsubscribe = session.subscribe(results.append)
    session.start()
    session.submit_attempt(60)
    unsubscribe()
    session.submit_attempt(60)
    assert len(results) == 1
    assert results[0].is_correct


def test_restart_resets_score():
    session = PracticeSession(rng=ScriptedRandom([60]))
    session.start()
    session.submit_attempt(60)
    session.submit_attempt(61)
    assert session.state.accuracy_pct == 50.0
    session.start()
    assert session.state.total_attempts == 0
    assert session.state.accuracy_pct == 0.0


def test_sheet_shows_only_the_current_target():
    backend = RecordingBackend()
    sheet = StaffManager(backend, random.Random(0))
    session = PracticeSession(sheet, ScriptedRandom([60, 67]))
    session.start()
    assert [d.note.midi_number for d in sheet.displayed_notes] == [60]

    session.submit_attempt(60)
    assert [d.note.midi_number for d in sheet.displayed_notes] == [67]
    assert backend.handles[0].dispose_count == 1


def test_hint_highlights_target():
    backend = RecordingBackend()
    session = PracticeSession(StaffManager(backend, random.Random(0)), ScriptedRandom([64]))
    assert session.hint() is False
    session.start()
    assert session.hint(duration_ms=300) is True
    assert backend.handles[-1].highlights == [300]


def test_hint_without_sheet():
    session = PracticeSession(rng=ScriptedRandom([64]))
    session.start()
    assert session.hint() is False


def test_concurrent_attempts_are_all_counted():
    session = PracticeSession(StaffManager(), ScriptedRandom([60]))
    session.start()

    def play():
        for _ in range(250):
            session.submit_attempt(60, strict=True)

    threads = [threading.Thread(target=play) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    state = session.state
    assert state.total_attempts == 2000
    assert state.correct_attempts == 2000


def test_listener_can_read_the_updated_score():
    session = PracticeSession(rng=ScriptedRandom([60]))
    seen = []
    session.subscribe(lambda result: seen.append(session.state.total_attempts))
    session.start()

    worker = threading.Thread(target=session.submit_attempt, args=(60,))
    worker.start()
    worker.join(2.0)
    assert not worker.is_alive()
    assert seen == [1]


def test_failing_listener_does_not_lose_the_result():
    session = PracticeSession(rng=ScriptedRandom([60, 62]))
    received = []

    def broken(result):
        raise ValueError("display went away")

    session.subscribe(broken)
    session.subscribe(received.append)
    session.start()

    result = session.submit_attempt(60, strict=True)
    assert result.is_correct
    assert received == [result]
    assert session.phase is SessionPhase.AWAITING_INPUT
    assert session.target_note.midi_number == 62


def test_new_target_is_shown_even_if_clearing_fails():
    backend = RecordingBackend(failing={60})
    sheet = StaffManager(backend, random.Random(0))
    session = PracticeSession(sheet, ScriptedRandom([60, 67]))
    session.start()

    with pytest.raises(RuntimeError):
        session.submit_attempt(60)
    assert [d.note.midi_number for d in sheet.displayed_notes] == [67]
    assert session.target_note.midi_number == 67
    assert session.phase is SessionPhase.AWAITING_INPUT
    assert session.state.total_attempts == 1
