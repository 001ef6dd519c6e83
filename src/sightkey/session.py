"""Practice session: pick a target note, judge attempts, keep score."""

from __future__ import annotations

import logging
import random
import threading
from typing import Callable

from sightkey.config import (
    HIGHLIGHT_DURATION_MS,
    MIDI_NUMBER_MAX,
    MIDI_NUMBER_MIN,
    PRACTICE_RANGE_HIGH,
    PRACTICE_RANGE_LOW,
)
from sightkey.models import AttemptResult, SessionPhase, SessionState
from sightkey.note import DomainError, Note, random_spelling
from sightkey.sheet import StaffManager

logger = logging.getLogger(__name__)

ResultListener = Callable[[AttemptResult], None]


class PracticeSession:
    """Owns the target note and the score for one practice run.

    Every submitted attempt consumes the current target: it is judged, the
    score is updated, listeners see the result, and a fresh target is drawn.
    Attempts may arrive from several threads (on-screen input and a MIDI
    callback); each one is applied atomically.

    Listeners run on the submitting thread while the session is locked. They
    may read ``state``; a listener that raises is logged and skipped.
    """

    def __init__(
        self,
        sheet: StaffManager | None = None,
        rng: random.Random | None = None,
        practice_range: tuple[int, int] = (PRACTICE_RANGE_LOW, PRACTICE_RANGE_HIGH),
    ) -> None:
        low, high = practice_range
        if not MIDI_NUMBER_MIN <= low <= high <= MIDI_NUMBER_MAX:
            raise DomainError(f"Invalid practice range: {low}-{high}")
        self._sheet = sheet
        self._rng = rng if rng is not None else random.Random()
        self._range = (low, high)
        # Re-entrant: result listeners run under the lock and may read state
        self._lock = threading.RLock()
        self._phase = SessionPhase.IDLE
        self._target: Note | None = None
        self._total = 0
        self._correct = 0
        self._last_result: AttemptResult | None = None
        self._listeners: list[ResultListener] = []

    @property
    def phase(self) -> SessionPhase:
        return self._phase

    @property
    def practice_range(self) -> tuple[int, int]:
        return self._range

    @property
    def target_note(self) -> Note | None:
        return self._target

    @property
    def last_result(self) -> AttemptResult | None:
        return self._last_result

    @property
    def state(self) -> SessionState:
        with self._lock:
            return SessionState(
                target_note=self._target,
                total_attempts=self._total,
                correct_attempts=self._correct,
            )

    def subscribe(self, listener: ResultListener) -> Callable[[], None]:
        """Register a result listener; returns a function that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def start(self) -> Note:
        """Reset the score and show the first target."""
        with self._lock:
            self._total = 0
            self._correct = 0
            self._last_result = None
            self._next_target()
            self._phase = SessionPhase.AWAITING_INPUT
            logger.info(
                "Practice session started, range %d-%d, first target %s",
                self._range[0], self._range[1], self._target.full_name,
            )
            return self._target

    def submit_attempt(self, played: Note | int, strict: bool = False) -> AttemptResult:
        """Judge ``played`` against the current target.

        Args:
            played: The played note, or a raw MIDI number.
            strict: Require the exact pitch; otherwise any octave of the
                target's pitch class counts.

        Raises:
            DomainError: If ``played`` is not a valid note. The score is left
                untouched.
            RuntimeError: If the session has not been started.
        """
        note = _as_note(played)
        with self._lock:
            if self._target is None:
                raise RuntimeError("Practice session has not been started")
            target = self._target
            is_correct = target.is_equal(note, strict=strict)
            self._total += 1
            if is_correct:
                self._correct += 1
            result = AttemptResult(played=note, target=target, is_correct=is_correct, strict=strict)
            self._last_result = result
            logger.debug(
                "Attempt %s vs target %s (strict=%s): %s",
                note.full_name, target.full_name, strict, "correct" if is_correct else "wrong",
            )

            self._phase = SessionPhase.SHOWING_RESULT
            for listener in list(self._listeners):
                try:
                    listener(result)
                except Exception as exc:
                    logger.warning("Result listener %r failed: %s", listener, exc)
            try:
                self._next_target()
            finally:
                self._phase = SessionPhase.AWAITING_INPUT
            return result

    def hint(self, duration_ms: int = HIGHLIGHT_DURATION_MS) -> bool:
        """Flash the current target on the staff."""
        if self._sheet is None or self._target is None:
            return False
        return self._sheet.highlight_note(self._target, duration_ms)

    def _next_target(self) -> None:
        midi_number = self._rng.randint(*self._range)
        self._target = Note.from_midi_number(midi_number, random_spelling(self._rng))
        logger.debug("New target %s", self._target.full_name)
        if self._sheet is not None:
            try:
                self._sheet.clear()
            finally:
                self._sheet.add_note(self._target)


def _as_note(played: Note | int) -> Note:
    if isinstance(played, Note):
        return played
    return Note.from_midi_number(played)
