"""Played-note input: MIDI keyboards via python-rtmidi, plus a computer-keyboard fallback."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Sequence

import mido
import pygame

from sightkey.note import OCTAVE_NOTE_COUNT, DomainError, Note, note_name, split_note_name

if TYPE_CHECKING:
    from sightkey.session import PracticeSession

try:
    import rtmidi
    _HAS_RTMIDI = True
except ImportError:
    _HAS_RTMIDI = False

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MidiNoteOn:
    """A note-on from a device, spelled the way the device layer reports it."""

    name: str  # letter plus accidental symbol, e.g. "C#"
    octave: int
    velocity: int = 64


NoteOnListener = Callable[[MidiNoteOn], None]


class UnsupportedEnvironment(Exception):
    """Raised when this runtime has no MIDI support (python-rtmidi missing)."""


class MidiDeviceError(DomainError):
    """Raised when no MIDI device is found or the requested port does not exist."""


def decode_note_on(data: Sequence[int]) -> MidiNoteOn | None:
    """Decode raw MIDI bytes; only note-on with a non-zero velocity yields an event."""
    try:
        msg = mido.Message.from_bytes(list(data))
    except (ValueError, TypeError):
        logger.debug("Ignoring malformed MIDI data: %r", data)
        return None
    if msg.type != "note_on" or msg.velocity == 0:
        return None
    return MidiNoteOn(
        name=note_name(msg.note),
        octave=msg.note // OCTAVE_NOTE_COUNT - 1,
        velocity=msg.velocity,
    )


class MidiInput:
    """A single rtmidi input port that pushes note-on events to subscribers."""

    def __init__(self, port_index: int | None = None) -> None:
        if not _HAS_RTMIDI:
            raise UnsupportedEnvironment("python-rtmidi is not installed")
        self.midi_in = rtmidi.MidiIn()
        self._port_index = port_index
        self._listeners: list[NoteOnListener] = []
        self._open = False

    @staticmethod
    def list_ports() -> list[str]:
        if not _HAS_RTMIDI:
            return []
        midi_in = rtmidi.MidiIn()
        return midi_in.get_ports()

    @property
    def is_open(self) -> bool:
        return self._open

    def connect(self) -> None:
        """Open the port and start delivering events.

        Raises:
            MidiDeviceError: If there is no device or the port index is invalid.
        """
        ports = self.midi_in.get_ports()
        if not ports:
            raise MidiDeviceError("No MIDI input devices found")
        idx = self._port_index if self._port_index is not None else 0
        if not 0 <= idx < len(ports):
            raise MidiDeviceError(f"MIDI port {idx} not found ({len(ports)} available)")
        self.midi_in.open_port(idx)
        self.midi_in.set_callback(self._on_message)
        self._open = True
        logger.info("Connected to MIDI input %s", ports[idx])

    def subscribe(self, listener: NoteOnListener) -> Callable[[], None]:
        """Call ``listener`` for every note-on; returns a function that stops it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _on_message(self, event: tuple[list[int], float], _data: object = None) -> None:
        message, _delta = event
        note_on = decode_note_on(message)
        if note_on is None:
            return
        for listener in list(self._listeners):
            listener(note_on)

    def close(self) -> None:
        if self._open:
            self.midi_in.cancel_callback()
            self.midi_in.close_port()
            self._open = False
        self._listeners.clear()


class MidiNoteAdapter:
    """Turns device note-ons into notes and submits them straight to a session."""

    def __init__(self, session: PracticeSession, strict: bool = True) -> None:
        self._session = session
        self.strict = strict

    def attach(self, midi_input: MidiInput) -> Callable[[], None]:
        return midi_input.subscribe(self.on_note_on)

    def on_note_on(self, event: MidiNoteOn) -> None:
        try:
            letter, accidental = split_note_name(event.name)
            note = Note.from_name_and_octave(letter, accidental, event.octave)
            self._session.submit_attempt(note, strict=self.strict)
        except DomainError as exc:
            logger.warning("Dropped MIDI note %s%s: %s", event.name, event.octave, exc)


# Computer keyboard -> semitone above the keyboard octave's C
_KEY_TO_SEMITONE: dict[int, int] = {
    pygame.K_z: 0, pygame.K_s: 1, pygame.K_x: 2, pygame.K_d: 3,
    pygame.K_c: 4, pygame.K_v: 5, pygame.K_g: 6, pygame.K_b: 7,
    pygame.K_h: 8, pygame.K_n: 9, pygame.K_j: 10, pygame.K_m: 11,
    pygame.K_COMMA: 12,
}


class KeyboardInput:
    """Fallback input using the computer keyboard as one piano octave."""

    def __init__(self, base_octave: int = 4) -> None:
        if not -1 <= base_octave <= 8:
            raise DomainError(f"Keyboard octave {base_octave} outside [-1, 8]")
        self._base = (base_octave + 1) * OCTAVE_NOTE_COUNT
        self._events: list[Note] = []
        self._held: set[int] = set()

    def feed_event(self, event: pygame.event.Event) -> None:
        """Call from the game loop for each pygame event."""
        if event.type == pygame.KEYDOWN and event.key in _KEY_TO_SEMITONE:
            midi_number = self._base + _KEY_TO_SEMITONE[event.key]
            if midi_number not in self._held:
                self._held.add(midi_number)
                self._events.append(Note.from_midi_number(midi_number))
        elif event.type == pygame.KEYUP and event.key in _KEY_TO_SEMITONE:
            self._held.discard(self._base + _KEY_TO_SEMITONE[event.key])

    def poll(self) -> Note | None:
        if self._events:
            return self._events.pop(0)
        return None

    def close(self) -> None:
        self._events.clear()
        self._held.clear()
