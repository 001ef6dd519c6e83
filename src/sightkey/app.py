"""Top-level application: initializes pygame, wires the session to its inputs, runs the loop."""

from __future__ import annotations

import logging
import random
import time

import pygame

from sightkey.config import (
    FPS,
    KEYBOARD_OCTAVE,
    PRACTICE_RANGE_HIGH,
    PRACTICE_RANGE_LOW,
    RESULT_DISPLAY_SECONDS,
    WINDOW_HEIGHT,
    WINDOW_TITLE,
    WINDOW_WIDTH,
)
from sightkey.keyboard_layout import compute_key_layout
from sightkey.midi_input import (
    KeyboardInput,
    MidiDeviceError,
    MidiInput,
    MidiNoteAdapter,
    UnsupportedEnvironment,
)
from sightkey.models import AttemptResult, KeyGeometryConfig
from sightkey.note import notes_in_octave
from sightkey.renderer import colors
from sightkey.renderer.hud import render_hud
from sightkey.renderer.keyboard import KeyboardView
from sightkey.renderer.notation import PygameNotationBackend
from sightkey.session import PracticeSession
from sightkey.sheet import StaffManager

logger = logging.getLogger(__name__)

_STAFF_RECT = pygame.Rect(0, 70, WINDOW_WIDTH, 230)


class App:
    def __init__(
        self,
        practice_range: tuple[int, int] = (PRACTICE_RANGE_LOW, PRACTICE_RANGE_HIGH),
        keyboard_octave: int = KEYBOARD_OCTAVE,
        use_midi: bool = True,
        midi_port: int | None = None,
        strict_midi: bool = True,
        seed: int | None = None,
    ) -> None:
        pygame.init()
        self.screen = pygame.display.set_mode((WINDOW_WIDTH, WINDOW_HEIGHT))
        pygame.display.set_caption(WINDOW_TITLE)
        self.clock = pygame.time.Clock()

        rng = random.Random(seed)
        self.notation = PygameNotationBackend()
        self.sheet = StaffManager(self.notation, rng)
        self.session = PracticeSession(self.sheet, rng, practice_range)
        self.session.subscribe(self._on_result)

        geometry = KeyGeometryConfig()
        layout = compute_key_layout(notes_in_octave(keyboard_octave), geometry)
        self.keyboard = KeyboardView(
            layout, WINDOW_WIDTH, WINDOW_HEIGHT - int(geometry.white_key_height) - 40
        )
        self._keyboard_input = KeyboardInput(keyboard_octave)
        self._mouse_note: int | None = None
        self._result_shown_at = 0.0

        self._midi = self._try_midi(midi_port, strict_midi) if use_midi else None
        if self._midi is not None:
            mode = "exact pitch" if strict_midi else "any octave"
            self._midi_status = f"MIDI: connected ({mode})"
        else:
            self._midi_status = "MIDI: off"

    def run(self) -> None:
        self.session.start()
        running = True
        while running:
            self.clock.tick(FPS)
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
                    running = False
                elif event.type == pygame.KEYDOWN and event.key == pygame.K_SPACE:
                    self.session.hint()
                else:
                    self._keyboard_input.feed_event(event)
                    self._handle_mouse(event)

            # On-screen answers are judged by pitch class only
            while (note := self._keyboard_input.poll()) is not None:
                self.session.submit_attempt(note, strict=False)

            self._draw()
            pygame.display.flip()

        self._cleanup()
        pygame.quit()

    def _handle_mouse(self, event: pygame.event.Event) -> None:
        if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            note = self.keyboard.note_at(event.pos)
            if note is not None:
                self._mouse_note = note.midi_number
                self.session.submit_attempt(note, strict=False)
        elif event.type == pygame.MOUSEBUTTONUP and event.button == 1:
            self._mouse_note = None

    def _on_result(self, result: AttemptResult) -> None:
        self._result_shown_at = time.monotonic()

    def _draw(self) -> None:
        self.screen.fill(colors.BG)
        self.notation.render(self.screen, _STAFF_RECT)

        pressed = {self._mouse_note} if self._mouse_note is not None else set()
        self.keyboard.render(self.screen, pressed)

        result = self.session.last_result
        if time.monotonic() - self._result_shown_at > RESULT_DISPLAY_SECONDS:
            result = None
        render_hud(self.screen, self.session.state, result, self._midi_status)

        font = pygame.font.SysFont("monospace", 16)
        hint = font.render(
            "Click a key or type z s x d c v g b h n j m ,   SPACE:hint  ESC:quit",
            True, colors.HINT_TEXT,
        )
        self.screen.blit(hint, (10, WINDOW_HEIGHT - 25))

    def _try_midi(self, port_index: int | None, strict: bool) -> MidiInput | None:
        try:
            midi = MidiInput(port_index)
            MidiNoteAdapter(self.session, strict=strict).attach(midi)
            midi.connect()
        except (UnsupportedEnvironment, MidiDeviceError) as exc:
            logger.info("MIDI input unavailable, on-screen input only: %s", exc)
            return None
        return midi

    def _cleanup(self) -> None:
        if self._midi is not None:
            self._midi.close()
        self._keyboard_input.close()
        self.sheet.clear()
