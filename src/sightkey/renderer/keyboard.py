"""Render the on-screen piano keyboard from a computed key layout."""

from __future__ import annotations

from typing import Sequence

import pygame

from sightkey.keyboard_layout import key_at, keyboard_extent
from sightkey.models import PositionedNote
from sightkey.note import Note
from sightkey.renderer.colors import BLACK_KEY, KEY_PRESSED, WHITE_KEY, WHITE_KEY_BORDER


class KeyboardView:
    """Places a laid-out keyboard on screen, centred horizontally at ``top``."""

    def __init__(self, positioned: Sequence[PositionedNote], surface_width: int, top: int) -> None:
        self.positioned = list(positioned)
        self._min_x, width = keyboard_extent(self.positioned)
        self.left = int((surface_width - width) / 2)
        self.top = top

    def key_rect(self, key: PositionedNote) -> pygame.Rect:
        return pygame.Rect(
            int(self.left + key.x - self._min_x), self.top, int(key.width), int(key.height)
        )

    def note_at(self, pos: tuple[int, int]) -> Note | None:
        """Note under a screen position, black keys first."""
        x = pos[0] - self.left + self._min_x
        y = pos[1] - self.top
        return key_at(self.positioned, x, y)

    def render(self, surface: pygame.Surface, pressed: set[int]) -> None:
        # White keys first, black keys on top
        for key in sorted(self.positioned, key=lambda p: p.stack_order):
            rect = self.key_rect(key)
            if key.note.midi_number in pressed:
                color = KEY_PRESSED
            else:
                color = BLACK_KEY if key.stack_order else WHITE_KEY
            pygame.draw.rect(surface, color, rect)
            if not key.stack_order:
                pygame.draw.rect(surface, WHITE_KEY_BORDER, rect, 1)
