"""Heads-up display: score, accuracy and the verdict on the last answer."""

from __future__ import annotations

import pygame

from sightkey.models import AttemptResult, SessionState
from sightkey.renderer.colors import HUD_TEXT, RESULT_CORRECT, RESULT_WRONG


def render_hud(
    surface: pygame.Surface,
    state: SessionState,
    result: AttemptResult | None = None,
    midi_status: str = "",
) -> None:
    font = pygame.font.SysFont("monospace", 20)

    lines = [
        f"Score: {state.correct_attempts}/{state.total_attempts}",
        f"Accuracy: {state.accuracy_pct:.0f}%",
    ]
    if midi_status:
        lines.append(midi_status)

    y = 10
    for line in lines:
        text = font.render(line, True, HUD_TEXT)
        surface.blit(text, (10, y))
        y += 28

    if result is not None:
        color = RESULT_CORRECT if result.is_correct else RESULT_WRONG
        verdict = font.render(result.message, True, color)
        surface.blit(verdict, (surface.get_width() - verdict.get_width() - 10, 10))
