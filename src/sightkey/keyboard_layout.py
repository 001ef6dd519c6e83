"""Piano keyboard geometry: where each key sits, how big it is, what is on top."""

from __future__ import annotations

from typing import Sequence

from sightkey.models import KeyGeometryConfig, PositionedNote
from sightkey.note import OCTAVE_NOTE_COUNT, Note

# White-key index of each semitone; a black key shares the index of the
# white key to its left.
_WHITE_KEY_INDEX = [0, 0, 1, 1, 2, 3, 3, 4, 4, 5, 5, 6]


def key_x(note: Note, geometry: KeyGeometryConfig) -> float:
    """Left edge of a key, measured from the left edge of C-1."""
    white_idx = _WHITE_KEY_INDEX[note.pitch_class]
    octave_idx = note.octave + 1
    x = (
        white_idx * (geometry.white_key_width + geometry.key_gap)
        + octave_idx * geometry.octave_width
    )
    if note.is_black_key:
        # Centre the black key over the gap between its two white neighbours
        x += geometry.white_key_width - geometry.black_key_width / 2 + geometry.key_gap / 2
    return x


def compute_key_layout(
    notes: Sequence[Note],
    geometry: KeyGeometryConfig,
) -> list[PositionedNote]:
    """Lay out keys for ``notes``.

    Args:
        notes: Notes in strictly ascending pitch order.
        geometry: Key sizes.

    Returns:
        One PositionedNote per input note, in input order (which is also
        ascending x).

    Raises:
        ValueError: If ``notes`` is not strictly ascending by MIDI number.
    """
    for prev, cur in zip(notes, notes[1:]):
        if cur.midi_number <= prev.midi_number:
            raise ValueError(
                f"Notes must be in ascending pitch order: {prev.full_name} before {cur.full_name}"
            )

    positioned: list[PositionedNote] = []
    for note in notes:
        black = note.is_black_key
        positioned.append(PositionedNote(
            note=note,
            x=key_x(note, geometry),
            width=geometry.black_key_width if black else geometry.white_key_width,
            height=geometry.black_key_height if black else geometry.white_key_height,
            stack_order=1 if black else 0,
        ))
    return positioned


def keyboard_extent(positioned: Sequence[PositionedNote]) -> tuple[float, float]:
    """Return ``(min_x, width)`` covering every key; ``(0.0, 0.0)`` when empty."""
    if not positioned:
        return 0.0, 0.0
    min_x = min(p.x for p in positioned)
    max_x = max(p.right for p in positioned)
    return min_x, max_x - min_x


def key_at(positioned: Sequence[PositionedNote], x: float, y: float) -> Note | None:
    """Hit-test a point in layout coordinates (y = 0 at the top of the keys).

    Keys with a higher stack order win where they overlap.
    """
    for key in sorted(positioned, key=lambda p: p.stack_order, reverse=True):
        if key.x <= x < key.right and 0 <= y < key.height:
            return key.note
    return None
