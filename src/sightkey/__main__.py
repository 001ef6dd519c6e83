"""Entry point for `python -m sightkey` or the `sightkey` console script."""

import argparse
import logging

from sightkey.app import App
from sightkey.config import KEYBOARD_OCTAVE, PRACTICE_RANGE_HIGH, PRACTICE_RANGE_LOW
from sightkey.note import DomainError, Note


def note_arg(value: str) -> int:
    """Accept a MIDI number (``60``) or a note name (``C4``)."""
    try:
        if value.lstrip("-").isdigit():
            return Note.from_midi_number(int(value)).midi_number
        return Note.parse(value).midi_number
    except DomainError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def main() -> None:
    parser = argparse.ArgumentParser(description="SightKey: note reading trainer")
    parser.add_argument("--low", type=note_arg, default=PRACTICE_RANGE_LOW,
                        help="Lowest target note, MIDI number or name (default E2)")
    parser.add_argument("--high", type=note_arg, default=PRACTICE_RANGE_HIGH,
                        help="Highest target note, MIDI number or name (default G5)")
    parser.add_argument("--octave", type=int, default=KEYBOARD_OCTAVE, choices=range(-1, 9),
                        help="Octave shown on the on-screen keyboard")
    parser.add_argument("--no-midi", action="store_true", help="Do not open a MIDI device")
    parser.add_argument("--midi-port", type=int, default=None, help="MIDI input port index")
    parser.add_argument("--lenient-midi", action="store_true",
                        help="Accept MIDI answers in any octave")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for targets")
    parser.add_argument("--log-level", default="WARNING",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if args.low > args.high:
        parser.error("--low must not be above --high")

    app = App(
        practice_range=(args.low, args.high),
        keyboard_octave=args.octave,
        use_midi=not args.no_midi,
        midi_port=args.midi_port,
        strict_midi=not args.lenient_midi,
        seed=args.seed,
    )
    app.run()


if __name__ == "__main__":
    main()
