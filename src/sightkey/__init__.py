"""SightKey: a note-reading trainer for the grand staff and the piano keyboard."""

__version__ = "0.1.0"
