# notes/builder.py
import math
import os
from typing import Dict, List, Optional, Union

from notes.diagnostics import DiagnosticLog
from notes.model import Note, Song

DEFAULT_AUTHOR = "Unknown"

def round_half_up(x: float) -> int:
    """Round .5 away from -inf (not to even), so 2.5 -> 3 and -0.5 -> 0."""
    return math.floor(x + 0.5)

class SongBuilder:
    """Accumulator shared by every decoder.

    Title and author start at their defaults (file base name, "Unknown") and
    are overwritten by whatever the format declares. ``build()`` can be
    called at any point, which is how a decoder that fails half way still
    returns the notes it already found.
    """
    def __init__(self, path: Union[str, os.PathLike], format_label: str,
                 log: Optional[DiagnosticLog] = None, default_author: str = DEFAULT_AUTHOR):
        name = os.path.basename(os.fspath(path))
        self.source_file_name = name
        self.title = os.path.splitext(name)[0]
        self.author = default_author
        self.format_label = format_label
        self.log = log if log is not None else DiagnosticLog()
        self._log_start = len(self.log)
        self._events: Dict[int, List[Note]] = {}

    def add(self, tick: int, note: Note):
        if tick < 0:
            raise ValueError(f"negative tick: {tick}")
        self._events.setdefault(int(tick), []).append(note)

    def __len__(self) -> int:
        return sum(len(ns) for ns in self._events.values())

    def build(self) -> Song:
        return Song(
            source_file_name=self.source_file_name,
            title=self.title,
            author=self.author,
            format_label=self.format_label,
            events={t: tuple(ns) for t, ns in self._events.items()},
            diagnostics=self.log.since(self._log_start),
        )
