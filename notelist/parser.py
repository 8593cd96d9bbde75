# notelist/parser.py
# NoteList: "// Name: " and "// Author: " header lines, then one
# "tick:key:instrument" note per line.
import logging
import os
import re
from typing import Optional, Tuple, Union

from config import ParseConfig
from notes.builder import SongBuilder
from notes.diagnostics import DiagnosticLog
from notes.model import Note

log = logging.getLogger(__name__)

NAME_PREFIX = "// Name: "
AUTHOR_PREFIX = "// Author: "

_INT = re.compile(r"[+-]?[0-9]+")
INT_MIN, INT_MAX = -2**31, 2**31 - 1

def _int(field: str) -> int:
    """Signed 32-bit decimal, nothing else."""
    if not _INT.fullmatch(field):
        raise ValueError(f"not an integer: {field!r}")
    value = int(field)
    if not INT_MIN <= value <= INT_MAX:
        raise ValueError(f"integer out of 32-bit range: {field}")
    return value

def parse_note_line(line: str) -> Tuple[int, Note]:
    """``"tick:key:instrument"`` -> ``(tick, Note)``. Extra fields are ignored.

    Raises ValueError/IndexError for anything else, including out of range
    values.
    """
    parts = line.split(":")
    tick = _int(parts[0])
    if tick < 0:
        raise ValueError(f"negative tick: {tick}")
    return tick, Note(_int(parts[1]), _int(parts[2]))

def parse_notelist(path: Union[str, os.PathLike], cfg: Optional[ParseConfig] = None,
                   diag: Optional[DiagnosticLog] = None):
    cfg = cfg or ParseConfig()
    diag = diag if diag is not None else DiagnosticLog(log)
    song = SongBuilder(path, "Notelist", diag, cfg.default_author)

    try:
        with open(path, "r", encoding="utf-8-sig") as f:
            for lineno, raw in enumerate(f, 1):
                line = raw.rstrip("\r\n")
                if line.startswith(NAME_PREFIX):
                    song.title = line[len(NAME_PREFIX):]
                elif line.startswith(AUTHOR_PREFIX):
                    song.author = line[len(AUTHOR_PREFIX):]
                elif line:
                    try:
                        tick, note = parse_note_line(line)
                    except (ValueError, IndexError):
                        diag.warn(f"Error trying to parse note: {line}", line=lineno)
                        continue
                    song.add(tick, note)
    except (OSError, UnicodeDecodeError) as e:
        diag.error(f"Error reading NL file {song.source_file_name}", exc=e)

    return song.build()
