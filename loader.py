# loader.py
import os
from typing import Callable, Dict, Optional, Union

from config import ParseConfig
from midi.parser import parse_midi
from nbs.parser import parse_nbs
from notelist.parser import parse_notelist
from notes.diagnostics import DiagnosticLog
from notes.model import Song

PARSERS: Dict[str, Callable[..., Song]] = {
    "midi": parse_midi,
    "nbs": parse_nbs,
    "notelist": parse_notelist,
}

def detect_format(path: Union[str, os.PathLike]) -> str:
    # suffixes are matched literally: "song.MID" is a NoteList
    name = os.path.basename(os.fspath(path))
    if name.endswith(".mid") or name.endswith(".midi"):
        return "midi"
    if name.endswith(".nbs"):
        return "nbs"
    return "notelist"

def parse_song(path: Union[str, os.PathLike], cfg: Optional[ParseConfig] = None,
               diag: Optional[DiagnosticLog] = None) -> Song:
    """Parse any supported file into a Song. Never raises for bad content."""
    return PARSERS[detect_format(path)](path, cfg, diag)
