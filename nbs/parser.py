# nbs/parser.py
import logging
import os
import struct
from typing import Optional, Union

from config import ParseConfig
from nbs.reader import ByteReader
from notes.builder import SongBuilder, round_half_up
from notes.diagnostics import DiagnosticLog
from notes.model import KEY_RANGE, Note

log = logging.getLogger(__name__)

# NBS instrument id -> note block instrument index. Ids above 15 (custom
# instruments) fall back to harp.
INSTRUMENT_REMAP = (0, 4, 1, 2, 4, 7, 5, 6, 8, 9, 10, 11, 12, 13, 14, 15)

DECODE_ERRORS = (OSError, EOFError, ValueError, struct.error, ZeroDivisionError)

def remap_instrument(raw: int) -> int:
    return INSTRUMENT_REMAP[raw] if 0 <= raw < len(INSTRUMENT_REMAP) else 0

def fold_key(key: int) -> int:
    """Bring a key offset back into 0..24: below -> 0..11, above -> 12..23."""
    if key < 0:
        return key % 12
    if key >= KEY_RANGE:
        return key % 12 + 12
    return key

def header_skip(version: int) -> int:
    return 5 if version >= 3 else 3 if version >= 1 else 2

def parse_nbs(path: Union[str, os.PathLike], cfg: Optional[ParseConfig] = None,
              diag: Optional[DiagnosticLog] = None):
    cfg = cfg or ParseConfig()
    diag = diag if diag is not None else DiagnosticLog(log)
    song = SongBuilder(path, "NBS v0", diag, cfg.default_author)
    version = 0

    try:
        with open(path, "rb") as f:
            r = ByteReader(f)

            # new-style files start with a zero where the old layer count was
            if r.read_u16("signature") == 0:
                version = r.read_u8("version")
            song.format_label = f"NBS v{version}"

            r.skip(header_skip(version), "header")
            name = r.read_string("song name")
            author = r.read_string("song author")
            orig_author = r.read_string("original author")
            if name:
                song.title = name
            if orig_author:
                song.author = orig_author
            elif author:
                song.author = author

            r.read_string("description")
            tempo = r.read_u16("tempo") / 100
            if tempo == 0:
                raise ValueError("tempo is 0")

            r.skip(23, "header")
            r.read_string("import name")
            if version >= 4:
                r.skip(4, "loop header")

            step = cfg.nbs.base_rate / tempo
            tick = -1.0
            while True:
                jump = r.read_u16("tick jump")
                if jump == 0:
                    break
                tick += jump * step

                while r.read_u16("layer jump") != 0:
                    instrument = remap_instrument(r.read_u8("instrument"))
                    key = r.read_u8("key") - cfg.nbs.key_offset
                    if key < 0:
                        diag.notice(f"Note @{tick:g} Key: {key} is below the 2-octave range!", tick=tick)
                    elif key >= KEY_RANGE:
                        diag.notice(f"Note @{tick:g} Key: {key} is above the 2-octave range!", tick=tick)

                    song.add(max(0, round_half_up(tick)), Note(fold_key(key), instrument))

                    if version >= 4:
                        r.skip(4, "velocity/panning/pitch")
    except DECODE_ERRORS as e:
        diag.error(f"Error reading NBS file {song.source_file_name} after {len(song)} notes", exc=e)

    return song.build()
