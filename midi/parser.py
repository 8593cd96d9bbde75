# midi/parser.py
import logging
import os
from typing import Optional, Union

import mido

from config import ParseConfig
from notes.builder import SongBuilder, round_half_up
from notes.diagnostics import DiagnosticLog
from notes.model import NOTE_NAMES, Note

log = logging.getLogger(__name__)

# pitch class -> key position; every octave lands on keys 6..17
PITCH_POSITIONS = (6, 7, 8, 9, 10, 11, 12, 13, 14, 15, 16, 17)

# mido raises plain Exception subclasses too (KeySignatureError), so any
# Exception aborts the file; MemoryError/KeyboardInterrupt still propagate.
DECODE_ERRORS = (Exception,)

def ticks_to_ms(tick: int, resolution: int, bpm: int) -> int:
    # Uses the current bpm for the whole span since track start, no tempo map.
    ticks_per_second = int(resolution * (bpm / 60.0))
    return int((1000.0 / ticks_per_second) * tick)

def _clock(ms: int) -> str:
    return "%02d:%02d.%d" % ((ms // 60000) % 60, (ms // 1000) % 60, ms % 1000)

def _describe(msg) -> str:
    if msg.type in ("note_on", "note_off"):
        octave = msg.note // 12 - 1
        name = NOTE_NAMES[msg.note % 12]
        state = "on" if msg.type == "note_on" else "off"
        return f"Note {state} > {name}{octave} key={msg.note} velocity: {msg.velocity}"
    if msg.type == "control_change":
        return f"Control: {msg.control} | {msg.value}"
    if msg.type == "program_change":
        return f"Program: {msg.program}"
    if msg.type == "set_tempo":
        return f"Meta Tempo: {mido.tempo2bpm(msg.tempo):g}"
    if msg.type == "track_name":
        return f"Meta Track name: {msg.name}"
    return f"{'Meta' if msg.is_meta else 'Message'} {msg.type}"

def parse_midi(path: Union[str, os.PathLike], cfg: Optional[ParseConfig] = None,
               diag: Optional[DiagnosticLog] = None):
    """Extract one note per note-on/note-off pair from every track.

    Each track keeps its own running tempo and an armed flag: the first
    note message of a pair emits a note (always instrument 0, program
    changes are ignored) and the second one only disarms.
    """
    cfg = cfg or ParseConfig()
    diag = diag if diag is not None else DiagnosticLog(log)
    song = SongBuilder(path, "MIDI", diag, cfg.default_author)
    mcfg = cfg.midi

    try:
        with open(path, "rb") as f:
            mid = mido.MidiFile(file=f)
        res = mid.ticks_per_beat
        # type 2 tracks are independent, mido cannot give them a length
        length = "n/a" if mid.type == 2 else "%.1fs" % mid.length
        log.info("%s: type=%d resolution=%d tracks=%d length=%s",
                 song.source_file_name, mid.type, res, len(mid.tracks), length)

        for track_no, track in enumerate(mid.tracks):
            abs_tick = 0
            bpm = mcfg.default_bpm
            armed = False
            for msg in track:
                abs_tick += msg.time
                ms = ticks_to_ms(abs_tick, res, bpm)

                if msg.type in ("note_on", "note_off"):
                    if not armed:
                        key = PITCH_POSITIONS[msg.note % 12]
                        song.add(round_half_up(ms / mcfg.ms_per_tick), Note(key, 0))
                    armed = not armed
                elif msg.type == "set_tempo":
                    bpm = 60_000_000 // msg.tempo

                if ms < mcfg.trace_window_ms and log.isEnabledFor(logging.DEBUG):
                    log.debug("%d-%d | [%s] %s", track_no, abs_tick, _clock(ms), _describe(msg))
    except DECODE_ERRORS as e:
        diag.error(f"Error reading MIDI file {song.source_file_name} after {len(song)} notes", exc=e)

    return song.build()
