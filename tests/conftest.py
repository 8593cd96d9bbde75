import struct

import mido
import pytest


def _string(s: str) -> bytes:
    b = s.encode("utf-8")
    return struct.pack("<I", len(b)) + b


def nbs_bytes(ticks, version=4, name="", author="", orig_author="", tempo=2000):
    """Build an NBS file body.

    ``ticks`` is a list of ``(tick_jump, [(instrument_byte, key_byte), ...])``.
    With the default tempo (20.00 t/s) one jump is one song tick, and the
    first jump of 1 lands on tick 0.
    """
    out = bytearray()
    if version == 0:
        out += struct.pack("<H", 3)  # old-style layer count
        out += bytes(2)
    else:
        out += struct.pack("<H", 0) + bytes([version])
        out += bytes(5 if version >= 3 else 3)
    out += _string(name) + _string(author) + _string(orig_author) + _string("a description")
    out += struct.pack("<H", tempo)
    out += bytes(23)
    out += _string("imported.mid")
    if version >= 4:
        out += bytes(4)
    for jump, layers in ticks:
        out += struct.pack("<H", jump)
        for instrument, key in layers:
            out += struct.pack("<H", 1) + bytes([instrument, key])
            if version >= 4:
                out += bytes([100, 100, 0, 0])
        out += struct.pack("<H", 0)
    out += struct.pack("<H", 0)
    return bytes(out)


@pytest.fixture
def make_nbs(tmp_path):
    def _make(ticks, filename="song.nbs", truncate=None, **kw):
        data = nbs_bytes(ticks, **kw)
        if truncate is not None:
            data = data[:truncate]
        path = tmp_path / filename
        path.write_bytes(data)
        return path
    return _make


@pytest.fixture
def make_midi(tmp_path):
    """Write a MIDI file from lists of mido messages, one list per track.

    500 ticks per beat at 120 bpm makes one MIDI tick exactly one ms.
    """
    def _make(tracks, filename="song.mid", ticks_per_beat=500):
        mid = mido.MidiFile(ticks_per_beat=ticks_per_beat)
        for messages in tracks:
            track = mido.MidiTrack()
            track.extend(messages)
            mid.tracks.append(track)
        path = tmp_path / filename
        mid.save(str(path))
        return path
    return _make


@pytest.fixture
def make_text(tmp_path):
    def _make(text, filename="song.nl"):
        path = tmp_path / filename
        path.write_bytes(text.encode("utf-8") if isinstance(text, str) else text)
        return path
    return _make
