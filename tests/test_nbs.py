import io
import struct

import pytest

from nbs.parser import parse_nbs, fold_key, remap_instrument, INSTRUMENT_REMAP
from nbs.reader import ByteReader
from notes.diagnostics import DiagnosticLog
from notes.model import Note


def test_metadata_and_notes(make_nbs):
    path = make_nbs([(1, [(0, 45), (2, 33)]), (2, [(5, 57)])],
                    name="Tune", author="Someone", orig_author="Composer")
    song = parse_nbs(path)

    assert song.title == "Tune"
    assert song.author == "Composer"
    assert song.format_label == "NBS v4"
    assert song.source_file_name == "song.nbs"
    assert dict(song.events) == {
        0: (Note(12, 0), Note(0, 1)),
        2: (Note(24, 7),),
    }
    assert song.diagnostics == ()


def test_author_falls_back_to_song_author_then_unknown(make_nbs):
    assert parse_nbs(make_nbs([], author="Someone")).author == "Someone"
    song = parse_nbs(make_nbs([], filename="my tune.nbs"))
    assert song.author == "Unknown"
    assert song.title == "my tune"


@pytest.mark.parametrize("version", [0, 1, 2, 3, 4, 5])
def test_header_layout_per_version(make_nbs, version):
    song = parse_nbs(make_nbs([(1, [(0, 40)])], version=version, name="V"))
    assert song.format_label == f"NBS v{version}"
    assert song.title == "V"
    assert dict(song.events) == {0: (Note(7, 0),)}
    assert not [d for d in song.diagnostics if d.level == "error"]


def test_tempo_scales_tick_jumps(make_nbs):
    # 10 t/s: every jump covers two song ticks, starting from -1
    song = parse_nbs(make_nbs([(1, [(0, 33)]), (1, [(0, 34)]), (3, [(0, 35)])], tempo=1000))
    assert list(song.events) == [1, 3, 9]


def test_instrument_remap():
    assert [remap_instrument(i) for i in range(8)] == [0, 4, 1, 2, 4, 7, 5, 6]
    assert [remap_instrument(i) for i in range(8, 16)] == list(range(8, 16))
    assert remap_instrument(16) == 0
    assert remap_instrument(255) == 0
    assert len(INSTRUMENT_REMAP) == 16


def test_fold_key():
    assert fold_key(-3) == 9
    assert fold_key(37) == 13
    assert fold_key(25) == 13
    assert fold_key(0) == 0
    assert fold_key(24) == 24


def test_out_of_range_keys_are_folded_with_notice(make_nbs):
    notices = []
    path = make_nbs([(1, [(0, 30)]), (1, [(0, 70)])])
    song = parse_nbs(path, diag=DiagnosticLog(on_notice=notices.append))

    assert dict(song.events) == {0: (Note(9, 0),), 1: (Note(13, 0),)}
    assert len(notices) == 2
    assert "below" in notices[0].message and "-3" in notices[0].message
    assert "above" in notices[1].message and "37" in notices[1].message
    assert all(d.user_facing and d.level == "warning" for d in notices)
    assert song.warnings == tuple(notices)


def test_every_raw_byte_lands_in_range(make_nbs):
    layers = [(b, b) for b in range(256)]
    song = parse_nbs(make_nbs([(1, layers)]))

    assert song.note_count == 256
    for _, note in song.iter_notes():
        assert 0 <= note.key <= 24
        assert 0 <= note.instrument <= 15


def test_truncated_stream_keeps_parsed_notes(make_nbs):
    path = make_nbs([(1, [(0, 40)]), (2, [(0, 41)])], truncate=-3, name="Cut")
    song = parse_nbs(path)

    assert song.title == "Cut"
    assert song.format_label == "NBS v4"
    assert dict(song.events) == {0: (Note(7, 0),), 2: (Note(8, 0),)}
    errors = [d for d in song.diagnostics if d.level == "error"]
    assert len(errors) == 1


def test_zero_tempo_is_a_decode_error(make_nbs):
    song = parse_nbs(make_nbs([(1, [(0, 40)])], tempo=0, name="Still"))
    assert song.title == "Still"
    assert song.note_count == 0
    assert song.diagnostics[-1].level == "error"


def test_empty_and_missing_files(tmp_path):
    empty = tmp_path / "empty.nbs"
    empty.write_bytes(b"")
    for path in (empty, tmp_path / "missing.nbs"):
        song = parse_nbs(path)
        assert song.events == {}
        assert song.author == "Unknown"
        assert song.format_label == "NBS v0"
        assert song.title == path.stem


def test_parsing_twice_gives_equal_songs(make_nbs):
    path = make_nbs([(1, [(1, 20), (3, 40)]), (4, [(7, 90)])], name="Again")
    assert parse_nbs(path) == parse_nbs(path)


def test_byte_reader():
    data = struct.pack("<HBI", 0x1234, 7, 3) + b"abc" + b"\x01"
    r = ByteReader(io.BytesIO(data))
    assert r.read_u16() == 0x1234
    assert r.read_u8() == 7
    assert r.read_string() == "abc"
    assert r.pos == 10
    with pytest.raises(EOFError, match="offset 10"):
        r.read_u16("tick jump")


def test_byte_reader_huge_length_fails_fast():
    r = ByteReader(io.BytesIO(struct.pack("<I", 0xFFFFFFFF) + b"xy"))
    with pytest.raises(EOFError):
        r.read_string()
