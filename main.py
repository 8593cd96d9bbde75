# main.py
import sys, os
sys.path.append(os.path.dirname(__file__))  # run as a script from a checkout

import argparse
import logging
import traceback
from logging.handlers import RotatingFileHandler
from typing import List, Optional

from config import AppConfig, LogConfig, MidiConfig, ParseConfig
from loader import parse_song
from notes.diagnostics import DiagnosticLog
from notes.model import Song
from utils.crashlog import setup_crashlog, log_exception, log_dir

FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

def _init_logging(cfg: LogConfig):
    logs = log_dir(cfg.log_dir)
    log_path = os.path.join(logs, "app.log")

    root = logging.getLogger()
    if root.handlers:
        return

    logging.basicConfig(level=cfg.level, format=FORMAT, encoding="utf-8")
    try:
        fh = RotatingFileHandler(log_path, maxBytes=cfg.max_bytes, backupCount=cfg.backup_count, encoding="utf-8")
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(logging.Formatter(FORMAT))
        root.addHandler(fh)
    except OSError as e:
        logging.warning("file logging disabled: %s", e)

def summary(song: Song) -> str:
    return (f"{song.source_file_name} | {song.title} by {song.author} | {song.format_label} | "
            f"{song.note_count} notes over {song.length} ticks")

def format_events(song: Song) -> List[str]:
    out = []
    for tick, notes in song.events.items():
        out.append(f"  {tick:>6}: " + ", ".join(f"{n.key}/{n.instrument_name}" for n in notes))
    return out

def build_arg_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="noteblock-songs",
                                 description="Parse MIDI, NBS and NoteList files into note block songs.")
    ap.add_argument("files", nargs="+")
    ap.add_argument("--events", action="store_true", help="list every tick and its notes")
    ap.add_argument("--verbose", "-v", action="store_true", help="debug logging (MIDI event trace)")
    ap.add_argument("--log-dir", default=None)
    ap.add_argument("--midi-bpm", type=int, default=120, help="tempo before the first tempo event")
    return ap

def main(argv: Optional[List[str]] = None) -> int:
    args = build_arg_parser().parse_args(argv)
    cfg = AppConfig(
        parse=ParseConfig(midi=MidiConfig(default_bpm=args.midi_bpm)),
        log=LogConfig(level="DEBUG" if args.verbose else "INFO", log_dir=args.log_dir),
    )
    setup_crashlog(cfg.log.log_dir)
    _init_logging(cfg.log)

    for path in args.files:
        notices = []
        song = parse_song(path, cfg.parse, DiagnosticLog(on_notice=notices.append))
        print(summary(song))
        if args.events:
            print("\n".join(format_events(song)))
        for d in notices:
            print(f"  ! {d.message}")
    return 0

if __name__ == '__main__':
    try:
        sys.exit(main())
    except Exception as e:
        try:
            log_exception("Top-level exception", e)
        except OSError:
            pass
        logging.error("Unhandled exception: %s", e, exc_info=True)
        print("Something went wrong, see app.log and error-*.txt in the logs/ folder")
        traceback.print_exc()
        sys.exit(1)
