# ========================= config.py =========================
from dataclasses import dataclass, field
from typing import Optional

@dataclass
class MidiConfig:
    default_bpm: int = 120          # until the first set_tempo
    ms_per_tick: int = 50           # one song tick = 50 ms
    trace_window_ms: int = 10000    # only the first 10 s are traced

@dataclass
class NbsConfig:
    base_rate: float = 20.0         # song ticks per second
    key_offset: int = 33            # raw key byte of the lowest playable note

@dataclass
class ParseConfig:
    default_author: str = "Unknown"
    midi: MidiConfig = field(default_factory=MidiConfig)
    nbs: NbsConfig = field(default_factory=NbsConfig)

@dataclass
class LogConfig:
    level: str = "INFO"
    log_dir: Optional[str] = None   # None -> utils.crashlog.log_dir()
    max_bytes: int = 2 * 1024 * 1024
    backup_count: int = 3

@dataclass
class AppConfig:
    parse: ParseConfig = field(default_factory=ParseConfig)
    log: LogConfig = field(default_factory=LogConfig)
