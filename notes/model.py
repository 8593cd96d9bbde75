# notes/model.py
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterator, Mapping, Tuple

from notes.diagnostics import Diagnostic

KEY_RANGE = 25          # 2 octaves: keys 0..24
INSTRUMENT_COUNT = 16

NOTE_NAMES = ("C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B")

INSTRUMENT_NAMES = (
    "harp", "basedrum", "snare", "hat",
    "bass", "flute", "bell", "guitar",
    "chime", "xylophone", "iron_xylophone", "cow_bell",
    "didgeridoo", "bit", "banjo", "pling",
)

@dataclass(frozen=True)
class Note:
    key: int         # position in the 2-octave range
    instrument: int  # index into INSTRUMENT_NAMES

    def __post_init__(self):
        if not 0 <= self.key < KEY_RANGE:
            raise ValueError(f"key out of range 0..{KEY_RANGE - 1}: {self.key}")
        if not 0 <= self.instrument < INSTRUMENT_COUNT:
            raise ValueError(f"instrument out of range 0..{INSTRUMENT_COUNT - 1}: {self.instrument}")

    @property
    def instrument_name(self) -> str:
        return INSTRUMENT_NAMES[self.instrument]

@dataclass(frozen=True, eq=False)
class Song:
    """A parsed song: notes grouped by tick, in the order they were found.

    ``events`` is read-only; ticks keep first-encounter order and the notes
    of one tick keep discovery order.
    """
    source_file_name: str
    title: str
    author: str
    format_label: str
    events: Mapping[int, Tuple[Note, ...]] = field(default_factory=lambda: MappingProxyType({}))
    diagnostics: Tuple[Diagnostic, ...] = ()  # not part of equality

    def __post_init__(self):
        if not isinstance(self.events, MappingProxyType):
            frozen = {int(t): tuple(ns) for t, ns in self.events.items() if ns}
            object.__setattr__(self, "events", MappingProxyType(frozen))

    def __eq__(self, other):
        if not isinstance(other, Song):
            return NotImplemented
        return (self.source_file_name, self.title, self.author, self.format_label) == \
            (other.source_file_name, other.title, other.author, other.format_label) \
            and list(self.events.items()) == list(other.events.items())

    def __hash__(self):
        return hash((self.source_file_name, self.title, self.author, self.format_label,
                     tuple(self.events.items())))

    @property
    def note_count(self) -> int:
        return sum(len(ns) for ns in self.events.values())

    @property
    def length(self) -> int:
        return max(self.events, default=0)

    @property
    def warnings(self) -> Tuple[Diagnostic, ...]:
        return tuple(d for d in self.diagnostics if d.level == "warning")

    def iter_notes(self) -> Iterator[Tuple[int, Note]]:
        for tick, notes in self.events.items():
            for n in notes:
                yield tick, n
