# notes/diagnostics.py
import logging
from dataclasses import dataclass
from typing import Callable, Iterator, List, Optional, Tuple

_LEVELS = {"info": logging.INFO, "warning": logging.WARNING, "error": logging.ERROR}

@dataclass(frozen=True)
class Diagnostic:
    level: str                    # "info" | "warning" | "error"
    message: str
    line: Optional[int] = None    # 1-based, text formats only
    tick: Optional[float] = None
    user_facing: bool = False

class DiagnosticLog:
    """Collects the recoverable problems found while parsing.

    Each record is mirrored to ``logger``. User-facing records (content that
    will play back differently from the source) are also handed to
    ``on_notice``, which is where a host shows them to the player.
    """
    def __init__(self, logger: Optional[logging.Logger] = None,
                 on_notice: Optional[Callable[[Diagnostic], None]] = None):
        self.logger = logger or logging.getLogger(__name__)
        self.on_notice = on_notice
        self.records: List[Diagnostic] = []

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(self.records)

    def since(self, start: int) -> Tuple[Diagnostic, ...]:
        return tuple(self.records[start:])

    def info(self, message: str, **where) -> Diagnostic:
        return self._emit(Diagnostic("info", message, **where))

    def warn(self, message: str, **where) -> Diagnostic:
        return self._emit(Diagnostic("warning", message, **where))

    def error(self, message: str, exc: Optional[BaseException] = None, **where) -> Diagnostic:
        return self._emit(Diagnostic("error", message, **where), exc)

    def notice(self, message: str, **where) -> Diagnostic:
        d = self._emit(Diagnostic("warning", message, user_facing=True, **where))
        if self.on_notice is not None:
            self.on_notice(d)
        return d

    def _emit(self, d: Diagnostic, exc: Optional[BaseException] = None) -> Diagnostic:
        self.records.append(d)
        if exc is not None:
            self.logger.log(_LEVELS[d.level], "%s (%s: %s)", d.message, type(exc).__name__, exc,
                            exc_info=(type(exc), exc, exc.__traceback__))
        else:
            self.logger.log(_LEVELS[d.level], "%s", d.message)
        return d
