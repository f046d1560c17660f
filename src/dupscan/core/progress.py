"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/progress.py
Progress events pushed by the walker and the hash workers, and the counters behind them.

EVENTS
------
ProgressEvent  : periodic liveness update (counts so far, current path, work-list size)
WarningEvent   : a single entry or file could not be processed; the scan goes on
CompleteEvent  : terminal event of a stage with final totals

A sink is any callable accepting one event. Sinks run on whichever thread emits
the event (walker thread or a hash worker), so they must be thread-safe.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Callable, Optional, Union

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProgressEvent:
    stage: str
    processed_dirs: int
    processed_files: int
    current_path: Optional[str]
    queue_depth: int
    kind: str = "progress"


@dataclass(frozen=True)
class WarningEvent:
    path: str
    message: str
    kind: str = "warning"


@dataclass(frozen=True)
class CompleteEvent:
    stage: str
    processed_dirs: int
    processed_files: int
    total_files: int
    cancelled: bool = False
    kind: str = "complete"


ScanEvent = Union[ProgressEvent, WarningEvent, CompleteEvent]
ProgressSink = Callable[[ScanEvent], None]


class ScanCounters:
    """Mutex-protected counters shared by the walker and hash workers."""

    def __init__(self):
        self._lock = threading.Lock()
        self.processed_dirs = 0
        self.processed_files = 0
        self.hashed_files = 0
        self.warnings = 0

    def add_dir(self) -> int:
        with self._lock:
            self.processed_dirs += 1
            return self.processed_dirs

    def add_file(self) -> int:
        with self._lock:
            self.processed_files += 1
            return self.processed_files

    def add_hashed(self) -> int:
        with self._lock:
            self.hashed_files += 1
            return self.hashed_files

    def add_warning(self) -> int:
        with self._lock:
            self.warnings += 1
            return self.warnings

    def snapshot(self) -> dict:
        with self._lock:
            return {
                "processed_dirs": self.processed_dirs,
                "processed_files": self.processed_files,
                "hashed_files": self.hashed_files,
                "warnings": self.warnings,
            }


class ProgressReporter:
    """
    Wraps an optional sink: counts warnings and shields the pipeline from sink errors.
    """

    def __init__(self, sink: Optional[ProgressSink] = None, counters: Optional[ScanCounters] = None):
        self.sink = sink
        self.counters = counters or ScanCounters()

    def emit(self, event: ScanEvent) -> None:
        if self.sink is None:
            return
        try:
            self.sink(event)
        except Exception as e:
            logger.error(f"Error in progress sink: {e}")

    def warning(self, path: str, message: str) -> None:
        self.counters.add_warning()
        logger.warning(message)
        self.emit(WarningEvent(path=path, message=message))


class LoggingProgressSink:
    """Forwards every event to a logger; useful for headless runs."""

    def __init__(self, log: Optional[logging.Logger] = None):
        self.log = log or logger

    def __call__(self, event: ScanEvent) -> None:
        if isinstance(event, ProgressEvent):
            self.log.info(
                f"[{event.stage}] dirs={event.processed_dirs} files={event.processed_files} "
                f"queue={event.queue_depth} at {event.current_path}"
            )
        elif isinstance(event, WarningEvent):
            self.log.warning(f"{event.path}: {event.message}")
        elif isinstance(event, CompleteEvent):
            state = "cancelled" if event.cancelled else "complete"
            self.log.info(
                f"[{event.stage}] {state}: dirs={event.processed_dirs} files={event.processed_files} "
                f"total={event.total_files}"
            )
        else:
            raise TypeError(f"Unknown event type: {type(event).__name__}")
