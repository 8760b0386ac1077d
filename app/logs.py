"""In-memory activity log exposed at GET /logs."""

import logging
import threading
from collections import deque
from datetime import datetime, timezone

from pydantic import BaseModel

logger = logging.getLogger(__name__)

LOG_CAPACITY = 50
RECENT_LOGS = 20


class LogEntry(BaseModel):
    timestamp: str
    message: str


class LogSink:
    """Bounded ring buffer of timestamped messages.

    Only the newest ``capacity`` entries are kept; ``total`` counts every
    append since startup. Each entry is also forwarded to the stdlib logger.
    """

    def __init__(self, capacity: int = LOG_CAPACITY):
        self.capacity = capacity
        self._entries: deque[LogEntry] = deque(maxlen=capacity)
        self._total = 0
        self._lock = threading.Lock()

    def append(self, message: str, level: int = logging.INFO) -> LogEntry:
        entry = LogEntry(timestamp=datetime.now(timezone.utc).isoformat(), message=message)
        with self._lock:
            self._entries.append(entry)
            self._total += 1
        logger.log(level, message)
        return entry

    def recent(self, n: int = RECENT_LOGS) -> list[LogEntry]:
        """Newest ``n`` entries, oldest first."""
        if n <= 0:
            return []
        with self._lock:
            return list(self._entries)[-n:]

    @property
    def total(self) -> int:
        return self._total

    def __len__(self) -> int:
        return len(self._entries)
