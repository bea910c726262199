# /services/history.py
"""
In-memory audit trail of completed user actions, newest first.
Discarded on process restart.
"""
import time
from typing import Callable, List

import config
from models import HistoryRecord


class HistoryLog:
    def __init__(self, limit: int = config.HISTORY_LIMIT, clock: Callable[[], float] = time.time):
        self.limit = limit
        self._clock = clock
        self._entries: List[HistoryRecord] = []

    def append(self, action: str, details: str) -> HistoryRecord:
        entry = HistoryRecord(action=action, timestamp=int(self._clock()), details=details)
        self._entries = [entry, *self._entries][: self.limit]
        return entry

    def entries(self) -> List[HistoryRecord]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)
