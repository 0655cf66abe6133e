# secureguard/history.py
"""
Most-recent-first log of completed checks.

The whole list is stored as one JSON document under a single key and is
rewritten on every change:

- records are unique by their exact (case-sensitive) raw url; re-checking a
  url moves it to the front with the new score
- at most HISTORY_LIMIT records are kept; the oldest fall off the end
"""
from __future__ import annotations

import json
import logging
import time
from dataclasses import asdict

from secureguard.models import HistoryRecord
from secureguard.storage import HISTORY_KEY, KeyValueStore

log = logging.getLogger(__name__)

HISTORY_LIMIT = 20


def now_ms() -> int:
    return int(time.time() * 1000)


def _decode(raw: str) -> list[HistoryRecord]:
    items = json.loads(raw)
    if not isinstance(items, list):
        raise ValueError("history is not a list")
    return [
        HistoryRecord(url=str(i["url"]), score=int(i["score"]), timestamp=int(i["timestamp"]))
        for i in items
    ]


class HistoryStore:
    def __init__(self, store: KeyValueStore, limit: int = HISTORY_LIMIT):
        self._store = store
        self.limit = limit

    def _write(self, records: list[HistoryRecord]) -> None:
        self._store.set(HISTORY_KEY, json.dumps([asdict(r) for r in records]))

    def list(self) -> tuple[HistoryRecord, ...]:
        """Snapshot of all records, newest first."""
        raw = self._store.get(HISTORY_KEY)
        if raw is None:
            return ()
        try:
            return tuple(_decode(raw))
        except (TypeError, ValueError, KeyError) as e:
            log.error("Error parsing URL history, treating it as empty: %s", e)
            return ()

    def append(self, record: HistoryRecord) -> tuple[HistoryRecord, ...]:
        """Insert `record` at the front, replacing any record for the same url."""
        records = [r for r in self.list() if r.url != record.url]
        records.insert(0, record)
        del records[self.limit:]
        self._write(records)
        log.debug("History now holds %d records.", len(records))
        return tuple(records)

    def add(self, url: str, score: int, timestamp: int | None = None) -> tuple[HistoryRecord, ...]:
        return self.append(
            HistoryRecord(url=url, score=score, timestamp=now_ms() if timestamp is None else timestamp)
        )

    def clear(self) -> None:
        self._write([])
        log.info("History cleared.")

    def search(self, term: str) -> list[tuple[int, HistoryRecord]]:
        """
        (position, record) pairs whose url contains `term`, ignoring case.
        Positions index into `list()` so a hit can be passed to `get`.
        """
        needle = term.lower()
        return [(i, r) for i, r in enumerate(self.list()) if needle in r.url.lower()]

    def get(self, index: int) -> HistoryRecord:
        """The record at `index` (0 = newest). Raises IndexError."""
        records = self.list()
        if index < 0:
            raise IndexError(index)
        return records[index]
