"""
event_log.py - JSON file storage for Connect Four events

This module keeps an append-only list of serialised events in a JSON file.
Access goes through a file lock so several processes can share one log, and
writes replace the file atomically.
"""

import json
import os
import shutil
from typing import Iterable, List

import filelock

from connect4_events.debug import debug
from connect4_events.game.events import GameEvent, event_from_dict, event_to_dict
from connect4_events.game.rules import Games, replay_events


class EventLog:
    """
    An event log stored as a JSON list at ``path``.

    A missing file is an empty log. A file that is not valid JSON raises
    ValueError instead of being treated as empty, so no events are lost by
    overwriting it.
    """

    def __init__(self, path: str, timeout: float = 10.0):
        self.path = os.path.abspath(path)
        os.makedirs(os.path.dirname(self.path), exist_ok=True)
        self._lock = filelock.FileLock(f"{self.path}.lock", timeout=timeout)

    def _read_records(self) -> List[dict]:
        if not os.path.exists(self.path):
            return []
        with open(self.path, 'r') as f:
            try:
                records = json.load(f)
            except json.JSONDecodeError as exc:
                debug.error(f"Error decoding JSON from {self.path}: {exc}", "data")
                raise ValueError(f"Event log {self.path} is not valid JSON") from exc
        if not isinstance(records, list):
            raise ValueError(f"Event log {self.path} does not hold a list of events")
        return records

    def _write_records(self, records: List[dict]) -> None:
        temp_file = f"{self.path}.tmp"
        with open(temp_file, 'w') as f:
            json.dump(records, f, indent=2)
        shutil.move(temp_file, self.path)

    def load(self) -> List[GameEvent]:
        """
        Read every event in the log.

        Returns:
            Events in the order they were appended
        """
        with self._lock:
            records = self._read_records()
        events = [event_from_dict(record) for record in records]
        debug.debug(f"Loaded {len(events)} events from {self.path}", "data")
        return events

    def extend(self, events: Iterable[GameEvent]) -> int:
        """
        Append events to the log.

        Returns:
            Number of events in the log afterwards
        """
        new_records = [event_to_dict(event) for event in events]
        with self._lock:
            records = self._read_records()
            records.extend(new_records)
            self._write_records(records)
        debug.trace(f"Appended {len(new_records)} events to {self.path}", "data")
        return len(records)

    def append(self, event: GameEvent) -> int:
        return self.extend([event])

    def replay(self) -> Games:
        """Rebuild the games collection from the log."""
        return replay_events(self.load())

    def clear(self) -> None:
        with self._lock:
            if os.path.exists(self.path):
                os.remove(self.path)
        debug.info(f"Cleared event log {self.path}", "data")

    def __len__(self) -> int:
        with self._lock:
            return len(self._read_records())
