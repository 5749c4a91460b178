"""
Goal event history.

Append-only audit trail of the GoalEvents produced by handled requests:
- normalize_event: give a raw event the canonical record shape
- record_problems: list what keeps a stored record from being a valid history entry
- EventHistory: in-memory record list, optionally mirrored to a JSONL file

The history is never replayed; Profile is the source of truth.
"""
import json
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Optional
from uuid import uuid4

from goalforest.events import EVENT_TYPES, GoalEvent, goal_event_from_dict
from goalforest.exceptions import StateError
from goalforest.logger import get_logger

logger = get_logger("event_log")

EVENT_SCHEMA_VERSION = "1.0"
REQUIRED_EVENT_FIELDS = ("type", "timestamp", "schema_version", "event_id")


def record_problems(record: Any) -> List[str]:
    """
    Check a stored history record.

    Returns:
        human readable problems; empty if the record is usable.
    """
    if not isinstance(record, dict):
        return [f"record is a {type(record).__name__}, not an object"]

    problems = [f"missing {name}" for name in REQUIRED_EVENT_FIELDS if not record.get(name)]
    event_type = record.get("type")
    if event_type and event_type not in EVENT_TYPES:
        problems.append(f"unknown event type {event_type!r}")
    if not isinstance(record.get("payload"), dict):
        problems.append("payload is not an object")
    return problems


def normalize_event(event: Dict[str, Any]) -> Dict[str, Any]:
    """
    Normalize an event to the canonical shape.
    """
    normalized = dict(event)
    normalized.setdefault("timestamp", datetime.now().isoformat())
    normalized.setdefault("schema_version", EVENT_SCHEMA_VERSION)
    normalized.setdefault("event_id", f"evt_{uuid4().hex[:12]}")
    return normalized


class EventHistory:
    """Ever-growing list of normalized goal event records."""

    def __init__(
        self,
        records: Optional[Iterable[Dict[str, Any]]] = None,
        mirror_path: Optional[Path] = None,
    ):
        self._records: List[Dict[str, Any]] = [normalize_event(r) for r in (records or [])]
        self.mirror_path = mirror_path

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[Dict[str, Any]]:
        return iter(list(self._records))

    @property
    def records(self) -> List[Dict[str, Any]]:
        return list(self._records)

    def append(self, events: Iterable[GoalEvent]) -> List[Dict[str, Any]]:
        """Record events in order; returns the new records."""
        appended = []
        for event in events:
            record = normalize_event(event.to_dict())
            self._records.append(record)
            appended.append(record)
            if self.mirror_path is not None:
                self._mirror(record)
        return appended

    def goal_events(self) -> List[GoalEvent]:
        """Decode every record back into a GoalEvent, oldest first."""
        return [goal_event_from_dict(record) for record in self._records]

    def latest(self, limit: int) -> List[Dict[str, Any]]:
        if limit <= 0:
            return []
        return list(self._records[-limit:])

    def _mirror(self, record: Dict[str, Any]) -> None:
        self.mirror_path.parent.mkdir(parents=True, exist_ok=True)
        try:
            with open(self.mirror_path, "a", encoding="utf-8") as f:
                f.write(json.dumps(record, ensure_ascii=False, default=str) + "\n")
        except OSError as e:
            # the in-memory history stays authoritative
            logger.error(f"Failed to mirror event {record['event_id']} to {self.mirror_path}: {e}")

    def to_list(self) -> List[Dict[str, Any]]:
        return self.records

    @classmethod
    def from_list(cls, records: List[Dict[str, Any]], mirror_path: Optional[Path] = None) -> "EventHistory":
        """
        Rebuild a history from stored records.

        Raises:
            StateError: a record lacks a required field, has an unknown type
                or a non-object payload.
        """
        if not isinstance(records, list):
            raise StateError("goal event history is not a list", corrupted_data=str(records)[:200])
        for index, record in enumerate(records):
            problems = record_problems(record)
            if problems:
                raise StateError(
                    f"history record {index} is invalid: {', '.join(problems)}",
                    corrupted_data=str(record)[:200],
                )
        return cls(records=records, mirror_path=mirror_path)
