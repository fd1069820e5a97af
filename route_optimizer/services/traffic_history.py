from __future__ import annotations

import time
from collections import deque
from dataclasses import dataclass
from threading import Lock
from typing import Any, Deque, Dict, Tuple

RoadKey = Tuple[int, int]


def road_key(a: int, b: int) -> RoadKey:
    return (a, b) if a <= b else (b, a)


@dataclass(frozen=True)
class TrafficLogEntry:
    from_id: int
    to_id: int
    multiplier: float
    current_time: float  # minutes, effective time of the road after the update
    version: int
    timestamp: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "from": self.from_id,
            "to": self.to_id,
            "multiplier": self.multiplier,
            "currentTime": self.current_time,
            "version": self.version,
            "timestamp": int(self.timestamp),
        }


class TrafficHistory:
    """In-memory log of accepted traffic updates, keyed by junction pair."""

    def __init__(self, *, max_entries_per_road: int = 100) -> None:
        if max_entries_per_road < 1:
            raise ValueError("max_entries_per_road must be positive")
        self._max_entries = max_entries_per_road
        self._logs: Dict[RoadKey, Deque[TrafficLogEntry]] = {}
        self._totals: Dict[RoadKey, int] = {}
        self._lock = Lock()

    def record(self, from_id: int, to_id: int, multiplier: float, current_time: float, version: int) -> TrafficLogEntry:
        entry = TrafficLogEntry(from_id, to_id, multiplier, current_time, version, time.time())
        key = road_key(from_id, to_id)
        with self._lock:
            log = self._logs.setdefault(key, deque(maxlen=self._max_entries))
            log.append(entry)
            self._totals[key] = self._totals.get(key, 0) + 1
        return entry

    def road(self, from_id: int, to_id: int, limit: int = 10) -> Dict[str, Any]:
        """Most recent ``limit`` entries for one road plus its update count and mean multiplier."""

        key = road_key(from_id, to_id)
        with self._lock:
            entries = list(self._logs.get(key, ()))
            total = self._totals.get(key, 0)
        average = sum(entry.multiplier for entry in entries) / len(entries) if entries else None
        recent = entries[-limit:] if limit > 0 else []
        return {
            "road": {"from": key[0], "to": key[1]},
            "updates": total,
            "averageMultiplier": average,
            "entries": [entry.to_dict() for entry in recent],
        }

    def summary(self, top: int = 5) -> Dict[str, Any]:
        with self._lock:
            totals = dict(self._totals)
        # Busiest first; ties keep the lower junction pair first.
        ranked = sorted(totals.items(), key=lambda item: (-item[1], item[0]))
        total_updates = sum(totals.values())
        return {
            "roadsMonitored": len(totals),
            "totalUpdates": total_updates,
            "averageUpdatesPerRoad": total_updates / len(totals) if totals else 0.0,
            "mostActive": [{"from": a, "to": b, "updates": count} for (a, b), count in ranked[:top]],
        }

    def __len__(self) -> int:
        with self._lock:
            return sum(self._totals.values())
