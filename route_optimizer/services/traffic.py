from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from route_optimizer.core.errors import JunctionNotFound, RoadNotFound, RouteOptimizerError
from route_optimizer.models.graph_store import GraphStore
from route_optimizer.services.traffic_history import TrafficHistory

logger = logging.getLogger(__name__)

SEVERE_MULTIPLIER = 3.0


@dataclass(frozen=True)
class TrafficUpdateResult:
    success: bool
    message: str
    version: Optional[int] = None
    error: Optional[RouteOptimizerError] = None


class TrafficUpdateService:
    """Only writer of road multipliers; validates requests before touching the store."""

    def __init__(self, graph_store: GraphStore, history: Optional[TrafficHistory] = None) -> None:
        self._graph_store = graph_store
        self._history = history if history is not None else TrafficHistory()

    @property
    def history(self) -> TrafficHistory:
        return self._history

    def apply(self, from_id: Any, to_id: Any, multiplier: Any) -> TrafficUpdateResult:
        try:
            source = _parse_junction_id(from_id)
            target = _parse_junction_id(to_id)
            snapshot = self._graph_store.apply_traffic_update(source, target, _coerce_multiplier(multiplier))
        except RouteOptimizerError as exc:
            logger.info("Rejected traffic update %r<->%r x%r: %s", from_id, to_id, multiplier, exc.code)
            return TrafficUpdateResult(success=False, message=exc.message, error=exc)

        road_id = snapshot.roads_between(source, target)[0]
        self._history.record(
            source,
            target,
            snapshot.multiplier(road_id),
            snapshot.effective_time(road_id),
            snapshot.version,
        )
        return TrafficUpdateResult(
            success=True,
            message="Traffic updated successfully",
            version=snapshot.version,
        )

    def reset(self) -> TrafficUpdateResult:
        snapshot = self._graph_store.reset_traffic()
        return TrafficUpdateResult(
            success=True,
            message="All traffic reset to normal",
            version=snapshot.version,
        )

    def road_history(self, from_id: Any, to_id: Any, limit: int = 10) -> Dict[str, Any]:
        """Logged updates for the road joining two junctions; raises if there is no such road."""

        source = _parse_junction_id(from_id)
        target = _parse_junction_id(to_id)
        snapshot = self._graph_store.snapshot()
        for junction_id in (source, target):
            if not snapshot.has_junction(junction_id):
                raise JunctionNotFound(junction_id)
        if not snapshot.roads_between(source, target):
            raise RoadNotFound(source, target)
        return self._history.road(source, target, limit)

    def severe_roads(self, threshold: float = SEVERE_MULTIPLIER) -> List[Dict[str, Any]]:
        snapshot = self._graph_store.snapshot()
        severe = []
        for road_id, road in enumerate(snapshot.roads()):
            multiplier = snapshot.multiplier(road_id)
            if multiplier >= threshold:
                severe.append(
                    {
                        "from": road.from_id,
                        "to": road.to_id,
                        "multiplier": multiplier,
                        "currentTime": snapshot.effective_time(road_id),
                    }
                )
        return severe


def _parse_junction_id(value: Any) -> int:
    if isinstance(value, bool):
        raise JunctionNotFound(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and value.strip().lstrip("-").isdigit():
        return int(value.strip())
    raise JunctionNotFound(value)


def _coerce_multiplier(value: Any) -> Any:
    # Unparseable values pass through unchanged; the store rejects them after its id checks.
    if isinstance(value, (bool, int, float)):
        return value
    try:
        return float(value)
    except (TypeError, ValueError):
        return value
