from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from route_optimizer.core.errors import InternalError, RouteOptimizerError


@dataclass(frozen=True)
class Junction:
    id: int
    name: str
    lat: float
    lng: float

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "lat": self.lat, "lng": self.lng}


@dataclass(frozen=True)
class Road:
    """Static road record; the live multiplier lives in the graph snapshot."""

    from_id: int
    to_id: int
    base_time: float  # minutes
    distance: float  # km
    directed: bool = False
    multiplier: float = 1.0

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "from": self.from_id,
            "to": self.to_id,
            "distance": self.distance,
            "base_time": self.base_time,
        }
        if self.directed:
            payload["directed"] = True
        if self.multiplier != 1.0:
            payload["multiplier"] = self.multiplier
        return payload


@dataclass(frozen=True)
class RouteResult:
    path: Tuple[Junction, ...]
    total_time: float
    total_distance: float
    road_ids: Tuple[int, ...] = ()
    version: int = 0

    @property
    def junction_ids(self) -> Tuple[int, ...]:
        return tuple(junction.id for junction in self.path)


@dataclass(frozen=True)
class RouteOutcome:
    """Structured routing answer: either a result or the error explaining its absence."""

    result: Optional[RouteResult] = None
    error: Optional[RouteOptimizerError] = field(default=None, compare=False)

    @property
    def found(self) -> bool:
        return self.result is not None

    def unwrap(self) -> RouteResult:
        """Return the result, or raise the error recorded in its place."""
        if self.result is not None:
            return self.result
        if self.error is not None:
            raise self.error
        raise InternalError()
