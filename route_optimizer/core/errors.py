"""Error taxonomy shared by the graph store, routing engine and gateway.

Every error carries a stable ``code``, a user-facing ``message`` that is safe to
return over HTTP, and an ``http_status`` hint for the gateway. Load-time errors
(``InvalidTopology``, ``InvalidWeight``) abort startup; the rest are per-request.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class RouteOptimizerError(Exception):
    code = "route_optimizer_error"
    http_status = 400

    def __init__(self, message: str, *, detail: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.detail: Dict[str, Any] = dict(detail or {})

    def to_payload(self) -> Dict[str, Any]:
        return {"success": False, "message": self.message}


class InvalidTopology(RouteOptimizerError):
    code = "invalid_topology"


class InvalidWeight(RouteOptimizerError):
    code = "invalid_weight"


class JunctionNotFound(RouteOptimizerError):
    code = "junction_not_found"
    http_status = 404

    def __init__(self, junction_id: Any) -> None:
        super().__init__(f"Junction {junction_id} not found", detail={"junction_id": junction_id})
        self.junction_id = junction_id


class SameJunction(RouteOptimizerError):
    code = "same_junction"

    def __init__(self, junction_id: Any) -> None:
        super().__init__(
            "Source and destination must be different junctions",
            detail={"junction_id": junction_id},
        )
        self.junction_id = junction_id


class RoadNotFound(RouteOptimizerError):
    code = "road_not_found"
    http_status = 404

    def __init__(self, from_id: int, to_id: int) -> None:
        super().__init__(
            f"No road connects junctions {from_id} and {to_id}",
            detail={"from": from_id, "to": to_id},
        )


class MultiplierOutOfRange(RouteOptimizerError):
    code = "multiplier_out_of_range"

    def __init__(self, multiplier: Any, minimum: float, maximum: float) -> None:
        super().__init__(
            f"Traffic multiplier must be between {minimum} and {maximum}",
            detail={"multiplier": multiplier, "min": minimum, "max": maximum},
        )


class NoPathFound(RouteOptimizerError):
    code = "no_path_found"
    http_status = 404

    def __init__(self, source_id: int, dest_id: int) -> None:
        super().__init__("No path found", detail={"source": source_id, "destination": dest_id})


class SearchCancelled(RouteOptimizerError):
    code = "search_cancelled"
    http_status = 503

    def __init__(self) -> None:
        super().__init__("Route search was cancelled")


class QueryTimeout(RouteOptimizerError):
    code = "query_timeout"
    http_status = 504

    def __init__(self, timeout_s: float) -> None:
        super().__init__("Route query timed out", detail={"timeout_s": timeout_s})


class InternalError(RouteOptimizerError):
    code = "internal_error"
    http_status = 500

    def __init__(self) -> None:
        super().__init__("Internal server error")
