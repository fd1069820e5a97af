"""Pydantic request schemas and response helpers for the HTTP contract."""

from __future__ import annotations

import logging
from typing import Any, Dict

from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from route_optimizer.core.errors import InternalError, RouteOptimizerError
from route_optimizer.models.network import RouteResult

logger = logging.getLogger(__name__)


class PathRequest(BaseModel):
    source: int = Field(description="Source junction id")
    destination: int = Field(description="Destination junction id")

    model_config = ConfigDict(json_schema_extra={"example": {"source": 1, "destination": 3}})


class TrafficRequest(BaseModel):
    from_id: int = Field(alias="from", description="Junction id at one end of the road")
    to_id: int = Field(alias="to", description="Junction id at the other end of the road")
    multiplier: float = Field(allow_inf_nan=False, description="Congestion factor (1.0 = clear)")

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={"example": {"from": 1, "to": 2, "multiplier": 2.0}},
    )


def route_payload(result: RouteResult) -> Dict[str, Any]:
    return {
        "success": True,
        "path": [junction.to_dict() for junction in result.path],
        "totalTime": result.total_time,
        "estimatedDistance": result.total_distance,
        "version": result.version,
    }


def failure_response(exc: RouteOptimizerError) -> JSONResponse:
    return JSONResponse(status_code=exc.http_status, content=exc.to_payload())


def internal_error_response(context: str) -> JSONResponse:
    """Log the active exception and answer with a generic message."""

    logger.exception("Unexpected failure while handling %s", context)
    return failure_response(InternalError())
