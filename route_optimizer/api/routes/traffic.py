from __future__ import annotations

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from route_optimizer.api.schemas import TrafficRequest, failure_response, internal_error_response
from route_optimizer.core.errors import RouteOptimizerError
from route_optimizer.services.traffic import SEVERE_MULTIPLIER, TrafficUpdateService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/traffic", tags=["traffic"])


def _traffic_service_dependency() -> TrafficUpdateService:
  from route_optimizer.main import get_traffic_service as _get

  return _get()


@router.post("", response_model=None)
async def update_traffic(
  request: TrafficRequest,
  service: TrafficUpdateService = Depends(_traffic_service_dependency),
) -> Dict[str, Any] | JSONResponse:
  """Apply a congestion multiplier to the road(s) between two junctions."""

  logger.info("POST /traffic %s <-> %s x%s", request.from_id, request.to_id, request.multiplier)
  try:
    result = service.apply(request.from_id, request.to_id, request.multiplier)
  except Exception:
    return internal_error_response("POST /traffic")

  if result.error is not None:
    return failure_response(result.error)
  return {"success": True, "message": result.message, "version": result.version}


@router.post("/reset", response_model=None)
async def reset_traffic(
  service: TrafficUpdateService = Depends(_traffic_service_dependency),
) -> Dict[str, Any] | JSONResponse:
  try:
    result = service.reset()
  except Exception:
    return internal_error_response("POST /traffic/reset")
  return {"success": True, "message": result.message, "version": result.version}


@router.get("/history")
async def traffic_summary(
  top: int = Query(default=5, ge=1, le=100),
  service: TrafficUpdateService = Depends(_traffic_service_dependency),
) -> Dict[str, Any]:
  """Update counts across all roads, busiest first."""

  return {"success": True, **service.history.summary(top)}


@router.get("/history/{from_id}/{to_id}", response_model=None)
async def road_history(
  from_id: int,
  to_id: int,
  limit: int = Query(default=10, ge=1, le=100),
  service: TrafficUpdateService = Depends(_traffic_service_dependency),
) -> Dict[str, Any] | JSONResponse:
  try:
    history = service.road_history(from_id, to_id, limit)
  except RouteOptimizerError as exc:
    return failure_response(exc)
  return {"success": True, **history}


@router.get("/severe")
async def severe_traffic(
  threshold: float = Query(default=SEVERE_MULTIPLIER, gt=0.0),
  service: TrafficUpdateService = Depends(_traffic_service_dependency),
) -> Dict[str, Any]:
  return {"success": True, "threshold": threshold, "roads": service.severe_roads(threshold)}
