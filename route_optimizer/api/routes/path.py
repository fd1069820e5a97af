from __future__ import annotations

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from route_optimizer.api.schemas import PathRequest, failure_response, internal_error_response, route_payload
from route_optimizer.core.errors import RouteOptimizerError
from route_optimizer.services.route_planner import RoutePlanner

logger = logging.getLogger(__name__)

router = APIRouter(tags=["routing"])


def _route_planner_dependency() -> RoutePlanner:
  from route_optimizer.main import get_route_planner as _get

  return _get()


@router.post("/path", response_model=None)
async def find_path(
  request: PathRequest,
  planner: RoutePlanner = Depends(_route_planner_dependency),
) -> Dict[str, Any] | JSONResponse:
  """Fastest route between two junctions under current traffic."""

  logger.info("POST /path %s -> %s", request.source, request.destination)
  try:
    outcome = await planner.plan_async(request.source, request.destination)
  except RouteOptimizerError as exc:
    return failure_response(exc)
  except Exception:
    return internal_error_response("POST /path")

  if outcome.error is not None:
    return failure_response(outcome.error)
  return route_payload(outcome.unwrap())
