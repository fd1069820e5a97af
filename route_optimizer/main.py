from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from route_optimizer.api.routes import graph, health, junctions, path, traffic
from route_optimizer.core.config import get_settings
from route_optimizer.core.logging import configure_logging
from route_optimizer.models.graph_store import GraphStore
from route_optimizer.models.junction_directory import JunctionDirectory
from route_optimizer.models.network_loader import load_network
from route_optimizer.services.route_planner import RoutePlanner
from route_optimizer.services.traffic import TrafficUpdateService

logger = logging.getLogger(__name__)

app = FastAPI(title="Smart Traffic Route Optimizer")

_settings = get_settings()

_graph_store: Optional[GraphStore] = None
_junction_directory: Optional[JunctionDirectory] = None
_traffic_service: Optional[TrafficUpdateService] = None
_route_planner: Optional[RoutePlanner] = None


@app.on_event("startup")
async def _startup() -> None:
  global _graph_store, _junction_directory, _traffic_service, _route_planner

  settings = get_settings()
  configure_logging(settings.log_level, settings.log_file)

  # Load errors propagate: the service must not start with an invalid graph.
  junction_records, road_records = load_network(settings.junctions_path, settings.roads_path)
  store = GraphStore(min_multiplier=settings.min_multiplier, max_multiplier=settings.max_multiplier)
  snapshot = store.load(junction_records, road_records)

  _graph_store = store
  _junction_directory = JunctionDirectory(snapshot.junctions())
  _traffic_service = TrafficUpdateService(store)
  _route_planner = RoutePlanner(store, timeout_s=settings.query_timeout_s)
  logger.info("Route optimizer ready with %d junctions", snapshot.junction_count)


@app.on_event("shutdown")
async def _shutdown() -> None:
  global _graph_store, _junction_directory, _traffic_service, _route_planner

  if _graph_store is not None:
    _graph_store.close()
  _graph_store = None
  _junction_directory = None
  _traffic_service = None
  _route_planner = None


def get_graph_store() -> GraphStore:
  if _graph_store is None:
    raise RuntimeError("Graph store has not been initialized")
  return _graph_store


def get_junction_directory() -> JunctionDirectory:
  if _junction_directory is None:
    raise RuntimeError("Junction directory has not been initialized")
  return _junction_directory


def get_traffic_service() -> TrafficUpdateService:
  if _traffic_service is None:
    raise RuntimeError("Traffic update service has not been initialized")
  return _traffic_service


def get_route_planner() -> RoutePlanner:
  if _route_planner is None:
    raise RuntimeError("Route planner has not been initialized")
  return _route_planner


@app.exception_handler(RequestValidationError)
async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
  errors = exc.errors()
  first = errors[0] if errors else {}
  location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
  message = f"Invalid request: {location} {first.get('msg', '')}".strip() if location else "Invalid request"
  logger.info("Rejected %s %s: %s", request.method, request.url.path, message)
  return JSONResponse(status_code=422, content={"success": False, "message": message})


app.add_middleware(
  CORSMiddleware,
  allow_origins=_settings.cors_allow_origins,
  allow_methods=["GET", "POST", "OPTIONS"],
  allow_headers=["Content-Type", "Authorization"],
)

for _router in (health.router, junctions.router, path.router, traffic.router, graph.router):
  app.include_router(_router, prefix=_settings.api_prefix)
