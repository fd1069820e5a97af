from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from route_optimizer.api.schemas import failure_response
from route_optimizer.core.errors import JunctionNotFound
from route_optimizer.models.graph_store import GraphStore
from route_optimizer.models.junction_directory import JunctionDirectory

router = APIRouter(prefix="/junctions", tags=["junctions"])


def _graph_store_dependency() -> GraphStore:
  from route_optimizer.main import get_graph_store as _get

  return _get()


def _directory_dependency() -> JunctionDirectory:
  from route_optimizer.main import get_junction_directory as _get

  return _get()


@router.get("")
async def list_junctions(graph_store: GraphStore = Depends(_graph_store_dependency)) -> Dict[str, Any]:
  return {"junctions": [junction.to_dict() for junction in graph_store.snapshot().junctions()]}


@router.get("/search")
async def search_junctions(
  name: str = Query(default="", description="Case-insensitive name prefix"),
  limit: Optional[int] = Query(default=None, ge=1, le=1000),
  exact: bool = Query(default=False, description="Match the whole name instead of a prefix"),
  directory: JunctionDirectory = Depends(_directory_dependency),
) -> Dict[str, Any]:
  """Prefix search over junction names, sorted by name."""

  if exact:
    junction = directory.find_by_name(name)
    return {"junctions": [junction.to_dict()] if junction is not None else []}
  return {"junctions": [junction.to_dict() for junction in directory.search(name, limit)]}


@router.get("/{junction_id}", response_model=None)
async def get_junction(
  junction_id: int,
  graph_store: GraphStore = Depends(_graph_store_dependency),
) -> Dict[str, Any] | JSONResponse:
  try:
    junction = graph_store.snapshot().junction(junction_id)
  except JunctionNotFound as exc:
    return failure_response(exc)
  return {"success": True, "junction": junction.to_dict()}
