from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Depends

from route_optimizer.models.graph_store import GraphStore

router = APIRouter(prefix="/graph", tags=["graph"])


def _graph_store_dependency() -> GraphStore:
  from route_optimizer.main import get_graph_store as _get

  return _get()


@router.get("")
async def graph_summary(graph_store: GraphStore = Depends(_graph_store_dependency)) -> Dict[str, Any]:
  """Expose every road with its base and current travel time."""

  return graph_store.describe()
