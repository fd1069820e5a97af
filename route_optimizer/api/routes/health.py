from __future__ import annotations

import time
from typing import Any, Dict

from fastapi import APIRouter, Depends

from route_optimizer.models.graph_store import GraphStore

router = APIRouter(tags=["health"])


def _graph_store_dependency() -> GraphStore:
  from route_optimizer.main import get_graph_store as _get

  return _get()


@router.get("/health")
async def healthcheck(graph_store: GraphStore = Depends(_graph_store_dependency)) -> Dict[str, Any]:
  """Liveness check reporting the size and version of the live network."""

  snapshot = graph_store.snapshot()
  return {
    "status": "OK",
    "message": "Server is running",
    "junctions": snapshot.junction_count,
    "version": snapshot.version,
    "timestamp": int(time.time()),
  }
