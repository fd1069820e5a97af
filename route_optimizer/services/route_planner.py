from __future__ import annotations

import asyncio
import logging
from typing import Optional

from route_optimizer.core.errors import QueryTimeout
from route_optimizer.models.graph_store import GraphStore
from route_optimizer.models.network import RouteOutcome
from route_optimizer.routing.dijkstra import CancelToken, find_shortest_path

logger = logging.getLogger(__name__)


class RoutePlanner:
    """Runs one route query against exactly one graph snapshot."""

    def __init__(self, graph_store: GraphStore, *, timeout_s: Optional[float] = None) -> None:
        self._graph_store = graph_store
        self._timeout_s = timeout_s

    def plan(self, source_id: int, dest_id: int, cancel_token: Optional[CancelToken] = None) -> RouteOutcome:
        snapshot = self._graph_store.snapshot()
        outcome = find_shortest_path(snapshot, source_id, dest_id, cancel_token)
        if outcome.found:
            result = outcome.unwrap()
            logger.info(
                "Route %s -> %s: %d junctions, %.1f min (v%d)",
                source_id,
                dest_id,
                len(result.path),
                result.total_time,
                result.version,
            )
        return outcome

    async def plan_async(self, source_id: int, dest_id: int) -> RouteOutcome:
        """Run ``plan`` in a worker thread, abandoning it after the configured timeout."""

        token = CancelToken()
        task = asyncio.to_thread(self.plan, source_id, dest_id, token)
        if self._timeout_s is None:
            return await task
        try:
            return await asyncio.wait_for(task, timeout=self._timeout_s)
        except asyncio.TimeoutError:
            token.cancel()
            logger.warning("Route query %s -> %s exceeded %.1fs", source_id, dest_id, self._timeout_s)
            return RouteOutcome(error=QueryTimeout(self._timeout_s))
