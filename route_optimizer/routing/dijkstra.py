"""Shortest-path search over a graph snapshot.

Labels are compared lexicographically as ``(total_time, hop_count)``, so on
equal travel time the route with fewer roads wins. A label is only replaced by
a strictly better one, which keeps the first route discovered (in road
insertion order at each junction) when both components tie. Heap entries carry
a push counter so equal labels pop in discovery order.
"""

from __future__ import annotations

import heapq
import logging
import threading
from typing import Dict, List, Optional, Tuple

from route_optimizer.core.errors import NoPathFound, SameJunction, SearchCancelled
from route_optimizer.models.graph_store import GraphSnapshot
from route_optimizer.models.network import RouteOutcome, RouteResult

logger = logging.getLogger(__name__)

# Pops between cancellation checks.
CANCEL_CHECK_INTERVAL = 1024

Label = Tuple[float, int]


class CancelToken:
    """Cooperative cancellation flag shared between a caller and a running search."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


def find_shortest_path(
    snapshot: GraphSnapshot,
    source_id: int,
    dest_id: int,
    cancel_token: Optional[CancelToken] = None,
) -> RouteOutcome:
    """Fastest route from ``source_id`` to ``dest_id`` by effective travel time.

    Raises ``JunctionNotFound`` or ``SameJunction`` for invalid endpoints and
    ``SearchCancelled`` when ``cancel_token`` fires. An unreachable destination
    is reported through the returned outcome.
    """

    source = snapshot.junction(source_id)
    dest = snapshot.junction(dest_id)
    if source.id == dest.id:
        raise SameJunction(source.id)

    best: Dict[int, Label] = {source.id: (0.0, 0)}
    parent: Dict[int, Tuple[int, int]] = {}
    settled = set()
    counter = 0
    heap: List[Tuple[float, int, int, int]] = [(0.0, 0, counter, source.id)]
    pops = 0
    if cancel_token is not None and cancel_token.cancelled:
        raise SearchCancelled()

    while heap:
        total_time, hops, _, node = heapq.heappop(heap)
        pops += 1
        if cancel_token is not None and pops % CANCEL_CHECK_INTERVAL == 0 and cancel_token.cancelled:
            logger.info("Search %s -> %s cancelled after %d pops", source.id, dest.id, pops)
            raise SearchCancelled()

        if node in settled:
            continue
        if (total_time, hops) != best[node]:
            continue
        settled.add(node)
        if node == dest.id:
            break

        for neighbor, road_id in snapshot.neighbors(node):
            if neighbor in settled:
                continue
            candidate = (total_time + snapshot.effective_time(road_id), hops + 1)
            known = best.get(neighbor)
            if known is not None and candidate >= known:
                continue
            best[neighbor] = candidate
            parent[neighbor] = (node, road_id)
            counter += 1
            heapq.heappush(heap, (candidate[0], candidate[1], counter, neighbor))

    if dest.id not in settled:
        logger.debug("No path %s -> %s in snapshot v%d", source.id, dest.id, snapshot.version)
        return RouteOutcome(error=NoPathFound(source.id, dest.id))

    return RouteOutcome(result=_build_result(snapshot, source.id, dest.id, parent))


def _build_result(
    snapshot: GraphSnapshot,
    source_id: int,
    dest_id: int,
    parent: Dict[int, Tuple[int, int]],
) -> RouteResult:
    road_ids: List[int] = []
    nodes = [dest_id]
    node = dest_id
    while node != source_id:
        node, road_id = parent[node]
        road_ids.append(road_id)
        nodes.append(node)
    nodes.reverse()
    road_ids.reverse()

    # Re-sum along the path so totals match the per-edge values exactly.
    total_time = 0.0
    total_distance = 0.0
    for road_id in road_ids:
        total_time += snapshot.effective_time(road_id)
        total_distance += snapshot.road(road_id).distance

    return RouteResult(
        path=tuple(snapshot.junction(junction_id) for junction_id in nodes),
        total_time=total_time,
        total_distance=total_distance,
        road_ids=tuple(road_ids),
        version=snapshot.version,
    )
