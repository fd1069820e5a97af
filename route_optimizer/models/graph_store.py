"""Versioned, copy-on-write store for the road network.

The topology (junctions, roads, adjacency and a frozen ``networkx.DiGraph``)
is built once by ``GraphStore.load`` and shared by every snapshot. A snapshot
pairs that topology with an immutable tuple of per-road multipliers and a
version number. Writers serialize on a single lock and publish a new snapshot
by swapping one reference; readers never take the lock.
"""

from __future__ import annotations

import logging
import math
from threading import Lock
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import networkx as nx

from route_optimizer.core.errors import (
  InvalidTopology,
  InvalidWeight,
  JunctionNotFound,
  MultiplierOutOfRange,
  RoadNotFound,
  SameJunction,
)
from route_optimizer.models.network import Junction, Road

logger = logging.getLogger(__name__)

DEFAULT_MULTIPLIER = 1.0

# (neighbor junction id, road id) in road insertion order
Arc = Tuple[int, int]


def _is_number(value: Any) -> bool:
  return isinstance(value, (int, float)) and not isinstance(value, bool)


def _pair_key(a: int, b: int) -> Tuple[int, int]:
  return (a, b) if a <= b else (b, a)


class _Topology:
  """Immutable structure shared by all snapshots of one loaded graph."""

  __slots__ = ("junctions", "roads", "adjacency", "pairs", "graph")

  def __init__(
    self,
    junctions: Mapping[int, Junction],
    roads: Tuple[Road, ...],
    adjacency: Mapping[int, Tuple[Arc, ...]],
    pairs: Mapping[Tuple[int, int], Tuple[int, ...]],
    graph: nx.DiGraph,
  ) -> None:
    self.junctions = junctions
    self.roads = roads
    self.adjacency = adjacency
    self.pairs = pairs
    self.graph = graph


class GraphSnapshot:
  """Point-in-time, read-only view of the network used for one query."""

  __slots__ = ("_topology", "_multipliers", "_version")

  def __init__(self, topology: _Topology, multipliers: Tuple[float, ...], version: int) -> None:
    self._topology = topology
    self._multipliers = multipliers
    self._version = version

  @property
  def version(self) -> int:
    return self._version

  @property
  def junction_count(self) -> int:
    return len(self._topology.junctions)

  @property
  def road_count(self) -> int:
    return len(self._topology.roads)

  @property
  def multipliers(self) -> Tuple[float, ...]:
    return self._multipliers

  @property
  def graph(self) -> nx.DiGraph:
    """Frozen topology graph; arcs carry the ``road_id`` they belong to."""
    return self._topology.graph

  def junctions(self) -> List[Junction]:
    return list(self._topology.junctions.values())

  def has_junction(self, junction_id: int) -> bool:
    return junction_id in self._topology.junctions

  def junction(self, junction_id: int) -> Junction:
    try:
      return self._topology.junctions[junction_id]
    except (KeyError, TypeError):
      raise JunctionNotFound(junction_id) from None

  def neighbors(self, junction_id: int) -> Tuple[Arc, ...]:
    return self._topology.adjacency.get(junction_id, ())

  def roads(self) -> Tuple[Road, ...]:
    return self._topology.roads

  def road(self, road_id: int) -> Road:
    return self._topology.roads[road_id]

  def multiplier(self, road_id: int) -> float:
    return self._multipliers[road_id]

  def effective_time(self, road_id: int) -> float:
    return self._topology.roads[road_id].base_time * self._multipliers[road_id]

  def roads_between(self, a: int, b: int) -> Tuple[int, ...]:
    """Ids of every road joining ``a`` and ``b``, regardless of direction."""
    return self._topology.pairs.get(_pair_key(a, b), ())

  def component_count(self) -> int:
    return nx.number_weakly_connected_components(self._topology.graph)


class GraphStore:
  """Single owner of the junction and road data."""

  def __init__(self, *, min_multiplier: float = 0.1, max_multiplier: float = 5.0) -> None:
    if not 0 < min_multiplier <= max_multiplier:
      raise ValueError("Multiplier bounds must satisfy 0 < min <= max")
    self._min_multiplier = float(min_multiplier)
    self._max_multiplier = float(max_multiplier)
    self._lock = Lock()
    self._current: Optional[GraphSnapshot] = None
    self._closed = False

  @property
  def multiplier_bounds(self) -> Tuple[float, float]:
    return self._min_multiplier, self._max_multiplier

  @property
  def loaded(self) -> bool:
    return self._current is not None

  def load(self, junctions: Iterable[Junction], roads: Iterable[Road]) -> GraphSnapshot:
    """Validate and publish the initial graph. The topology is fixed afterwards."""

    topology, multipliers = self._build_topology(list(junctions), list(roads))
    with self._lock:
      if self._closed:
        raise RuntimeError("Graph store has been closed")
      if self._current is not None:
        raise RuntimeError("Graph store is already loaded")
      snapshot = GraphSnapshot(topology, multipliers, version=1)
      self._current = snapshot

    logger.info(
      "Loaded road network: %d junctions, %d roads, %d component(s)",
      snapshot.junction_count,
      snapshot.road_count,
      snapshot.component_count(),
    )
    return snapshot

  def snapshot(self) -> GraphSnapshot:
    current = self._current
    if current is None:
      if self._closed:
        raise RuntimeError("Graph store has been closed")
      raise RuntimeError("Graph store has not been loaded")
    return current

  def apply_traffic_update(self, from_id: int, to_id: int, multiplier: float) -> GraphSnapshot:
    """Set the multiplier of every road joining ``from_id`` and ``to_id``.

    Both travel directions change together in one publish. Re-applying the
    current value publishes nothing and keeps the version.
    """

    with self._lock:
      current = self.snapshot()
      for junction_id in (from_id, to_id):
        if not current.has_junction(junction_id):
          raise JunctionNotFound(junction_id)
      if from_id == to_id:
        raise SameJunction(from_id)
      road_ids = current.roads_between(from_id, to_id)
      if not road_ids:
        raise RoadNotFound(from_id, to_id)
      value = self._check_multiplier(multiplier)

      if all(current.multiplier(road_id) == value for road_id in road_ids):
        logger.debug("Traffic update %s<->%s x%s is a no-op", from_id, to_id, value)
        return current

      multipliers = list(current.multipliers)
      for road_id in road_ids:
        multipliers[road_id] = value
      published = self._publish_locked(current, multipliers)

    logger.info(
      "Traffic updated: %s <-> %s (multiplier %sx, version %d)",
      from_id,
      to_id,
      value,
      published.version,
    )
    return published

  def reset_traffic(self) -> GraphSnapshot:
    """Return every road to free-flow traffic in a single publish."""

    value = min(max(DEFAULT_MULTIPLIER, self._min_multiplier), self._max_multiplier)
    with self._lock:
      current = self.snapshot()
      multipliers = [value] * current.road_count
      if tuple(multipliers) == current.multipliers:
        return current
      published = self._publish_locked(current, multipliers)
    logger.info("All traffic reset to %sx (version %d)", value, published.version)
    return published

  def describe(self) -> Dict[str, Any]:
    snapshot = self.snapshot()
    roads = []
    for road_id, road in enumerate(snapshot.roads()):
      roads.append(
        {
          "id": road_id,
          "from": road.from_id,
          "to": road.to_id,
          "directed": road.directed,
          "distance": road.distance,
          "baseTime": road.base_time,
          "multiplier": snapshot.multiplier(road_id),
          "currentTime": snapshot.effective_time(road_id),
        }
      )
    return {
      "version": snapshot.version,
      "junctions": snapshot.junction_count,
      "roads": roads,
      "roadCount": snapshot.road_count,
      "components": snapshot.component_count(),
      "multiplierBounds": {"min": self._min_multiplier, "max": self._max_multiplier},
    }

  def close(self) -> None:
    with self._lock:
      self._current = None
      self._closed = True
    logger.info("Graph store closed")

  def _publish_locked(self, current: GraphSnapshot, multipliers: Sequence[float]) -> GraphSnapshot:
    # Caller must hold _lock.
    snapshot = GraphSnapshot(current._topology, tuple(multipliers), current.version + 1)
    self._current = snapshot
    return snapshot

  def _check_multiplier(self, multiplier: Any) -> float:
    if not _is_number(multiplier) or not math.isfinite(multiplier):
      raise MultiplierOutOfRange(multiplier, self._min_multiplier, self._max_multiplier)
    value = float(multiplier)
    if not self._min_multiplier <= value <= self._max_multiplier:
      raise MultiplierOutOfRange(multiplier, self._min_multiplier, self._max_multiplier)
    return value

  def _build_topology(
    self,
    junctions: Sequence[Junction],
    roads: Sequence[Road],
  ) -> Tuple[_Topology, Tuple[float, ...]]:
    junction_map: Dict[int, Junction] = {}
    graph = nx.DiGraph()
    for junction in junctions:
      if not isinstance(junction.id, int) or isinstance(junction.id, bool):
        raise InvalidTopology(f"Junction id must be an integer, got {junction.id!r}")
      if junction.id in junction_map:
        raise InvalidTopology(f"Duplicate junction id {junction.id}")
      junction_map[junction.id] = junction
      graph.add_node(junction.id)

    adjacency: Dict[int, List[Arc]] = {junction_id: [] for junction_id in junction_map}
    pairs: Dict[Tuple[int, int], List[int]] = {}
    multipliers: List[float] = []

    for road_id, road in enumerate(roads):
      for endpoint in (road.from_id, road.to_id):
        if endpoint not in junction_map:
          raise InvalidTopology(
            f"Road {road.from_id}->{road.to_id} references unknown junction {endpoint}",
            detail={"road_id": road_id, "junction_id": endpoint},
          )
      if road.from_id == road.to_id:
        raise InvalidTopology(f"Road {road_id} is a self-loop on junction {road.from_id}")
      for name in ("base_time", "distance"):
        value = getattr(road, name)
        if not _is_number(value) or not math.isfinite(value) or value <= 0:
          raise InvalidWeight(
            f"Road {road.from_id}->{road.to_id} has non-positive {name}: {value!r}",
            detail={"road_id": road_id, name: value},
          )
      try:
        multiplier = self._check_multiplier(road.multiplier)
      except MultiplierOutOfRange:
        raise InvalidWeight(
          f"Road {road.from_id}->{road.to_id} has out-of-range multiplier {road.multiplier!r}",
          detail={"road_id": road_id, "multiplier": road.multiplier},
        ) from None

      arcs = [(road.from_id, road.to_id)]
      if not road.directed:
        arcs.append((road.to_id, road.from_id))
      for source, target in arcs:
        if graph.has_edge(source, target):
          raise InvalidTopology(
            f"Duplicate road from {source} to {target}",
            detail={"road_id": road_id, "existing_road_id": graph[source][target]["road_id"]},
          )
        graph.add_edge(source, target, road_id=road_id)
        adjacency[source].append((target, road_id))

      pairs.setdefault(_pair_key(road.from_id, road.to_id), []).append(road_id)
      multipliers.append(multiplier)

    topology = _Topology(
      junctions=MappingProxyType(junction_map),
      roads=tuple(roads),
      adjacency=MappingProxyType({key: tuple(arcs) for key, arcs in adjacency.items()}),
      pairs=MappingProxyType({key: tuple(ids) for key, ids in pairs.items()}),
      graph=nx.freeze(graph),
    )
    return topology, tuple(multipliers)
