import random

import networkx as nx
import pytest

from route_optimizer.core.errors import InternalError, JunctionNotFound, NoPathFound, SameJunction, SearchCancelled
from route_optimizer.models.graph_store import GraphStore
from route_optimizer.models.network import Junction, Road, RouteOutcome
from route_optimizer.routing.dijkstra import CancelToken, find_shortest_path


def _store(junction_ids, roads, **bounds) -> GraphStore:
	store = GraphStore(**bounds)
	store.load([Junction(id=i, name=f"J{i}", lat=0.0, lng=0.0) for i in junction_ids], roads)
	return store


def _directed(a: int, b: int, time: float, distance: float = 1.0) -> Road:
	return Road(from_id=a, to_id=b, base_time=time, distance=distance, directed=True)


def _scenario_store() -> GraphStore:
	return _store(
		[1, 2, 3],
		[_directed(1, 2, 10.0, 5.0), _directed(2, 3, 10.0, 5.0), _directed(1, 3, 30.0, 25.0)],
	)


def test_two_hop_route_beats_slow_direct_road() -> None:
	store = _scenario_store()

	result = find_shortest_path(store.snapshot(), 1, 3).unwrap()

	assert result.junction_ids == (1, 2, 3)
	assert result.total_time == 20.0
	assert result.total_distance == 10.0
	assert result.road_ids == (0, 1)
	assert result.version == 1


def test_congestion_moves_route_to_direct_road() -> None:
	store = _scenario_store()
	store.apply_traffic_update(1, 2, 4.0)

	result = find_shortest_path(store.snapshot(), 1, 3).unwrap()

	assert result.junction_ids == (1, 3)
	assert result.total_time == 30.0
	assert result.total_distance == 25.0
	assert result.version == 2


def test_same_source_and_destination_is_rejected() -> None:
	with pytest.raises(SameJunction):
		find_shortest_path(_scenario_store().snapshot(), 1, 1)


def test_unknown_junction_is_rejected() -> None:
	snapshot = _scenario_store().snapshot()
	with pytest.raises(JunctionNotFound):
		find_shortest_path(snapshot, 1, 42)
	with pytest.raises(JunctionNotFound):
		find_shortest_path(snapshot, 42, 1)


def test_disconnected_components_report_no_path() -> None:
	store = _store(
		[1, 2, 3, 4],
		[Road(from_id=1, to_id=2, base_time=1.0, distance=1.0), Road(from_id=3, to_id=4, base_time=1.0, distance=1.0)],
	)

	outcome = find_shortest_path(store.snapshot(), 1, 4)

	assert not outcome.found
	assert isinstance(outcome.error, NoPathFound)
	with pytest.raises(NoPathFound):
		outcome.unwrap()


def test_outcome_without_result_or_error_is_internal_error() -> None:
	with pytest.raises(InternalError):
		RouteOutcome().unwrap()


def test_one_way_road_cannot_be_driven_backwards() -> None:
	store = _store([1, 2], [_directed(1, 2, 5.0)])

	assert find_shortest_path(store.snapshot(), 1, 2).found
	assert not find_shortest_path(store.snapshot(), 2, 1).found


def test_equal_time_prefers_fewer_roads() -> None:
	store = _store([1, 2, 3], [_directed(1, 2, 5.0), _directed(2, 3, 5.0), _directed(1, 3, 10.0)])

	assert find_shortest_path(store.snapshot(), 1, 3).unwrap().junction_ids == (1, 3)


def test_fewer_roads_win_even_when_discovered_later() -> None:
	# 1-2-3-4 reaches 4 first (time 10, three roads); 1-5-4 ties on time with two roads.
	store = _store(
		[1, 2, 3, 4, 5],
		[_directed(1, 2, 1.0), _directed(2, 3, 1.0), _directed(3, 4, 8.0), _directed(1, 5, 5.0), _directed(5, 4, 5.0)],
	)

	result = find_shortest_path(store.snapshot(), 1, 4).unwrap()

	assert result.junction_ids == (1, 5, 4)
	assert result.total_time == 10.0


@pytest.mark.parametrize(
	("first", "expected"),
	[(2, (1, 2, 4)), (3, (1, 3, 4))],
)
def test_full_tie_keeps_road_insertion_order(first: int, expected) -> None:
	second = 5 - first
	store = _store(
		[1, 2, 3, 4],
		[_directed(1, first, 5.0), _directed(1, second, 5.0), _directed(2, 4, 5.0), _directed(3, 4, 5.0)],
	)

	assert find_shortest_path(store.snapshot(), 1, 4).unwrap().junction_ids == expected


def test_minimum_multiplier_keeps_totals_positive() -> None:
	store = _scenario_store()
	for a, b in ((1, 2), (2, 3), (1, 3)):
		store.apply_traffic_update(a, b, 0.1)

	result = find_shortest_path(store.snapshot(), 1, 3).unwrap()

	assert result.total_time > 0
	assert all(store.snapshot().effective_time(road_id) > 0 for road_id in range(3))


def test_repeated_queries_are_deterministic() -> None:
	snapshot = _random_store(seed=7).snapshot()

	first = find_shortest_path(snapshot, 0, 99)
	for _ in range(5):
		assert find_shortest_path(snapshot, 0, 99) == first


def test_cancelled_search_raises() -> None:
	token = CancelToken()
	token.cancel()

	with pytest.raises(SearchCancelled):
		find_shortest_path(_scenario_store().snapshot(), 1, 3, token)


def _random_store(seed: int, nodes: int = 120, roads: int = 480) -> GraphStore:
	rng = random.Random(seed)
	seen = set()
	road_list = []
	while len(road_list) < roads:
		a, b = rng.randrange(nodes), rng.randrange(nodes)
		if a == b or (a, b) in seen:
			continue
		seen.add((a, b))
		road_list.append(
			Road(
				from_id=a,
				to_id=b,
				base_time=round(rng.uniform(1.0, 30.0), 2),
				distance=round(rng.uniform(0.5, 20.0), 2),
				directed=True,
				multiplier=round(rng.uniform(0.1, 5.0), 2),
			)
		)
	return _store(range(nodes), road_list)


def _weighted_digraph(snapshot) -> nx.DiGraph:
	weighted = nx.DiGraph()
	weighted.add_nodes_from(snapshot.graph.nodes)
	for source, target, road_id in snapshot.graph.edges(data="road_id"):
		weighted.add_edge(
			source,
			target,
			weight=snapshot.effective_time(road_id),
			distance=snapshot.road(road_id).distance,
		)
	return weighted


@pytest.mark.parametrize("seed", [1, 2, 3])
def test_matches_networkx_on_random_graphs(seed: int) -> None:
	snapshot = _random_store(seed).snapshot()
	weighted = _weighted_digraph(snapshot)
	rng = random.Random(seed * 100)

	for _ in range(25):
		source, dest = rng.sample(range(120), 2)
		outcome = find_shortest_path(snapshot, source, dest)
		try:
			expected = nx.dijkstra_path_length(weighted, source, dest, weight="weight")
		except nx.NetworkXNoPath:
			assert not outcome.found
			continue

		result = outcome.unwrap()
		ids = result.junction_ids
		assert ids[0] == source and ids[-1] == dest
		assert len(set(ids)) == len(ids)
		assert result.total_time == pytest.approx(expected)

		edge_times = [weighted[u][v]["weight"] for u, v in zip(ids, ids[1:])]
		edge_distances = [weighted[u][v]["distance"] for u, v in zip(ids, ids[1:])]
		assert result.total_time == pytest.approx(sum(edge_times))
		assert result.total_distance == pytest.approx(sum(edge_distances))


def test_scales_to_large_grid() -> None:
	side = 150
	roads = []
	for row in range(side):
		for col in range(side):
			node = row * side + col
			if col + 1 < side:
				roads.append(Road(from_id=node, to_id=node + 1, base_time=1.0, distance=0.2))
			if row + 1 < side:
				roads.append(Road(from_id=node, to_id=node + side, base_time=1.0, distance=0.2))
	store = _store(range(side * side), roads)

	result = find_shortest_path(store.snapshot(), 0, side * side - 1).unwrap()

	assert len(result.path) == 2 * (side - 1) + 1
	assert result.total_time == pytest.approx(2 * (side - 1))
