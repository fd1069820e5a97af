import pytest
from fastapi.testclient import TestClient

from route_optimizer.adapters.routing_client import RoutingAPIContract, RoutingClient
from route_optimizer.api.routes import path as path_routes
from route_optimizer.main import app


def test_health_reports_junction_count() -> None:
	with TestClient(app) as client:
		response = client.get("/api/health")

	assert response.status_code == 200
	body = response.json()
	assert body["status"] == "OK"
	assert body["junctions"] == 8
	assert body["version"] == 1


def test_junctions_listing_has_display_fields() -> None:
	with TestClient(app) as client:
		junctions = client.get("/api/junctions").json()["junctions"]

	assert len(junctions) == 8
	assert junctions[0] == {"id": 1, "name": "Liberty Chowk", "lat": 31.5096, "lng": 74.3442}


def test_path_then_traffic_then_path() -> None:
	with TestClient(app) as client:
		first = client.post("/api/path", json={"source": 1, "destination": 3}).json()
		update = client.post("/api/traffic", json={"from": 1, "to": 2, "multiplier": 5.0}).json()
		second = client.post("/api/path", json={"source": 1, "destination": 3}).json()

	assert first["success"] is True
	assert [j["id"] for j in first["path"]] == [1, 2, 3]
	assert first["path"][1]["name"] == "Kalma Chowk"
	assert first["totalTime"] == 20.0
	assert first["estimatedDistance"] == pytest.approx(8.7)

	assert update["success"] is True

	# Liberty-Kalma now costs 40 minutes; the Jail Road/Township detour costs 38.
	assert [j["id"] for j in second["path"]] == [1, 4, 5, 2, 3]
	assert second["totalTime"] == 50.0
	assert second["estimatedDistance"] == pytest.approx(22.3)


def test_traffic_reset_restores_free_flow_route() -> None:
	with TestClient(app) as client:
		client.post("/api/traffic", json={"from": 1, "to": 2, "multiplier": 5.0})
		reset = client.post("/api/traffic/reset").json()
		route = client.post("/api/path", json={"source": 1, "destination": 3}).json()

	assert reset["success"] is True
	assert route["totalTime"] == 20.0


@pytest.mark.parametrize(
	("body", "status"),
	[
		({"source": 1, "destination": 1}, 400),
		({"source": 1, "destination": 99}, 404),
		({"source": 1}, 422),
		({"source": "one", "destination": 2}, 422),
	],
)
def test_path_failures_use_envelope(body, status: int) -> None:
	with TestClient(app) as client:
		response = client.post("/api/path", json=body)

	assert response.status_code == status
	payload = response.json()
	assert payload["success"] is False
	assert payload["message"]


@pytest.mark.parametrize(
	("body", "status"),
	[
		({"from": 1, "to": 2, "multiplier": 10.0}, 400),
		({"from": 1, "to": 3, "multiplier": 2.0}, 404),
		({"from": 2, "to": 2, "multiplier": 2.0}, 400),
		({"from": 1, "to": 42, "multiplier": 2.0}, 404),
		({"from": 1, "to": 2}, 422),
	],
)
def test_traffic_failures_use_envelope_and_keep_graph(body, status: int) -> None:
	with TestClient(app) as client:
		response = client.post("/api/traffic", json=body)
		health = client.get("/api/health").json()

	assert response.status_code == status
	assert response.json()["success"] is False
	assert health["version"] == 1


def test_out_of_range_message_names_bounds() -> None:
	with TestClient(app) as client:
		payload = client.post("/api/traffic", json={"from": 1, "to": 2, "multiplier": 10.0}).json()

	assert payload == {"success": False, "message": "Traffic multiplier must be between 0.1 and 5.0"}


def test_junction_lookup_and_search() -> None:
	with TestClient(app) as client:
		found = client.get("/api/junctions/2").json()
		missing = client.get("/api/junctions/42")
		search = client.get("/api/junctions/search", params={"name": "kal"}).json()

	assert found == {"success": True, "junction": {"id": 2, "name": "Kalma Chowk", "lat": 31.5204, "lng": 74.3587}}
	assert missing.status_code == 404
	assert missing.json()["success"] is False
	assert [j["id"] for j in search["junctions"]] == [2]


def test_graph_summary_tracks_updates() -> None:
	with TestClient(app) as client:
		client.post("/api/traffic", json={"from": 2, "to": 6, "multiplier": 2.0})
		summary = client.get("/api/graph").json()

	assert summary["version"] == 2
	assert summary["roadCount"] == 8
	assert summary["components"] == 1
	gulberg = next(road for road in summary["roads"] if (road["from"], road["to"]) == (2, 6))
	assert gulberg["currentTime"] == 6.0


def test_cors_preflight_is_answered() -> None:
	with TestClient(app) as client:
		response = client.options(
			"/api/path",
			headers={"Origin": "http://localhost:5500", "Access-Control-Request-Method": "POST"},
		)

	assert response.status_code == 200
	assert response.headers["access-control-allow-origin"] == "*"


class BrokenPlanner:
	async def plan_async(self, source_id, dest_id):
		raise RuntimeError("adjacency table at 0xdeadbeef is corrupt")


def test_unexpected_fault_returns_generic_message() -> None:
	app.dependency_overrides[path_routes._route_planner_dependency] = BrokenPlanner
	try:
		with TestClient(app) as client:
			response = client.post("/api/path", json={"source": 1, "destination": 3})
	finally:
		app.dependency_overrides.clear()

	assert response.status_code == 500
	assert response.json() == {"success": False, "message": "Internal server error"}
	assert "deadbeef" not in response.text


def test_routing_client_speaks_the_contract() -> None:
	with TestClient(app) as http:
		client = RoutingClient(RoutingAPIContract(base_url="http://testserver"), session=http)  # type: ignore[arg-type]

		assert client.health()["status"] == "OK"
		assert len(client.junctions()) == 8
		assert [j["name"] for j in client.search_junctions("model")] == ["Model Town"]
		assert client.update_traffic(1, 2, 2.0)["success"] is True
		route = client.find_path(1, 3)
		assert client.reset_traffic()["success"] is True

	assert route["totalTime"] == 28.0


def test_exact_search_matches_whole_name_only() -> None:
	with TestClient(app) as client:
		exact = client.get("/api/junctions/search", params={"name": "  model TOWN ", "exact": "true"}).json()
		partial = client.get("/api/junctions/search", params={"name": "model", "exact": "true"}).json()

	assert [j["id"] for j in exact["junctions"]] == [8]
	assert partial["junctions"] == []


def test_traffic_history_and_severe_roads() -> None:
	with TestClient(app) as client:
		client.post("/api/traffic", json={"from": 1, "to": 2, "multiplier": 4.0})
		client.post("/api/traffic", json={"from": 2, "to": 1, "multiplier": 2.0})
		client.post("/api/traffic", json={"from": 2, "to": 6, "multiplier": 3.5})
		road = client.get("/api/traffic/history/2/1").json()
		summary = client.get("/api/traffic/history").json()
		severe = client.get("/api/traffic/severe").json()
		missing = client.get("/api/traffic/history/1/3")

	assert road["updates"] == 2
	assert [entry["multiplier"] for entry in road["entries"]] == [4.0, 2.0]
	assert summary["totalUpdates"] == 3
	assert summary["mostActive"][0] == {"from": 1, "to": 2, "updates": 2}
	assert [(r["from"], r["to"]) for r in severe["roads"]] == [(2, 6)]
	assert missing.status_code == 404
	assert missing.json()["success"] is False
