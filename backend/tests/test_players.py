import os
import sys

from fastapi.testclient import TestClient

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from pongrank.main import app  # noqa: E402

client = TestClient(app)


def _create(name: str) -> dict:
    resp = client.post("/api/v0/players", json={"name": name})
    assert resp.status_code == 200, resp.text
    return resp.json()


def test_create_player_starts_at_default_rating() -> None:
    data = _create("  Alice   Smith ")
    assert data["name"] == "Alice Smith"
    assert data["rating"] == 1200
    assert data["wins"] == 0
    assert data["losses"] == 0
    assert data["id"]
    assert data["createdAt"]


def test_duplicate_name_is_rejected_case_insensitively() -> None:
    _create("Alice")
    resp = client.post("/api/v0/players", json={"name": "ALICE"})
    assert resp.status_code == 400
    assert resp.headers["content-type"].startswith("application/problem+json")
    body = resp.json()
    assert body["code"] == "player_exists"
    assert "already exists" in body["detail"]


def test_blank_name_is_rejected() -> None:
    resp = client.post("/api/v0/players", json={"name": "   "})
    assert resp.status_code == 422


def test_list_players_filters_by_name() -> None:
    _create("Alice")
    _create("Bob")
    _create("Alicia")

    resp = client.get("/api/v0/players", params={"q": "ali"})
    assert resp.status_code == 200
    data = resp.json()
    assert data["total"] == 2
    assert sorted(p["name"] for p in data["players"]) == ["Alice", "Alicia"]

    page = client.get("/api/v0/players", params={"limit": 1, "offset": 1}).json()
    assert page["total"] == 3
    assert len(page["players"]) == 1


def test_get_and_delete_player() -> None:
    alice = _create("Alice")

    resp = client.get(f"/api/v0/players/{alice['id']}")
    assert resp.status_code == 200
    assert resp.json()["name"] == "Alice"

    resp = client.delete(f"/api/v0/players/{alice['id']}")
    assert resp.status_code == 204

    resp = client.get(f"/api/v0/players/{alice['id']}")
    assert resp.status_code == 404
    assert resp.json()["code"] == "player_not_found"

    resp = client.delete(f"/api/v0/players/{alice['id']}")
    assert resp.status_code == 404
