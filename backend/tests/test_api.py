"""
API integration tests.
Uses TestClient to avoid starting a server.
Requires: pip install httpx (for TestClient)
"""
from __future__ import annotations

import sqlite3
from pathlib import Path
from unittest.mock import patch

import pytest

try:
    from fastapi.testclient import TestClient
    HAS_HTTPX = True
except (ImportError, RuntimeError):
    HAS_HTTPX = False

# Ensure project root on path
import sys
sys.path.insert(0, str(Path(__file__).resolve().parent.parent.parent))

pytestmark = pytest.mark.skipif(not HAS_HTTPX, reason="httpx required for TestClient")

from backend.api import app
from backend.persistence.db import set_db_path, init_db


@pytest.fixture(autouse=True)
def isolated_db(tmp_path):
    """Use a temporary DB for each test."""
    db_path = tmp_path / "test.db"
    set_db_path(db_path)
    init_db(db_path=db_path)
    yield db_path


@pytest.fixture
def client():
    return TestClient(app)


def _add_players(client, n: int) -> list[int]:
    return [client.post("/players", json={"name": f"Player {i}"}).json()["id"] for i in range(1, n + 1)]


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_post_players(client):
    """POST /players creates an available player."""
    resp = client.post("/players", json={"name": "Alex"})
    assert resp.status_code == 201
    data = resp.json()
    assert data["name"] == "Alex"
    assert data["available"] is True
    assert data["phone"] is None
    assert "id" in data
    assert "created_at" in data


@pytest.mark.parametrize("body", [{}, {"name": ""}, {"name": "   "}])
def test_post_players_missing_name(client, body):
    resp = client.post("/players", json=body)
    assert resp.status_code == 400
    assert resp.json() == {"error": "Name is required"}


def test_get_players_available_first(client):
    ids = _add_players(client, 3)
    client.patch(f"/players/{ids[2]}/availability", json={"available": False})
    resp = client.get("/players")
    assert resp.status_code == 200
    listed = [p["id"] for p in resp.json()]
    assert listed == [ids[1], ids[0], ids[2]]


def test_get_available_players(client):
    ids = _add_players(client, 2)
    client.patch(f"/players/{ids[0]}/availability", json={"available": False})
    resp = client.get("/players/available")
    assert [p["id"] for p in resp.json()] == [ids[1]]


def test_patch_availability(client):
    (pid,) = _add_players(client, 1)
    resp = client.patch(f"/players/{pid}/availability", json={"available": False})
    assert resp.status_code == 200
    assert resp.json()["available"] is False


@pytest.mark.parametrize("body", [{"available": "yes"}, {"available": 1}, {}])
def test_patch_availability_requires_boolean(client, body):
    (pid,) = _add_players(client, 1)
    resp = client.patch(f"/players/{pid}/availability", json=body)
    assert resp.status_code == 400
    assert "error" in resp.json()


def test_patch_availability_missing_player(client):
    resp = client.patch("/players/999/availability", json={"available": True})
    assert resp.status_code == 404


def test_patch_phone(client):
    (pid,) = _add_players(client, 1)
    resp = client.patch(f"/players/{pid}/phone", json={"phone": " (555) 123-4567 "})
    assert resp.status_code == 200
    assert resp.json()["phone"] == "(555) 123-4567"


def test_patch_phone_invalid(client):
    (pid,) = _add_players(client, 1)
    resp = client.patch(f"/players/{pid}/phone", json={"phone": "not a phone"})
    assert resp.status_code == 400
    assert resp.json() == {"error": "Phone number is invalid"}
    resp = client.patch(f"/players/{pid}/phone", json={})
    assert resp.status_code == 400
    assert resp.json() == {"error": "Phone number is required"}


def test_patch_phone_missing_player(client):
    resp = client.patch("/players/999/phone", json={"phone": "5551234567"})
    assert resp.status_code == 404
    assert resp.json() == {"error": "Player not found"}


def test_delete_player_removes_matches(client):
    ids = _add_players(client, 8)
    client.post("/matches", json={"playerIds": ids[:4], "matchGroup": 1, "numCourts": 2})
    client.post("/matches", json={"playerIds": ids[4:], "matchGroup": 1, "numCourts": 2})
    resp = client.delete(f"/players/{ids[3]}")
    assert resp.status_code == 200
    assert resp.json() == {"success": True}
    matches = client.get("/matches").json()
    assert len(matches) == 1
    assert ids[3] not in [matches[0][f"player{i}_id"] for i in range(1, 5)]


def test_delete_missing_player(client):
    resp = client.delete("/players/999")
    assert resp.status_code == 404
    assert resp.json() == {"error": "Player not found"}


def test_next_group_fresh(client):
    resp = client.get("/matches/next-group?numCourts=2")
    assert resp.status_code == 200
    assert resp.json() == {"nextGroup": 1}


def test_next_group_rejects_zero_courts(client):
    resp = client.get("/matches/next-group?numCourts=0")
    assert resp.status_code == 400


def test_client_flow_two_courts(client):
    """Client-driven round: next group, then one POST per court with the same group."""
    ids = _add_players(client, 8)
    group = client.get("/matches/next-group?numCourts=2").json()["nextGroup"]
    for chunk in (ids[:4], ids[4:]):
        resp = client.post("/matches", json={"playerIds": chunk, "matchGroup": group, "numCourts": 2})
        assert resp.status_code == 201
        assert resp.json()["match_group"] == group
        assert resp.json()["num_courts"] == 2
    assert client.get("/matches/next-group?numCourts=2").json() == {"nextGroup": group + 1}
    assert client.get("/matches/next-group?numCourts=1").json() == {"nextGroup": 1}


def test_post_match_slots(client):
    ids = _add_players(client, 4)
    resp = client.post("/matches", json={"playerIds": ids, "matchGroup": 1, "numCourts": 1})
    data = resp.json()
    assert [data["player1_id"], data["player2_id"], data["player3_id"], data["player4_id"]] == ids


@pytest.mark.parametrize("body", [
    {"playerIds": [1, 2, 3], "matchGroup": 1, "numCourts": 1},
    {"playerIds": [1, 2, 3, 4, 5], "matchGroup": 1, "numCourts": 1},
    {"matchGroup": 1, "numCourts": 1},
    {"playerIds": [1, 2, 3, 4], "numCourts": 1},
    {"playerIds": [1, 2, 3, 4], "matchGroup": 1},
])
def test_post_match_invalid(client, body):
    _add_players(client, 5)
    resp = client.post("/matches", json=body)
    assert resp.status_code == 400
    assert "error" in resp.json()
    assert client.get("/matches").json() == []


def test_post_match_wrong_count_message(client):
    ids = _add_players(client, 3)
    resp = client.post("/matches", json={"playerIds": ids, "matchGroup": 1, "numCourts": 1})
    assert resp.json() == {"error": "Match must have exactly 4 players"}


def test_post_match_unknown_player(client):
    ids = _add_players(client, 3)
    resp = client.post("/matches", json={"playerIds": ids + [999], "matchGroup": 1, "numCourts": 1})
    assert resp.status_code == 400


def test_generate_eight_players_two_courts(client):
    ids = _add_players(client, 8)
    resp = client.post("/matches/generate", json={"numCourts": 2, "seed": 3})
    assert resp.status_code == 201
    data = resp.json()
    assert data["match_group"] == 1
    assert len(data["matches"]) == 2
    assert {m["match_group"] for m in data["matches"]} == {1}
    covered = [m[f"player{i}_id"] for m in data["matches"] for i in range(1, 5)]
    assert sorted(covered) == sorted(ids)
    assert len(client.get("/matches").json()) == 2


def test_generate_three_players_rejected(client):
    _add_players(client, 3)
    resp = client.post("/matches/generate", json={"numCourts": 1})
    assert resp.status_code == 400
    assert "Not enough available players" in resp.json()["error"]
    assert client.get("/matches").json() == []


def test_generate_sequential_groups(client):
    _add_players(client, 4)
    first = client.post("/matches/generate", json={"numCourts": 1}).json()
    second = client.post("/matches/generate", json={"numCourts": 1}).json()
    assert (first["match_group"], second["match_group"]) == (1, 2)


def test_generate_same_seed_same_courts(client, isolated_db):
    _add_players(client, 12)
    a = client.post("/matches/generate", json={"numCourts": 3, "seed": 77}).json()
    b = client.post("/matches/generate", json={"numCourts": 3, "seed": 77}).json()
    strip = lambda rnd: [[m[f"player{i}_id"] for i in range(1, 5)] for m in rnd["matches"]]
    assert strip(a) == strip(b)
    assert b["match_group"] == a["match_group"] + 1


def test_get_matches_joined_names(client):
    ids = _add_players(client, 4)
    client.post("/matches", json={"playerIds": ids, "matchGroup": 1, "numCourts": 1})
    client.post("/matches", json={"playerIds": ids[::-1], "matchGroup": 2, "numCourts": 1})
    matches = client.get("/matches").json()
    assert [m["match_group"] for m in matches] == [2, 1]
    assert matches[0]["player1_name"] == "Player 4"
    assert matches[1]["player1_name"] == "Player 1"


def test_get_match_groups(client):
    ids = _add_players(client, 8)
    client.post("/matches", json={"playerIds": ids[:4], "matchGroup": 1, "numCourts": 2})
    groups = client.get("/matches/groups").json()
    assert len(groups) == 1
    assert groups[0]["complete"] is False
    client.post("/matches", json={"playerIds": ids[4:], "matchGroup": 1, "numCourts": 2})
    groups = client.get("/matches/groups").json()
    assert groups[0]["complete"] is True
    assert len(groups[0]["matches"]) == 2


def test_store_failure_renders_500():
    """Store errors propagate to the boundary as a logged 500 with an error body."""
    failing = TestClient(app, raise_server_exceptions=False)
    with patch("backend.api.RosterService.list_players", side_effect=sqlite3.OperationalError("disk I/O error")):
        resp = failing.get("/players")
    assert resp.status_code == 500
    assert resp.json() == {"error": "Internal server error"}


def test_get_match_groups_newest_round_first(client):
    ids = _add_players(client, 9)
    for _ in range(3):
        client.post("/matches/generate", json={"numCourts": 1})
    client.post("/matches/generate", json={"numCourts": 2})
    groups = client.get("/matches/groups").json()
    assert [(g["num_courts"], g["match_group"]) for g in groups] == [(2, 1), (1, 3), (1, 2), (1, 1)]
    newest = groups[0]
    playing = {m[f"player{i}_id"] for m in newest["matches"] for i in range(1, 5)}
    assert [p["id"] for p in newest["sitting_out"]] == [pid for pid in ids if pid not in playing]
    assert newest["duplicated"] is False


def test_post_players_long_name(client):
    resp = client.post("/players", json={"name": "N" * 300})
    assert resp.status_code == 201
    assert resp.json()["name"] == "N" * 300


HUGE = 99999999999999999999


def test_next_group_out_of_range_courts(client):
    resp = client.get(f"/matches/next-group?numCourts={HUGE}")
    assert resp.status_code == 400
    assert "error" in resp.json()


@pytest.mark.parametrize("body", [
    {"playerIds": [1, 2, 3, 4], "matchGroup": HUGE, "numCourts": 1},
    {"playerIds": [1, 2, 3, 4], "matchGroup": 1, "numCourts": HUGE},
    {"playerIds": [1, 2, 3, HUGE], "matchGroup": 1, "numCourts": 1},
    {"playerIds": [1, 2, 3, 0], "matchGroup": 1, "numCourts": 1},
])
def test_post_match_out_of_range_ints(client, body):
    _add_players(client, 4)
    resp = client.post("/matches", json=body)
    assert resp.status_code == 400
    assert "error" in resp.json()
    assert client.get("/matches").json() == []


def test_generate_out_of_range_courts(client):
    _add_players(client, 4)
    resp = client.post("/matches/generate", json={"numCourts": HUGE})
    assert resp.status_code == 400
    assert client.get("/matches").json() == []


@pytest.mark.parametrize("method,suffix,body", [
    ("delete", "", None),
    ("patch", "/availability", {"available": True}),
    ("patch", "/phone", {"phone": "5551234567"}),
])
def test_player_routes_out_of_range_id(client, method, suffix, body):
    kwargs = {"json": body} if body is not None else {}
    resp = getattr(client, method)(f"/players/{HUGE}{suffix}", **kwargs)
    assert resp.status_code == 400
    assert "error" in resp.json()
