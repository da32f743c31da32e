"""
Tests for the store service HTTP endpoints
"""
import pytest
from fastapi.testclient import TestClient

from enigma import state
from enigma.main import app
from enigma.models import GameSettings


@pytest.fixture
def client(store):
    state.STORE = store
    yield TestClient(app)
    state.STORE = None


def create_team(client, name="Alpha", code="BSIT3A", section="BSIT-3A"):
    response = client.post("/teams", json={
        "team_name": name,
        "access_code": code,
        "section": section,
        "members": ["Bo"],
        "question_seed": 42,
    })
    assert response.status_code == 200
    return response.json()


def test_health(client):
    """Health check reports active questions"""
    data = client.get("/").json()
    assert data["status"] == "ok"
    assert data["active_questions"] == 20


def test_config(client):
    """Settings are exposed"""
    data = client.get("/config").json()
    assert data["default_duration"] == 7200
    assert data["base_points"]["hard"] == 200


def test_access_code_lookup(client):
    """Known code → row, unknown → 404"""
    assert client.get("/access-codes/BSIT3A").json()["section"] == "BSIT-3A"
    assert client.get("/access-codes/OLD").json()["active"] is False
    assert client.get("/access-codes/NOPE").status_code == 404


def test_team_create_find_get(client):
    """Created rows can be found by code and name, and by id"""
    team = create_team(client)
    assert team["points"] == 0
    assert team["end_time"] is None

    found = client.get("/teams", params={"access_code": "BSIT3A", "team_name": "Alpha"})
    assert found.json()["id"] == team["id"]
    assert client.get(f"/teams/{team['id']}").json()["team_name"] == "Alpha"
    assert client.get("/teams", params={"access_code": "BSIT3A", "team_name": "Nope"}).status_code == 404
    assert client.get("/teams/missing").status_code == 404


def test_team_partial_update(client):
    """PATCH touches only the named fields"""
    team = create_team(client)
    updated = client.patch(f"/teams/{team['id']}", json={"points": 50}).json()
    assert updated["points"] == 50
    assert updated["members"] == ["Bo"]

    updated = client.patch(f"/teams/{team['id']}", json={"completed_puzzles": ["e01"]}).json()
    assert updated["points"] == 50
    assert updated["completed_puzzles"] == ["e01"]


def test_team_update_rejects_immutable(client):
    """Seed and id cannot be rewritten"""
    team = create_team(client)
    assert client.patch(f"/teams/{team['id']}", json={"question_seed": 1}).status_code == 400
    assert client.patch(f"/teams/{team['id']}", json={"points": -5}).status_code == 400
    assert client.patch("/teams/missing", json={"points": 1}).status_code == 404


def test_team_create_requires_active_code(client):
    """Rows are only created under an active access code"""
    payload = {"team_name": "Alpha", "section": "BSCS-1A", "members": ["Bo"], "question_seed": 1}
    assert client.post("/teams", json={**payload, "access_code": "OLD"}).status_code == 400
    assert client.post("/teams", json={**payload, "access_code": "NOPE"}).status_code == 400
    assert client.get("/teams/all").json() == []


def test_team_size_follows_settings(client, monkeypatch):
    """max_members from the settings caps create and update"""
    monkeypatch.setattr(state, "SETTINGS", GameSettings(max_members=2))
    response = client.post("/teams", json={
        "team_name": "Alpha",
        "access_code": "BSIT3A",
        "section": "BSIT-3A",
        "members": ["a", "b", "c"],
        "question_seed": 42,
    })
    assert response.status_code == 400

    team = create_team(client)
    assert client.patch(f"/teams/{team['id']}", json={"members": ["Bo", "Cy"]}).status_code == 200
    assert client.patch(f"/teams/{team['id']}", json={"members": ["Bo", "Cy", "Di"]}).status_code == 400


def test_section_listing(client):
    """Rows are listed per section"""
    create_team(client, "Alpha")
    create_team(client, "Gamma", code="BSCS4B", section="BSCS-4B")
    rows = client.get("/sections/BSIT-3A/teams").json()
    assert [r["team_name"] for r in rows] == ["Alpha"]
    assert len(client.get("/teams/all").json()) == 2


def test_questions_never_leak_answers(client):
    """Public question views carry no answer"""
    questions = client.get("/questions").json()
    assert len(questions) == 20
    assert all(q["answer"] is None for q in questions)
    assert client.get("/questions/e01").json()["answer"] is None
    assert client.get("/questions/zzz").status_code == 404


def test_verify_answer(client):
    """Verification is case-insensitive"""
    assert client.post("/questions/h01/verify", json={"answer": "HARD1"}).json() == {"correct": True}
    assert client.post("/questions/h01/verify", json={"answer": "nope"}).json() == {"correct": False}
    assert client.post("/questions/zzz/verify", json={"answer": "x"}).status_code == 404


def test_hints(client):
    """Hints by index; missing ones are 404"""
    assert client.get("/questions/e01/hints/0").json() == {"hint": "first"}
    assert client.get("/questions/m01/hints/1").status_code == 404
    assert client.get("/questions/e01/hints/3").status_code == 404


def test_leaderboard(client):
    """Leaderboard ranks one entry per team name"""
    a = create_team(client, "Alpha")
    b = create_team(client, "Alpha")
    c = create_team(client, "Beta")
    client.patch(f"/teams/{a['id']}", json={"points": 50})
    client.patch(f"/teams/{b['id']}", json={"points": 80})
    client.patch(f"/teams/{c['id']}", json={"points": 60})

    data = client.get("/leaderboard/BSIT-3A").json()
    assert data["teams"] == [
        {"rank": 1, "team_name": "Alpha", "points": 80},
        {"rank": 2, "team_name": "Beta", "points": 60},
    ]


def test_admin_login(client):
    """Credential lookup"""
    assert client.post("/admin/login", json={"username": "admin", "password": "changeme"}).json()["valid"]
    assert not client.post("/admin/login", json={"username": "admin", "password": "x"}).json()["valid"]


def test_admin_session_controls(client):
    """Start timer, list, stop one, stop all"""
    a = create_team(client, "Alpha")
    create_team(client, "Beta")

    started = client.post("/admin/start-timer", json={"section": "BSIT-3A", "minutes": 15})
    assert started.json()["updated"] == 2
    assert client.post("/admin/start-timer", json={"section": "BSIT-3A", "minutes": 15}).status_code == 404

    assert client.get("/admin/sessions", params={"section": "BSIT-3A"}).json()["total_active"] == 2

    stopped = client.post("/admin/stop-session", json={"team_id": a["id"]})
    assert stopped.json()["success"]
    assert client.get("/admin/sessions").json()["total_active"] == 1

    assert client.post("/admin/stop-all", json={}).json()["stopped"] == 1
    assert client.post("/admin/stop-session", json={"team_id": "missing"}).status_code == 404
