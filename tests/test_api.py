import pytest
from fastapi.testclient import TestClient

from starfighter.api import app


@pytest.fixture
def client(tmp_path, monkeypatch):
    # settings and records resolve relative to the working directory
    monkeypatch.chdir(tmp_path)
    return TestClient(app)


def post_run(client, score, **kw):
    body = {"score": score, "kills": 5, "survival_time_ms": 60000, "shots": 10, "hits": 5}
    body.update(kw)
    resp = client.post("/api/records", json=body)
    assert resp.status_code == 201
    return resp.json()


def test_settings_endpoint(client):
    data = client.get("/api/settings").json()
    assert data["window"]["width"] == 600
    assert data["records"]["max_records"] == 100


def test_content_endpoints(client):
    assert "boss" in client.get("/api/content/enemies").json()
    assert "time_slow" in client.get("/api/content/powerups").json()
    assert "nightmare" in client.get("/api/content/difficulties").json()
    assert "survivor" in client.get("/api/content/achievements").json()
    assert client.get("/api/content/weapons").status_code == 404


def test_record_lifecycle(client):
    rec = post_run(client, 900, difficulty="hard")
    assert rec["accuracy"] == 50
    assert rec["kills_per_minute"] == 5.0

    got = client.get(f"/api/records/{rec['id']}")
    assert got.status_code == 200
    assert got.json()["score"] == 900

    assert client.delete(f"/api/records/{rec['id']}").status_code == 200
    assert client.get(f"/api/records/{rec['id']}").status_code == 404
    assert client.delete(f"/api/records/{rec['id']}").status_code == 404


def test_invalid_summary_is_rejected(client):
    resp = client.post("/api/records", json={"score": -5})
    assert resp.status_code == 422


def test_list_filters(client):
    post_run(client, 100, difficulty="easy")
    post_run(client, 400, difficulty="hard")
    post_run(client, 250, difficulty="hard")
    scores = [r["score"] for r in client.get("/api/records", params={"difficulty": "hard"}).json()]
    assert sorted(scores) == [250, 400]
    top = client.get("/api/records", params={"sort_by": "score", "sort_order": "desc", "limit": 1}).json()
    assert [r["score"] for r in top] == [400]


def test_statistics_and_clear(client):
    post_run(client, 100)
    post_run(client, 300)
    stats = client.get("/api/statistics").json()
    assert stats["total_games"] == 2
    assert stats["best_score"] == 300
    assert client.delete("/api/records").status_code == 200
    assert client.get("/api/records").json() == []


def test_export_import(client):
    post_run(client, 100)
    exported = client.get("/api/export").json()
    client.delete("/api/records")
    resp = client.post("/api/import", json={"records": exported["records"]})
    assert resp.status_code == 200
    assert resp.json()["imported"] == 1
    bad = client.post("/api/import", json={"records": [{"score": 1}]})
    assert bad.status_code == 400
