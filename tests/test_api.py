from fastapi.testclient import TestClient

from wayfinder.main import app

client = TestClient(app)


def test_flow():
    r = client.post("/v1/respond", json={"text": "I am at the main entrance"})
    assert r.status_code == 200
    data = r.json()
    assert data["text"] == "Okay, noted you are at Main Entrance."
    sid = data["session_id"]

    r2 = client.post("/v1/respond", json={"text": "take me to gate b12", "session_id": sid})
    assert r2.status_code == 200
    data2 = r2.json()
    assert data2["actions"]["destination"] == "GB12"
    assert "Gate B12" in data2["text"]

    r3 = client.get(f"/v1/session/{sid}")
    assert r3.status_code == 200
    assert r3.json()["route"][-1] == "GB12"


def test_parse():
    r = client.post("/v1/parse", json={"text": "where is the nearest toilet"})
    assert r.status_code == 200
    data = r.json()
    assert data["intent"] == "navigate"
    assert data["action"] == {"kind": "navigate", "target": "NEAREST_BATHROOM"}


def test_position_and_gate():
    sid = client.post("/v1/respond", json={"text": "hello"}).json()["session_id"]
    r = client.post(f"/v1/session/{sid}/position", json={"x": 2, "y": 1, "floor": 1})
    assert r.status_code == 200
    assert r.json()["location"] == "E1"

    r = client.post(f"/v1/session/{sid}/gate", json={"gate": "gate a5"})
    assert r.json()["gate"] == "Gate A5"
    r = client.post(f"/v1/session/{sid}/gate", json={"gate": "somewhere"})
    assert r.status_code == 422
    r = client.post(f"/v1/session/{sid}/gate", json={"gate": "food court"})
    assert r.status_code == 422
    assert client.get(f"/v1/session/{sid}").json()["user_gate"] == "Gate A5"


def test_reset():
    sid = client.post("/v1/respond", json={"text": "I am at the entrance"}).json()["session_id"]
    assert client.get(f"/v1/session/{sid}/reset").json() == {"status": "ok", "session_id": sid}
    assert client.get(f"/v1/session/{sid}").json()["current_node_id"] is None
    assert client.get("/v1/session/unknown-session/reset").status_code == 404
