import json

import pytest
from fastapi.testclient import TestClient

from api.main import app


@pytest.fixture
def client():
    return TestClient(app)


FRAME = {"stories": 2, "bays": 1, "story_height": 3.0, "bay_width": 5.0,
         "segments": 1, "story_mass": 20.0, "column_ei": 1.0e4, "beam_ei": 1.0e4}


def test_modal_endpoint(client):
    resp = client.post("/frame/modal", json=FRAME)
    assert resp.status_code == 200
    data = resp.json()
    assert data["estimate_frequency"] > 0.0
    assert len(data["K_matrix"]) == 6


def test_modal_endpoint_rejects_invalid_input(client):
    resp = client.post("/frame/modal", json={**FRAME, "story_height": 0.0})
    assert resp.status_code == 422
    assert "story_height" in resp.json()["detail"]


def test_modal_endpoint_rejects_massless_nodes(client):
    resp = client.post("/frame/modal", json={**FRAME, "segments": 3})
    assert resp.status_code == 422


def test_ground_motion_endpoint(client):
    resp = client.post("/frame/ground-motion",
                       json={"kind": "filtered_random", "duration": 1.0, "dt": 0.1, "seed": 5})
    assert resp.status_code == 200
    assert len(resp.json()["ag"]) == 10


def test_websocket_simulation(client):
    payload = {"frame_req": FRAME, "sim_req": {"duration": 0.2, "dt": 0.05, "kind": "pulse"}}
    with client.websocket_connect("/ws/simulate") as ws:
        ws.send_text(json.dumps(payload))
        frames = [ws.receive_json()]
        while frames[-1]["type"] != "END":
            frames.append(ws.receive_json())

    assert frames[0]["type"] == "INIT"
    assert sum(f["type"] == "DATA" for f in frames) == 4


def test_websocket_reports_errors(client):
    payload = {"frame_req": {**FRAME, "bays": 0}, "sim_req": {}}
    with client.websocket_connect("/ws/simulate") as ws:
        ws.send_text(json.dumps(payload))
        frame = ws.receive_json()
    assert frame["type"] == "ERROR"
    assert "bays" in frame["message"]


def test_modal_endpoint_rejects_fractional_bays(client):
    resp = client.post("/frame/modal", json={**FRAME, "bays": 1.9})
    assert resp.status_code == 422
    assert "bays" in resp.json()["detail"]


def test_time_history_endpoint(client):
    payload = {"frame_req": FRAME, "sim_req": {"duration": 0.2, "dt": 0.05, "kind": "pulse"}}
    resp = client.post("/frame/time-history", json=payload)
    assert resp.status_code == 200
    data = resp.json()
    assert len(data["t"]) == 4
    assert len(data["x"]) == 6


@pytest.mark.parametrize("payload,fragment", [
    ({"frame_delay": "fast"}, "frame_delay"),
    (["frame_req", "sim_req"], "JSON object"),
    ({"frame_req": [1, 2]}, "JSON object"),
])
def test_websocket_reports_malformed_payloads(client, payload, fragment):
    with client.websocket_connect("/ws/simulate") as ws:
        ws.send_text(json.dumps(payload))
        frame = ws.receive_json()
    assert frame["type"] == "ERROR"
    assert fragment in frame["message"]
