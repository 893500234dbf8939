"""
Tests for the HTTP API.

Run with: python -m pytest tests/test_api.py -v
"""

import pytest
from fastapi.testclient import TestClient

from logic.models import BubblePosition
from main import create_app
from server.comments import SAVE_FAILED_MESSAGE


@pytest.fixture
def client(store):
    return TestClient(create_app(store))


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.text == "OK"


def test_photo_catalog(client):
    response = client.get("/api/photos")
    assert response.status_code == 200
    data = response.json()

    assert data["default_photo"] == "l1"
    ids = [p["id"] for p in data["photos"]]
    assert ids == ["l1", "l2", "l3", "l4", "l5", "k1", "k2", "k3", "k4", "k5"]


def test_photo_detail(client):
    response = client.get("/api/photos/k1")
    assert response.status_code == 200
    photo = response.json()
    assert photo["url"] == "/K_1.jpg"
    assert photo["label"] == "絵 6"
    assert photo["thumbnail"] == "/K_1_L.png"


def test_unknown_photo_is_404(client):
    assert client.get("/api/photos/zz").status_code == 404
    assert client.get("/api/photos/zz/comments").status_code == 404
    assert client.post("/api/photos/zz/comments", json={"text": "hi"}).status_code == 404


def test_create_comment_trims_and_stores(client, store):
    response = client.post("/api/photos/l2/comments", json={"text": "  忘れません  "})

    assert response.status_code == 201
    data = response.json()
    assert data["text"] == "忘れません"
    assert data["photo_id"] == "l2"
    assert [c.text for c in store.comments] == ["忘れません"]


def test_create_comment_notifies_listeners(client, store):
    received = []
    store.feed.subscribe("l2", received.append)

    client.post("/api/photos/l2/comments", json={"text": "live"})

    assert [c.text for c in received] == ["live"]


@pytest.mark.parametrize("text", ["", "   ", "x" * 501])
def test_create_comment_rejects_invalid_text(client, store, text):
    response = client.post("/api/photos/l1/comments", json={"text": text})

    assert response.status_code == 400
    assert store.comments == []


def test_create_comment_store_failure_is_surfaced(client, store):
    store.fail_inserts = True

    response = client.post("/api/photos/l1/comments", json={"text": "lost?"})

    assert response.status_code == 502
    assert response.json()["detail"] == SAVE_FAILED_MESSAGE


def test_list_comments_newest_first(client, store):
    store.add("l1", "older", "a")
    store.add("l1", "newer", "b")

    data = client.get("/api/photos/l1/comments").json()

    assert data["ok"] is True
    assert [c["id"] for c in data["comments"]] == ["b", "a"]


def test_list_comments_failure_distinguished_from_empty(client, store):
    assert client.get("/api/photos/l1/comments").json() == {"photo_id": "l1", "ok": True, "comments": []}

    store.fail_reads = True
    data = client.get("/api/photos/l1/comments").json()

    assert data == {"photo_id": "l1", "ok": False, "comments": []}


def test_positions_roundtrip_with_clamping(client, store):
    response = client.put("/api/photos/l1/positions/c1", json={"top": 150, "left": -10})

    assert response.status_code == 200
    assert response.json() == {"comment_id": "c1", "photo_id": "l1", "top_pct": 96.0, "left_pct": 4.0}
    assert store.positions["c1"] == BubblePosition(comment_id="c1", photo_id="l1", top=96, left=4)

    data = client.get("/api/photos/l1/positions").json()
    assert data["positions"] == [{"comment_id": "c1", "photo_id": "l1", "top_pct": 96.0, "left_pct": 4.0}]


def test_position_rejects_non_numeric(client):
    response = client.put("/api/photos/l1/positions/c1", json={"top": "high", "left": 10})
    assert response.status_code == 422


def test_position_store_failure(client, store):
    store.upsert_failures = 1

    response = client.put("/api/photos/l1/positions/c1", json={"top": 10, "left": 10})

    assert response.status_code == 502

