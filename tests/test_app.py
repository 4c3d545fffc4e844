import asyncio
import logging
import socket

import pytest
from starlette.testclient import TestClient

from itemserver.app import AppState, create_app, run_server
from itemserver.store import DataStore


def test_default_state_has_fresh_store():
    state = AppState()
    assert isinstance(state.store, DataStore)
    assert [item.id for item in state.store.get_items(None, None)] == [1, 2]
    assert AppState().store is not state.store


def test_root_reports_state_name_and_version():
    client = TestClient(create_app(AppState(app_name="Demo", version="9.9.9")))
    body = client.get("/").json()
    assert body["success"] is True
    assert body["data"]["app"] == "Demo"
    assert body["data"]["version"] == "9.9.9"


def test_default_app_uses_default_state():
    state = AppState()
    body = TestClient(create_app()).get("/").json()
    assert body["data"]["app"] == state.app_name
    assert body["data"]["version"] == state.version


def test_handlers_share_the_given_store():
    store = DataStore()
    created = store.create_item("Widget", None, ["x"], None)
    client = TestClient(create_app(AppState(store=store)))
    body = client.get(f"/api/items/{created.id}").json()
    assert body["data"]["name"] == "Widget"

    client.delete(f"/api/items/{created.id}")
    with pytest.raises(Exception):
        store.get_item(created.id)


def test_cors_allows_listed_origin():
    client = TestClient(create_app())
    response = client.get("/health", headers={"Origin": "http://localhost:3000"})
    assert response.headers["access-control-allow-origin"] == "http://localhost:3000"
    assert response.headers["access-control-allow-credentials"] == "true"


def test_cors_ignores_unlisted_origin():
    client = TestClient(create_app())
    response = client.get("/health", headers={"Origin": "http://elsewhere.example.com"})
    assert response.status_code == 200
    assert "access-control-allow-origin" not in response.headers


def test_not_found_item_uses_error_body():
    client = TestClient(create_app())
    response = client.get("/api/items/999")
    assert response.status_code == 404
    assert response.json() == {"error": "Item with id 999 not found", "status": 404}


def test_requests_are_logged(caplog):
    caplog.set_level(logging.INFO, logger="itemserver.request_logging")
    TestClient(create_app()).get("/api/stats")
    outcomes = [r.outcome for r in caplog.records if r.name == "itemserver.request_logging"]
    assert outcomes == ["request completed successfully"]


def test_run_server_raises_when_port_taken():
    holder = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    holder.bind(("127.0.0.1", 0))
    holder.listen()
    port = holder.getsockname()[1]
    try:
        with pytest.raises(OSError):
            asyncio.run(run_server(create_app(), "127.0.0.1", port))
    finally:
        holder.close()