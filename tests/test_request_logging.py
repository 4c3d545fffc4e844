import logging

import pytest
from starlette.applications import Starlette
from starlette.responses import PlainTextResponse, Response
from starlette.routing import Route
from starlette.testclient import TestClient

from itemserver.request_logging import RequestLoggingMiddleware

LOGGER_NAME = "itemserver.request_logging"


async def _respond(request):
    code = int(request.path_params["code"])
    if code == 204:
        return Response(status_code=code)
    return PlainTextResponse("body", status_code=code)


def _inner_app():
    return Starlette(routes=[Route("/status/{code}", _respond, methods=["GET", "POST"])])


def _records(caplog):
    return [record for record in caplog.records if record.name == LOGGER_NAME]


@pytest.mark.parametrize(
    "code, outcome",
    [
        (200, "request completed successfully"),
        (201, "request completed successfully"),
        (404, "client error"),
        (422, "client error"),
        (500, "server error"),
        (503, "server error"),
    ],
)
def test_logs_outcome_for_status(caplog, code, outcome):
    caplog.set_level(logging.INFO, logger=LOGGER_NAME)
    client = TestClient(RequestLoggingMiddleware(_inner_app()))
    response = client.get(f"/status/{code}")
    assert response.status_code == code
    records = _records(caplog)
    assert len(records) == 1
    assert records[0].outcome == outcome
    assert records[0].status == code
    assert records[0].method == "GET"


def test_redirect_status_is_not_logged(caplog):
    caplog.set_level(logging.INFO, logger=LOGGER_NAME)
    client = TestClient(RequestLoggingMiddleware(_inner_app()))
    response = client.get("/status/302", follow_redirects=False)
    assert response.status_code == 302
    assert _records(caplog) == []


def test_response_passes_through_unchanged(caplog):
    caplog.set_level(logging.INFO, logger=LOGGER_NAME)
    client = TestClient(RequestLoggingMiddleware(_inner_app()))
    response = client.get("/status/200")
    assert response.text == "body"


def test_record_carries_uri_and_latency(caplog):
    caplog.set_level(logging.INFO, logger=LOGGER_NAME)
    client = TestClient(RequestLoggingMiddleware(_inner_app()))
    client.post("/status/201")
    (record,) = _records(caplog)
    assert record.uri.endswith("/status/201")
    assert record.method == "POST"
    assert record.latency_ms >= 0


def test_unmatched_route_logs_client_error(caplog):
    caplog.set_level(logging.INFO, logger=LOGGER_NAME)
    client = TestClient(RequestLoggingMiddleware(_inner_app()))
    response = client.get("/nowhere")
    assert response.status_code == 404
    (record,) = _records(caplog)
    assert record.outcome == "client error"