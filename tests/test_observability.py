import json
import logging

from fastapi.testclient import TestClient

from practice_api import logging_utils
from practice_api.logging_utils import (
    JSONLogFormatter,
    RequestContextFilter,
    set_resource_context,
)
from practice_api.main import app


client = TestClient(app)


def test_health_endpoint():
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_metrics_endpoint():
    response = client.get("/metrics")
    assert response.status_code == 200
    assert "practice_api_requests_total" in response.text
    assert response.headers["content-type"].startswith("text/plain")


def test_metrics_are_labelled_with_resource(client):
    client.get("/api/medication")

    response = client.get("/metrics")
    assert 'resource="medication"' in response.text


def test_request_id_is_echoed():
    response = client.get("/health", headers={"X-Request-ID": "abc-123"})
    assert response.headers["X-Request-ID"] == "abc-123"


def test_request_id_is_generated():
    response = client.get("/health")
    assert response.headers["X-Request-ID"]


def test_cors_headers():
    response = client.get("/health", headers={"Origin": "http://example.com"})
    assert response.headers["access-control-allow-origin"] == "*"


def test_api_docs_are_served():
    response = client.get("/apidocs/")
    assert response.status_code == 200
    assert "Practice Records API" in response.text


def test_json_log_formatter_includes_extra_fields():
    record = logging.LogRecord(
        name="practice_api.test",
        level=logging.WARNING,
        pathname=__file__,
        lineno=1,
        msg="document not found",
        args=(),
        exc_info=None,
    )
    record.resource = "visit"
    record.operation = "GET"
    record.request_id = "req-1"

    entry = json.loads(JSONLogFormatter().format(record))

    assert entry["message"] == "document not found"
    assert entry["level"] == "WARNING"
    assert entry["resource"] == "visit"
    assert entry["operation"] == "GET"
    assert entry["request_id"] == "req-1"


def test_context_filter_reads_bound_request_and_resource():
    token = logging_utils._request_id_ctx_var.set("req-42")
    try:
        set_resource_context("medication")
        record = logging.LogRecord("practice_api.test", logging.INFO, __file__, 1, "hi", (), None)

        assert RequestContextFilter().filter(record) is True
        assert record.request_id == "req-42"
        assert record.resource == "medication"
    finally:
        logging_utils._request_id_ctx_var.reset(token)
        set_resource_context(None)


def test_explicit_resource_wins_over_context():
    set_resource_context("visit")
    try:
        record = logging.LogRecord("practice_api.test", logging.INFO, __file__, 1, "hi", (), None)
        record.resource = "patient"

        RequestContextFilter().filter(record)

        assert record.resource == "patient"
    finally:
        set_resource_context(None)
