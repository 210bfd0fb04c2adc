"""
Tests for the request logging middleware.
"""
import logging

from fastapi import FastAPI, HTTPException
from fastapi.testclient import TestClient

from iqscalar.middleware import RequestLoggingMiddleware

LOGGER = "iqscalar.middleware.request_logging"


def build_app():
    app = FastAPI()
    app.add_middleware(RequestLoggingMiddleware)

    @app.get("/v1/test/progress")
    async def progress():
        return {"ok": True}

    @app.get("/v1/health")
    async def health():
        return {"status": "healthy"}

    @app.get("/v1/missing")
    async def missing():
        raise HTTPException(status_code=404, detail="nope")

    return app


class TestRequestLoggingMiddleware:
    """Tests for RequestLoggingMiddleware."""

    def test_generates_request_id(self):
        client = TestClient(build_app())
        response = client.get("/v1/test/progress")
        assert response.status_code == 200
        assert response.headers["X-Request-ID"]

    def test_echoes_client_request_id(self):
        client = TestClient(build_app())
        response = client.get("/v1/test/progress", headers={"X-Request-ID": "req-42"})
        assert response.headers["X-Request-ID"] == "req-42"

    def test_logs_completed_request_with_user(self, caplog):
        client = TestClient(build_app())
        with caplog.at_level(logging.INFO, logger=LOGGER):
            client.get("/v1/test/progress", headers={"X-User-ID": "user-7"})

        completed = [r for r in caplog.records if r.getMessage() == "Request completed"]
        assert len(completed) == 1
        assert completed[0].user_identifier == "user-7"
        assert completed[0].status_code == 200
        assert completed[0].path == "/v1/test/progress"

    def test_anonymous_when_no_user_header(self, caplog):
        client = TestClient(build_app())
        with caplog.at_level(logging.INFO, logger=LOGGER):
            client.get("/v1/test/progress")
        assert all(r.user_identifier == "anonymous" for r in caplog.records if r.name == LOGGER)

    def test_health_checks_logged_at_debug(self, caplog):
        client = TestClient(build_app())
        with caplog.at_level(logging.INFO, logger=LOGGER):
            client.get("/v1/health")
        assert not [r for r in caplog.records if r.name == LOGGER]

    def test_client_errors_logged_as_warning(self, caplog):
        client = TestClient(build_app())
        with caplog.at_level(logging.INFO, logger=LOGGER):
            client.get("/v1/missing")

        warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
        assert warnings[0].getMessage() == "Client error response"
        assert warnings[0].status_code == 404
