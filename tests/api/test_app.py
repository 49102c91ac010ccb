"""
Tests for the application factory: startup bootstrap, health,
collections listing, middleware headers and error mapping.
"""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from docrest.api.app import create_app
from docrest.api.middleware.errors import ERROR_CODE_TO_STATUS, status_for_error_code
from docrest.api.settings import DocRestAPISettings
from docrest.core.errors import ManifestError


def _settings(tmp_path, **overrides) -> DocRestAPISettings:
    return DocRestAPISettings(
        database_url=f"sqlite:///{tmp_path / 'test.db'}",
        _env_file=None,
        **overrides,
    )


@pytest.fixture()
def client(tmp_path):
    with TestClient(create_app(settings=_settings(tmp_path))) as c:
        yield c


class TestErrorCodeMapping:
    def test_known_codes(self):
        assert status_for_error_code("INVALID_INPUT") == 400
        assert status_for_error_code("NOT_FOUND") == 422
        assert status_for_error_code("NOT_IMPLEMENTED") == 501
        assert status_for_error_code("STORAGE_FAILURE") == 500
        assert status_for_error_code("IDENTIFIER_GENERATION_FAILED") == 500

    def test_unknown_code_defaults_to_500(self):
        assert status_for_error_code("SOMETHING_ELSE") == 500

    def test_mapping_completeness(self):
        for code, status in ERROR_CODE_TO_STATUS.items():
            assert 400 <= status <= 599, f"{code} -> {status}"


class TestStartup:
    def test_manifest_bootstrapped(self, tmp_path, manifest):
        app = create_app(settings=_settings(tmp_path, manifest_path=str(manifest)))
        with TestClient(app) as c:
            names = [r["name"] for r in c.get("/collections").json()["results"]]
        assert names == ["authors", "books"]

    def test_restart_with_same_manifest(self, tmp_path, manifest):
        settings = _settings(tmp_path, manifest_path=str(manifest))
        with TestClient(create_app(settings=settings)) as c:
            c.post("/db/books", json={"name": "book1"})
        with TestClient(create_app(settings=settings)) as c:
            assert len(c.get("/db/books").json()["results"]) == 1

    def test_missing_manifest_aborts_startup(self, tmp_path):
        app = create_app(settings=_settings(tmp_path, manifest_path=str(tmp_path / "nope.txt")))
        with pytest.raises(ManifestError):
            with TestClient(app):
                pass


class TestHealth:
    def test_healthy(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "healthy"
        assert body["identifier_policy"] == "token"


class TestCollections:
    def test_lists_created_collections(self, client):
        client.post("/db/books", json={"name": "book1"})
        resp = client.get("/collections")
        assert resp.status_code == 200
        assert resp.json() == {"results": [{"name": "books", "identifier_indexed": True}]}


class TestMiddleware:
    def test_request_id_generated(self, client):
        resp = client.get("/health")
        assert resp.headers["X-Request-ID"]
        assert float(resp.headers["X-Process-Time-Ms"]) >= 0

    def test_request_id_echoed(self, client):
        resp = client.get("/health", headers={"X-Request-ID": "req-123"})
        assert resp.headers["X-Request-ID"] == "req-123"

    def test_unknown_route_keeps_error_shape(self, client):
        resp = client.get("/nope")
        assert resp.status_code == 404
        assert "error" in resp.json()


class TestSlowRequestLogging:
    def test_slow_request_logged(self, tmp_path, capsys):
        settings = _settings(tmp_path, slow_request_ms=0, log_json=True)
        with TestClient(create_app(settings=settings)) as c:
            c.get("/health")
        out = capsys.readouterr().out
        assert '"event": "slow_request"' in out
        assert '"path": "/health"' in out

    def test_fast_request_not_logged(self, tmp_path, capsys):
        settings = _settings(tmp_path, slow_request_ms=60_000, log_json=True)
        with TestClient(create_app(settings=settings)) as c:
            resp = c.get("/health")
        assert resp.headers["X-Process-Time-Ms"]
        assert "slow_request" not in capsys.readouterr().out

    def test_logging_configured_app_serves_requests(self, tmp_path):
        settings = _settings(tmp_path, log_json=False, log_level="DEBUG")
        with TestClient(create_app(settings=settings)) as c:
            resp = c.post("/db/books", json={"name": "book1"})
        assert resp.status_code == 201
