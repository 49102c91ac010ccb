"""Tests for structured logging helpers."""

from __future__ import annotations

import structlog

from docrest.core.logging import LogContext, bind_context, clear_context, configure_logging, get_logger


class TestLogContext:
    def teardown_method(self):
        clear_context()

    def test_binds_and_unbinds(self):
        with LogContext(collection="books"):
            assert structlog.contextvars.get_contextvars()["collection"] == "books"
        assert "collection" not in structlog.contextvars.get_contextvars()

    def test_keeps_outer_context(self):
        bind_context(request_id="r1")
        with LogContext(collection="books"):
            pass
        assert structlog.contextvars.get_contextvars() == {"request_id": "r1"}


class TestConfigureLogging:
    def test_json_output(self, capsys):
        configure_logging(level="INFO", json_format=True)
        get_logger("docrest.test").info("collection_created", collection="books")
        out = capsys.readouterr().out
        assert '"event": "collection_created"' in out
        assert '"service": "docrest"' in out
        assert '"logger": "docrest.test"' in out

    def test_console_output_with_module_logger(self, capsys):
        configure_logging(level="DEBUG", json_format=False)
        get_logger(__name__).info("document_created", collection="books")
        out = capsys.readouterr().out
        assert "document_created" in out
        assert __name__ in out

    def test_unnamed_logger(self, capsys):
        configure_logging(level="INFO", json_format=True)
        get_logger().warning("store_slow")
        assert '"event": "store_slow"' in capsys.readouterr().out

    def test_level_filtering(self, capsys):
        configure_logging(level="WARNING", json_format=True)
        get_logger(__name__).info("hidden")
        assert "hidden" not in capsys.readouterr().out
