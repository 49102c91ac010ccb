"""Tests for environment-driven settings."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from docrest.core.settings import DocRestSettings


class TestDocRestSettings:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("DOCREST_DATABASE_URL", raising=False)
        monkeypatch.delenv("DOCREST_IDENTIFIER_POLICY", raising=False)
        s = DocRestSettings(_env_file=None)
        assert s.database_url == "sqlite:///storage/docrest.db"
        assert s.identifier_policy == "token"
        assert s.manifest_path is None
        assert s.store_timeout == 5.0

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("DOCREST_IDENTIFIER_POLICY", "positional")
        monkeypatch.setenv("DOCREST_STORE_TIMEOUT", "2.5")
        s = DocRestSettings(_env_file=None)
        assert s.identifier_policy == "positional"
        assert s.store_timeout == 2.5

    def test_unknown_policy_rejected(self):
        with pytest.raises(ValidationError):
            DocRestSettings(identifier_policy="uuid", _env_file=None)

    def test_timeout_must_be_positive(self):
        with pytest.raises(ValidationError):
            DocRestSettings(store_timeout=0, _env_file=None)
