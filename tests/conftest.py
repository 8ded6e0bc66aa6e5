"""Shared fixtures."""

import pytest

from constants import Constants


_TUNABLES = (
    "RESOLVER_MAX_WORKERS",
    "INCLUDE_PRERELEASE",
    "ENGINE_STRICT",
    "CATALOG_COERCE",
    "CATALOG_CACHE_TTL_SEC",
)


@pytest.fixture(autouse=True)
def restore_constants(monkeypatch):
    """Undo config/CLI overrides applied to Constants during a test."""
    saved = {name: getattr(Constants, name) for name in _TUNABLES}
    monkeypatch.delenv("PEERGATE_CONFIG", raising=False)
    yield
    for name, value in saved.items():
        setattr(Constants, name, value)
