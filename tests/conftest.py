"""Test configuration and fixtures for the entire test suite."""

import os

import pytest


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep COINFEED_* variables from the developer's shell out of tests."""
    for name in list(os.environ):
        if name.startswith("COINFEED_"):
            monkeypatch.delenv(name)
