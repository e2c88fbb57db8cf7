"""Pytest configuration for SF-50 assistant tests."""

import pytest

from sf50.core.config import SF50Config, set_config

from tests.fakes import ScriptedModelClient


@pytest.fixture(autouse=True)
def default_config():
    """Use built-in defaults so local YAML or environment settings never leak into tests."""
    config = SF50Config()
    set_config(config)
    yield config
    set_config(None)


@pytest.fixture
def scripted_client():
    def _make(*replies: str) -> ScriptedModelClient:
        return ScriptedModelClient(list(replies))
    return _make
