"""
Shared test fixtures for Neurio daemon tests.

CHANGELOG:
- 2026-03-02: Initial creation (STORY-101)

TODO:
- None
"""

import json
from pathlib import Path

import pytest

# All NeurioSettings environment variable names, used for cleanup.
_ALL_NEURIO_ENV_VARS = (
    "NEURIO_ADDRESS",
    "NEURIO_AUTH",
    "POLL_INTERVAL_S",
    "HTTP_TIMEOUT_S",
    "STORE_PATH",
    "DECLARE_VARS",
    "HEALTH_FILE_PATH",
    "VERBOSE",
)

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture(autouse=True)
def _clean_neurio_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Remove all Neurio env vars and isolate from .env files before each test.

    Changes working directory to tmp_path so no .env file is accidentally
    loaded by Pydantic BaseSettings.
    """
    for var in _ALL_NEURIO_ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture()
def env_vars_full(monkeypatch: pytest.MonkeyPatch) -> dict[str, str]:
    """Set every NeurioSettings environment variable.

    Returns the dict of env var names to values for assertion convenience.
    """
    env = {
        "NEURIO_ADDRESS": "10.0.0.42",
        "NEURIO_AUTH": "dXNlcjpwYXNz",
        "POLL_INTERVAL_S": "2",
        "HTTP_TIMEOUT_S": "1.5",
        "STORE_PATH": "/tmp/test-varstore.db",
        "DECLARE_VARS": "false",
        "HEALTH_FILE_PATH": "/tmp/test-health.json",
        "VERBOSE": "true",
    }
    for key, value in env.items():
        monkeypatch.setenv(key, value)
    return env


@pytest.fixture()
def neurio_responses() -> dict:
    """Load Neurio fixture responses from JSON file."""
    return json.loads((FIXTURES_DIR / "neurio_responses.json").read_text())


@pytest.fixture()
def success_sample(neurio_responses: dict) -> dict:
    """A complete three-channel current-sample payload."""
    return neurio_responses["success_sample"]


@pytest.fixture()
def success_payload(success_sample: dict) -> bytes:
    """The three-channel payload serialised as the sensor sends it."""
    return json.dumps(success_sample).encode()
