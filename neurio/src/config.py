"""
Neurio daemon configuration loaded from environment variables.

Uses Pydantic BaseSettings for automatic env var loading and validation.
Values come from environment variables or a ``.env`` file; command-line
flags override them by being passed as constructor keyword arguments.

CHANGELOG:
- 2026-03-02: Initial creation (STORY-101)

TODO:
- None
"""

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings


class NeurioSettings(BaseSettings):
    """Neurio daemon configuration.

    Attributes:
        neurio_address: Neurio sensor IP/hostname on the local LAN.
        neurio_auth: Basic auth token for the sensor. Empty disables the
            ``Authorization`` header.
        poll_interval_s: Seconds between sensor polls.
        http_timeout_s: HTTP request timeout. Must be shorter than
            ``poll_interval_s``.
        store_path: SQLite file of the shared variable store.
        declare_vars: Create the consumption variables in the store at
            startup if they are missing.
        health_file_path: JSON health file rewritten after each poll.
        verbose: Log at DEBUG level, including each received payload.
    """

    neurio_address: str = "192.168.86.31"
    neurio_auth: str = ""
    poll_interval_s: float = 5.0
    http_timeout_s: float = 3.0
    store_path: str = "/data/varstore.db"
    declare_vars: bool = True
    health_file_path: str = "/data/health.json"
    verbose: bool = False

    @property
    def sensor_url(self) -> str:
        """URL of the sensor's current-sample endpoint."""
        return f"http://{self.neurio_address}/current-sample"

    @field_validator("neurio_address")
    @classmethod
    def address_must_not_be_empty(cls, v: str) -> str:
        """Reject blank sensor addresses."""
        v = v.strip()
        if not v:
            raise ValueError("NEURIO_ADDRESS must not be empty")
        return v

    @field_validator("poll_interval_s")
    @classmethod
    def poll_interval_must_be_positive(cls, v: float) -> float:
        """Validate poll interval is at least 1 second."""
        if v < 1:
            raise ValueError("POLL_INTERVAL_S must be >= 1")
        return v

    @field_validator("http_timeout_s")
    @classmethod
    def timeout_must_be_positive(cls, v: float) -> float:
        """Validate the HTTP timeout is strictly positive."""
        if v <= 0:
            raise ValueError("HTTP_TIMEOUT_S must be > 0")
        return v

    @model_validator(mode="after")
    def _timeout_shorter_than_interval(self) -> "NeurioSettings":
        """A poll must time out before the next one is due."""
        if self.http_timeout_s >= self.poll_interval_s:
            raise ValueError(
                f"HTTP_TIMEOUT_S ({self.http_timeout_s}) must be shorter "
                f"than POLL_INTERVAL_S ({self.poll_interval_s})"
            )
        return self

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}
