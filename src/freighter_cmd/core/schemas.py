"""Pydantic schemas for freighter-cmd.

This module defines the data contracts shared by the runtime client, the
execution engine and the CLI: the process-wide execution configuration and
the instance state snapshot returned by inspect calls.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from datetime import datetime
from typing import Any, ClassVar

from pydantic import BaseModel, Field, field_validator, model_validator

from freighter_cmd.core.constants import (
    DEFAULT_CLIENT_TIMEOUT_SECONDS,
    DEFAULT_COMMANDS_DIR,
    DEFAULT_CONTAINER_REPOSITORY,
    DEFAULT_CONTAINER_TAG,
    DEFAULT_DOCKER_ENDPOINT,
    DEFAULT_INTERPRETER,
    DEFAULT_MAX_POLL_INTERVAL_MS,
    DEFAULT_POLL_BACKOFF,
    DEFAULT_POLL_INTERVAL_MS,
    DEFAULT_RETRY_BACKOFF_MS,
    DEFAULT_TIMEOUT_SECONDS,
    DEFAULT_TRANSPORT_RETRIES,
    SCRIPT_EXTENSION,
    ZERO_TIMESTAMP_PREFIX,
)

# Docker trims nanosecond fractions; datetime wants exactly microseconds
_FRACTION_PATTERN = re.compile(r"\.(\d+)")


class ExecutionConfig(BaseModel):
    """Process-wide execution settings.

    Every field carries its default, so a config built from a partial set of
    options is complete as soon as it is constructed. Instances are frozen and
    safe to share between threads.

    Attributes:
        commands_dir: Directory inside the image holding the operation scripts
        docker_endpoint: Docker daemon address (unix socket or tcp URL)
        container_repository: Image repository instances are created from
        container_tag: Image tag instances are created from
        interpreter: Program used to run the operation scripts
        poll_interval_ms: First delay between completion inspects
        max_poll_interval_ms: Upper bound for the backed-off delay
        poll_backoff: Multiplier applied to the delay after each inspect
        timeout_seconds: Deadline for an instance to finish (None = no deadline)
        transport_retries: Retries for idempotent calls on transient transport errors
        retry_backoff_ms: Base delay between transport retries
        api_version: Docker API version (None = negotiate with the daemon)
        client_timeout_seconds: Socket timeout for each daemon request
    """

    # Original option keys, mapped explicitly onto field names
    OPTION_KEYS: ClassVar[dict[str, str]] = {
        "CommandsDir": "commands_dir",
        "DockerEndpoint": "docker_endpoint",
        "ContainerRepository": "container_repository",
        "ContainerTag": "container_tag",
    }

    commands_dir: str = Field(default=DEFAULT_COMMANDS_DIR, min_length=1)
    docker_endpoint: str = Field(default=DEFAULT_DOCKER_ENDPOINT, min_length=1)
    container_repository: str = Field(default=DEFAULT_CONTAINER_REPOSITORY, min_length=1)
    container_tag: str = Field(default=DEFAULT_CONTAINER_TAG, min_length=1)
    interpreter: str = Field(default=DEFAULT_INTERPRETER, min_length=1)
    poll_interval_ms: int = Field(default=DEFAULT_POLL_INTERVAL_MS, ge=1)
    max_poll_interval_ms: int = Field(default=DEFAULT_MAX_POLL_INTERVAL_MS, ge=1)
    poll_backoff: float = Field(default=DEFAULT_POLL_BACKOFF, ge=1.0)
    timeout_seconds: float | None = Field(default=DEFAULT_TIMEOUT_SECONDS, gt=0)
    transport_retries: int = Field(default=DEFAULT_TRANSPORT_RETRIES, ge=0, le=10)
    retry_backoff_ms: int = Field(default=DEFAULT_RETRY_BACKOFF_MS, ge=0)
    api_version: str | None = Field(default=None)
    client_timeout_seconds: int = Field(default=DEFAULT_CLIENT_TIMEOUT_SECONDS, ge=1)

    model_config = {"frozen": True, "extra": "ignore"}

    @field_validator("commands_dir")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Keep '/root/commands/' and '/root/commands' equivalent."""
        return v.rstrip("/") or "/"

    @model_validator(mode="after")
    def check_poll_bounds(self) -> ExecutionConfig:
        """Ensure the backoff ceiling is not below the first interval."""
        if self.max_poll_interval_ms < self.poll_interval_ms:
            raise ValueError(
                f"max_poll_interval_ms ({self.max_poll_interval_ms}) must be >= "
                f"poll_interval_ms ({self.poll_interval_ms})"
            )
        return self

    @classmethod
    def from_options(cls, options: Mapping[str, Any] | None = None) -> ExecutionConfig:
        """Build a config from a flat option mapping.

        Accepts both the CamelCase option keys (``CommandsDir``, ``DockerEndpoint``,
        ``ContainerRepository``, ``ContainerTag``) and the snake_case field names.
        Unrecognized keys are ignored and missing keys take their defaults.
        """
        values: dict[str, Any] = {}
        for key, value in (options or {}).items():
            field_name = cls.OPTION_KEYS.get(key, key)
            if field_name in cls.model_fields:
                values[field_name] = value
        return cls.model_validate(values)

    @property
    def image(self) -> str:
        """Image reference instances are created from."""
        return f"{self.container_repository}:{self.container_tag}"

    def script_path(self, operation: str) -> str:
        """Path of the script backing an operation."""
        return f"{self.commands_dir}/{operation}{SCRIPT_EXTENSION}"


def parse_runtime_timestamp(value: str | None) -> datetime | None:
    """Parse a Docker RFC 3339 timestamp.

    Returns None for empty values and for the zero timestamp the daemon
    reports before an instance has finished.
    """
    if not value or value.startswith(ZERO_TIMESTAMP_PREFIX):
        return None
    normalized = _FRACTION_PATTERN.sub(lambda m: "." + (m.group(1) + "000000")[:6], value)
    if normalized.endswith("Z"):
        normalized = normalized[:-1] + "+00:00"
    return datetime.fromisoformat(normalized)


class InstanceState(BaseModel):
    """Snapshot of an instance as reported by an inspect call."""

    id: str = Field(..., min_length=1)
    status: str = Field(default="created")
    running: bool = Field(default=False)
    exit_code: int | None = Field(default=None)
    started_at: datetime | None = Field(default=None)
    finished_at: datetime | None = Field(default=None)

    @field_validator("started_at", "finished_at", mode="before")
    @classmethod
    def parse_timestamp(cls, v: Any) -> Any:
        if isinstance(v, str):
            return parse_runtime_timestamp(v)
        return v

    @classmethod
    def from_inspect(cls, data: Mapping[str, Any]) -> InstanceState:
        """Build a state snapshot from a raw container inspect payload."""
        state = data.get("State") or {}
        return cls(
            id=data["Id"],
            status=state.get("Status", "created"),
            running=bool(state.get("Running", False)),
            exit_code=state.get("ExitCode"),
            started_at=state.get("StartedAt"),
            finished_at=state.get("FinishedAt"),
        )

    @property
    def finished(self) -> bool:
        """True once the runtime reports a non-zero completion timestamp."""
        return self.finished_at is not None
