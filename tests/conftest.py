"""Shared fixtures for freighter-cmd tests."""

from __future__ import annotations

import pytest

from freighter_cmd.core.schemas import ExecutionConfig, InstanceState
from freighter_cmd.execution.demux import StreamType, encode_frame
from freighter_cmd.execution.engine import ExecutionEngine

FINISHED_AT = "2024-05-01T12:00:00.123456789Z"
ZERO_TIME = "0001-01-01T00:00:00Z"


class FakeRuntimeClient:
    """In-memory stand-in for RuntimeClient that records every call."""

    def __init__(
        self,
        stdout: bytes = b"",
        stderr: bytes = b"",
        unfinished_polls: int = 0,
        logs_payload: bytes | None = None,
    ) -> None:
        self.unfinished_polls = unfinished_polls
        if logs_payload is None:
            logs_payload = b""
            if stdout:
                logs_payload += encode_frame(StreamType.STDOUT, stdout)
            if stderr:
                logs_payload += encode_frame(StreamType.STDERR, stderr)
        self.logs_payload = logs_payload
        self.errors: dict[str, Exception] = {}
        self.calls: list[tuple[str, object]] = []
        self.inspect_count = 0
        self.present_images: set[str] = set()
        self.pull_records: list[dict] = [{"status": "Pulling fs layer", "id": "abc123"}]
        self.closed = False

    def _maybe_fail(self, name: str) -> None:
        if name in self.errors:
            raise self.errors[name]

    def image_exists(self, image: str) -> bool:
        self.calls.append(("image_exists", image))
        self._maybe_fail("image_exists")
        return image in self.present_images

    def pull_image(self, repository: str, tag: str):
        self.calls.append(("pull_image", f"{repository}:{tag}"))
        self._maybe_fail("pull_image")
        yield from self.pull_records

    def create_instance(self, image: str, command: list[str]) -> str:
        self.calls.append(("create", (image, list(command))))
        self._maybe_fail("create")
        return "c0ffee"

    def start(self, instance_id: str) -> None:
        self.calls.append(("start", instance_id))
        self._maybe_fail("start")

    def inspect(self, instance_id: str) -> InstanceState:
        self.calls.append(("inspect", instance_id))
        self._maybe_fail("inspect")
        self.inspect_count += 1
        finished = self.inspect_count > self.unfinished_polls
        return InstanceState.from_inspect(
            {
                "Id": instance_id,
                "State": {
                    "Status": "exited" if finished else "running",
                    "Running": not finished,
                    "ExitCode": 0,
                    "FinishedAt": FINISHED_AT if finished else ZERO_TIME,
                },
            }
        )

    def logs(self, instance_id: str) -> bytes:
        self.calls.append(("logs", instance_id))
        self._maybe_fail("logs")
        return self.logs_payload

    def remove(self, instance_id: str) -> None:
        self.calls.append(("remove", instance_id))
        self._maybe_fail("remove")

    def close(self) -> None:
        self.closed = True

    def count(self, name: str) -> int:
        return sum(1 for call, _ in self.calls if call == name)


@pytest.fixture
def fast_config() -> ExecutionConfig:
    """Config with millisecond polling so wait loops finish quickly."""
    return ExecutionConfig(poll_interval_ms=1, max_poll_interval_ms=2, timeout_seconds=5)


@pytest.fixture
def make_engine(fast_config):
    """Build an engine around a FakeRuntimeClient."""

    def _make(**kwargs) -> tuple[ExecutionEngine, FakeRuntimeClient]:
        client = FakeRuntimeClient(**kwargs)
        return ExecutionEngine(client, fast_config), client

    return _make
