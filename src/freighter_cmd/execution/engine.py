"""Execution engine for operation scripts.

This module manages the lifecycle of one instance per run:
- Command line construction
- Instance creation and start
- Completion detection by polling inspect with backoff
- Combined log retrieval and demultiplexing
- Unconditional removal once the instance exists

"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING

from freighter_cmd.core.errors import (
    CommandExecutionError,
    ExecutionTimeoutError,
    FreighterCmdError,
    RunCancelledError,
)
from freighter_cmd.core.schemas import ExecutionConfig, InstanceState
from freighter_cmd.execution.demux import demultiplex

if TYPE_CHECKING:
    from freighter_cmd.runtime.client import RuntimeClient

logger = logging.getLogger(__name__)


@dataclass
class RunResult:
    """Result of one instance execution, before stderr classification."""

    instance_id: str
    stdout: str
    stderr: str
    exit_code: int | None
    duration_seconds: float

    @property
    def failed(self) -> bool:
        return bool(self.stderr)


class ExecutionEngine:
    """Runs operation scripts in fresh instances.

    The engine holds no per-run state, so one engine may serve many threads.

    Example:
        ```python
        engine = ExecutionEngine(client, ExecutionConfig())
        output = engine.run("list-users", "--active")
        ```
    """

    def __init__(self, client: RuntimeClient, config: ExecutionConfig) -> None:
        self._client = client
        self.config = config

    def build_command(self, operation: str, args: tuple[str, ...] | list[str]) -> list[str]:
        """Build ``[interpreter, script_path, *args]``; arguments pass through verbatim."""
        return [self.config.interpreter, self.config.script_path(operation), *args]

    def run(
        self,
        operation: str,
        *args: str,
        timeout: float | None = None,
        cancel_event: threading.Event | None = None,
    ) -> str:
        """Run an operation and return its stdout text.

        Raises:
            CommandExecutionError: If the script wrote to stderr; ``output`` holds the stderr text
            LifecycleError: If a lifecycle call failed, timed out or was cancelled
            TransportError: On socket-level failures
            DecodeError: If the combined log stream was malformed
        """
        result = self.execute(operation, *args, timeout=timeout, cancel_event=cancel_event)
        if result.failed:
            logger.error(f" -> error running container {result.instance_id} command: {result.stderr}")
            raise CommandExecutionError(result.stderr, instance_id=result.instance_id)
        return result.stdout

    def execute(
        self,
        operation: str,
        *args: str,
        timeout: float | None = None,
        cancel_event: threading.Event | None = None,
    ) -> RunResult:
        """Run an operation and return both output channels without classifying them.

        Args:
            operation: Operation name, resolved to a script under ``commands_dir``
            *args: Arguments passed to the script
            timeout: Completion deadline in seconds (defaults to ``config.timeout_seconds``)
            cancel_event: Event that aborts the run when set

        Returns:
            RunResult with demultiplexed stdout and stderr
        """
        command = self.build_command(operation, args)
        start_time = time.monotonic()

        instance_id = self._client.create_instance(self.config.image, command)

        try:
            self._client.start(instance_id)
            state = self.wait_for_completion(instance_id, timeout=timeout, cancel_event=cancel_event)
            output = demultiplex(self._client.logs(instance_id))
        except BaseException:
            self._cleanup(instance_id, suppress_errors=True)
            raise
        self._cleanup(instance_id, suppress_errors=False)

        return RunResult(
            instance_id=instance_id,
            stdout=output.stdout_text,
            stderr=output.stderr_text,
            exit_code=state.exit_code,
            duration_seconds=time.monotonic() - start_time,
        )

    def wait_for_completion(
        self,
        instance_id: str,
        timeout: float | None = None,
        cancel_event: threading.Event | None = None,
    ) -> InstanceState:
        """Poll inspect until the instance reports a completion timestamp.

        The delay between inspects starts at ``poll_interval_ms`` and grows by
        ``poll_backoff`` up to ``max_poll_interval_ms``.

        Raises:
            ExecutionTimeoutError: If the deadline passes first
            RunCancelledError: If ``cancel_event`` is set first
        """
        if timeout is None:
            timeout = self.config.timeout_seconds
        deadline = time.monotonic() + timeout if timeout is not None else None
        delay = self.config.poll_interval_ms / 1000
        max_delay = self.config.max_poll_interval_ms / 1000

        while True:
            if cancel_event is not None and cancel_event.is_set():
                raise RunCancelledError(f"run of container {instance_id} was cancelled")

            state = self._client.inspect(instance_id)
            if state.finished:
                logger.debug(f"container {instance_id} finished at {state.finished_at.isoformat()}")
                return state

            wait = delay
            if deadline is not None:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    raise ExecutionTimeoutError(
                        f"container {instance_id} did not finish within {timeout}s"
                    )
                wait = min(wait, remaining)

            if cancel_event is not None:
                cancel_event.wait(wait)
            else:
                time.sleep(wait)
            delay = min(delay * self.config.poll_backoff, max_delay)

    def _cleanup(self, instance_id: str, suppress_errors: bool) -> None:
        """Remove the instance; when the run already failed, report removal errors only in the log."""
        try:
            self._client.remove(instance_id)
        except FreighterCmdError as e:
            if not suppress_errors:
                raise
            logger.warning(f"container {instance_id} was not removed after a failed run: {e}")


@dataclass(frozen=True)
class Operation:
    """A named script, bound to the engine that runs it.

    Example:
        ```python
        op = Operation("backup", engine)
        output = op.run("--target", "/srv")
        ```
    """

    name: str
    engine: ExecutionEngine

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Operation name must not be empty")

    @property
    def script_path(self) -> str:
        return self.engine.config.script_path(self.name)

    def run(
        self,
        *args: str,
        timeout: float | None = None,
        cancel_event: threading.Event | None = None,
    ) -> str:
        """Run the operation; see ExecutionEngine.run."""
        return self.engine.run(self.name, *args, timeout=timeout, cancel_event=cancel_event)

    def execute(
        self,
        *args: str,
        timeout: float | None = None,
        cancel_event: threading.Event | None = None,
    ) -> RunResult:
        return self.engine.execute(self.name, *args, timeout=timeout, cancel_event=cancel_event)
