"""Error taxonomy for freighter-cmd.

Transport and decode errors propagate unchanged through the execution engine.
The engine adds a single classification on top: a script that wrote to stderr
raises CommandExecutionError.
"""

from __future__ import annotations


class FreighterCmdError(Exception):
    """Base class for all freighter-cmd errors."""


class ProvisioningError(FreighterCmdError):
    """The execution image could not be made available locally."""


class LifecycleError(FreighterCmdError):
    """A create, start, inspect or remove call was rejected by the runtime."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ExecutionTimeoutError(LifecycleError):
    """The instance did not finish before the deadline."""


class RunCancelledError(LifecycleError):
    """The caller cancelled an in-flight run."""


class CommandExecutionError(FreighterCmdError):
    """The script ran to completion but wrote to stderr.

    Attributes:
        output: Captured stderr text
        instance_id: Runtime id of the instance that ran the script
    """

    def __init__(self, output: str, instance_id: str | None = None) -> None:
        super().__init__("error running command")
        self.output = output
        self.instance_id = instance_id

    def __str__(self) -> str:
        detail = self.output.strip()
        return f"error running command: {detail}" if detail else "error running command"


class TransportError(FreighterCmdError):
    """Socket-level failure talking to the runtime daemon."""


class RuntimeConnectionRefused(TransportError):
    """The runtime daemon refused the connection."""


class DecodeError(FreighterCmdError):
    """The combined log stream contained a malformed frame."""

    def __init__(self, message: str, offset: int) -> None:
        super().__init__(f"{message} (at byte offset {offset})")
        self.offset = offset
