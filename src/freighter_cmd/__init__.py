"""freighter-cmd - run named scripts in throwaway Docker containers."""

from __future__ import annotations

from freighter_cmd.context import ExecutionContext, initialize
from freighter_cmd.core.errors import (
    CommandExecutionError,
    DecodeError,
    ExecutionTimeoutError,
    FreighterCmdError,
    LifecycleError,
    ProvisioningError,
    RunCancelledError,
    RuntimeConnectionRefused,
    TransportError,
)
from freighter_cmd.core.schemas import ExecutionConfig
from freighter_cmd.execution.engine import ExecutionEngine, Operation, RunResult

__version__ = "0.1.0"

__all__ = [
    "CommandExecutionError",
    "DecodeError",
    "ExecutionConfig",
    "ExecutionContext",
    "ExecutionEngine",
    "ExecutionTimeoutError",
    "FreighterCmdError",
    "LifecycleError",
    "Operation",
    "ProvisioningError",
    "RunCancelledError",
    "RunResult",
    "RuntimeConnectionRefused",
    "TransportError",
    "initialize",
    "__version__",
]
