"""Core module - configuration, schemas and errors."""

from __future__ import annotations

from freighter_cmd.core.config import load_config, parse_option_pairs
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
from freighter_cmd.core.schemas import ExecutionConfig, InstanceState, parse_runtime_timestamp

__all__ = [
    "CommandExecutionError",
    "DecodeError",
    "ExecutionConfig",
    "ExecutionTimeoutError",
    "FreighterCmdError",
    "InstanceState",
    "LifecycleError",
    "load_config",
    "parse_option_pairs",
    "parse_runtime_timestamp",
    "ProvisioningError",
    "RunCancelledError",
    "RuntimeConnectionRefused",
    "TransportError",
]
