"""Execution module - instance lifecycle and output recovery."""

from __future__ import annotations

from freighter_cmd.execution.demux import (
    DemuxedOutput,
    Frame,
    StreamType,
    demultiplex,
    encode_frame,
    iter_frames,
)
from freighter_cmd.execution.engine import ExecutionEngine, Operation, RunResult

__all__ = [
    "DemuxedOutput",
    "ExecutionEngine",
    "Frame",
    "Operation",
    "RunResult",
    "StreamType",
    "demultiplex",
    "encode_frame",
    "iter_frames",
]
