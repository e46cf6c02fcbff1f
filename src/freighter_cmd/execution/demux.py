"""Combined log stream demultiplexer.

For instances created without a TTY, the Docker logs endpoint returns stdout
and stderr interleaved in one stream of frames:

    +--------+-----------+----------------------+-------------------+
    | stream | 3 x 0x00  | payload length (BE)  | payload ...       |
    | 1 byte | 3 bytes   | 4 bytes              | <length> bytes    |
    +--------+-----------+----------------------+-------------------+

Stream 1 is stdout and stream 2 is stderr. Frames are consumed in order and
appended to the buffer of their stream; nothing is kept once demultiplexing
completes.
"""

from __future__ import annotations

import io
import struct
from collections.abc import Iterator
from dataclasses import dataclass
from enum import IntEnum
from typing import BinaryIO

from freighter_cmd.core.constants import FRAME_HEADER_FORMAT, FRAME_HEADER_SIZE
from freighter_cmd.core.errors import DecodeError

_HEADER = struct.Struct(FRAME_HEADER_FORMAT)


class StreamType(IntEnum):
    """Frame stream discriminator."""

    STDOUT = 1
    STDERR = 2


@dataclass(frozen=True)
class Frame:
    """One discriminated, length-prefixed unit of the combined stream."""

    stream: StreamType
    payload: bytes


@dataclass
class DemuxedOutput:
    """Separate stdout and stderr buffers recovered from a combined stream."""

    stdout: bytes = b""
    stderr: bytes = b""

    @property
    def stdout_text(self) -> str:
        return self.stdout.decode("utf-8", errors="replace")

    @property
    def stderr_text(self) -> str:
        return self.stderr.decode("utf-8", errors="replace")


def _read_exact(source: BinaryIO, size: int) -> bytes:
    """Read up to ``size`` bytes, looping over short reads until EOF."""
    chunks = []
    remaining = size
    while remaining > 0:
        chunk = source.read(remaining)
        if not chunk:
            break
        chunks.append(chunk)
        remaining -= len(chunk)
    return b"".join(chunks)


def iter_frames(source: bytes | BinaryIO) -> Iterator[Frame]:
    """Yield frames from a combined log stream until clean EOF.

    Args:
        source: Raw stream bytes or a binary file-like object

    Raises:
        DecodeError: On a partial header, a payload shorter than its declared
            length, or an unknown stream discriminator
    """
    if isinstance(source, (bytes, bytearray, memoryview)):
        source = io.BytesIO(bytes(source))

    offset = 0
    while True:
        header = _read_exact(source, FRAME_HEADER_SIZE)
        if not header:
            return
        if len(header) < FRAME_HEADER_SIZE:
            raise DecodeError(
                f"truncated frame header: got {len(header)} of {FRAME_HEADER_SIZE} bytes",
                offset,
            )

        stream_id, length = _HEADER.unpack(header)
        try:
            stream = StreamType(stream_id)
        except ValueError:
            raise DecodeError(f"unrecognized stream discriminator {stream_id}", offset) from None

        payload = _read_exact(source, length)
        if len(payload) < length:
            raise DecodeError(
                f"truncated {stream.name.lower()} frame: declared {length} bytes, "
                f"got {len(payload)}",
                offset,
            )

        yield Frame(stream=stream, payload=payload)
        offset += FRAME_HEADER_SIZE + length


def demultiplex(source: bytes | BinaryIO) -> DemuxedOutput:
    """Split a combined log stream into stdout and stderr buffers.

    Intra-stream ordering is preserved. A malformed frame aborts the whole
    operation with DecodeError; no partial output is returned.
    """
    stdout = bytearray()
    stderr = bytearray()
    for frame in iter_frames(source):
        if frame.stream is StreamType.STDOUT:
            stdout += frame.payload
        else:
            stderr += frame.payload
    return DemuxedOutput(stdout=bytes(stdout), stderr=bytes(stderr))


def encode_frame(stream: StreamType, payload: bytes) -> bytes:
    """Encode one frame in the combined stream format."""
    return _HEADER.pack(int(stream), len(payload)) + payload
