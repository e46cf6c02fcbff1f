"""Shared constants for freighter-cmd.

Centralized defaults so the config schema, the engine and the CLI agree on
the same values.
"""

from __future__ import annotations

# Defaults for the option keys recognized by ExecutionConfig.from_options()
DEFAULT_COMMANDS_DIR = "/root/commands"
DEFAULT_DOCKER_ENDPOINT = "unix:///var/run/docker.sock"
DEFAULT_CONTAINER_REPOSITORY = "freighterio/cmd"
DEFAULT_CONTAINER_TAG = "latest"

# Scripts are resolved as <commands_dir>/<operation><SCRIPT_EXTENSION>
SCRIPT_EXTENSION = ".sh"
DEFAULT_INTERPRETER = "bash"

# Completion polling
DEFAULT_POLL_INTERVAL_MS = 100
DEFAULT_MAX_POLL_INTERVAL_MS = 1000
DEFAULT_POLL_BACKOFF = 1.5
DEFAULT_TIMEOUT_SECONDS = 300

# Transport retries apply to idempotent runtime calls only
DEFAULT_TRANSPORT_RETRIES = 2
DEFAULT_RETRY_BACKOFF_MS = 200
DEFAULT_CLIENT_TIMEOUT_SECONDS = 60

# The runtime reports this timestamp for instances that have not finished yet
ZERO_TIMESTAMP_PREFIX = "0001-01-01"

# Combined log stream framing: 1-byte stream id, 3 padding bytes, 4-byte big-endian length
FRAME_HEADER_SIZE = 8
FRAME_HEADER_FORMAT = ">BxxxL"
