"""Runtime module - Docker daemon access and image provisioning."""

from __future__ import annotations

from freighter_cmd.runtime.client import RuntimeClient, translate_errors
from freighter_cmd.runtime.provisioner import EnvironmentProvisioner, format_progress

__all__ = ["EnvironmentProvisioner", "RuntimeClient", "format_progress", "translate_errors"]
