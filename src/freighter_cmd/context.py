"""Process-wide execution context.

The context replaces module-level client and config state: it is built once
by ``initialize()``, provisioning included, and then passed to whatever needs
to run operations. It is read-only after construction.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from freighter_cmd.core.schemas import ExecutionConfig
from freighter_cmd.execution.engine import ExecutionEngine, Operation
from freighter_cmd.runtime.client import RuntimeClient
from freighter_cmd.runtime.provisioner import EnvironmentProvisioner

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExecutionContext:
    """Shared config, runtime client and engine for one process."""

    config: ExecutionConfig
    client: RuntimeClient
    engine: ExecutionEngine

    def operation(self, name: str) -> Operation:
        """Return an Operation bound to this context's engine."""
        return Operation(name, self.engine)

    def close(self) -> None:
        self.client.close()

    def __enter__(self) -> ExecutionContext:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def initialize(
    options: Mapping[str, Any] | ExecutionConfig | None = None,
    *,
    client: RuntimeClient | None = None,
    provision: bool = True,
    force_pull: bool = False,
) -> ExecutionContext:
    """Build the execution context and provision the execution image.

    Args:
        options: Option mapping (see ExecutionConfig.from_options) or a ready config
        client: Runtime client to use instead of connecting to ``docker_endpoint``
        provision: Ensure the image is present before returning
        force_pull: Pull the image even if it is already present

    Returns:
        A ready ExecutionContext

    Raises:
        ProvisioningError: If the image could not be pulled
        TransportError: If the daemon could not be reached
    """
    if isinstance(options, ExecutionConfig):
        config = options
    else:
        config = ExecutionConfig.from_options(options)

    if client is None:
        client = RuntimeClient.from_config(config)

    if provision:
        try:
            EnvironmentProvisioner(client).ensure_image(
                config.container_repository, config.container_tag, force=force_pull
            )
        except Exception:
            client.close()
            raise

    logger.debug(f"Execution context ready (image={config.image}, commands_dir={config.commands_dir})")
    return ExecutionContext(config=config, client=client, engine=ExecutionEngine(client, config))
