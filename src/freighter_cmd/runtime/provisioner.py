"""Environment provisioning.

Ensures the execution image exists locally before any instance is created.
Runs once at initialization; a failure is reported as ProvisioningError so
the caller decides whether to retry or abort.
"""

from __future__ import annotations

import logging
from typing import Any

from freighter_cmd.core.errors import FreighterCmdError, ProvisioningError
from freighter_cmd.runtime.client import RuntimeClient

logger = logging.getLogger(__name__)


def format_progress(record: dict[str, Any]) -> str:
    """Render one decoded pull progress record as a human-readable line."""
    parts = []
    if record.get("id"):
        parts.append(f"{record['id']}:")
    if record.get("status"):
        parts.append(str(record["status"]))
    if record.get("progress"):
        parts.append(str(record["progress"]))
    return " ".join(parts)


class EnvironmentProvisioner:
    """Makes the execution image available in the local image store.

    Example:
        ```python
        provisioner = EnvironmentProvisioner(client)
        provisioner.ensure_image("freighterio/cmd", "latest")
        ```
    """

    def __init__(self, client: RuntimeClient) -> None:
        self._client = client

    def ensure_image(self, repository: str, tag: str, force: bool = False) -> bool:
        """Pull ``repository:tag`` unless it is already present.

        Args:
            repository: Image repository
            tag: Image tag
            force: Pull even if the image is already present

        Returns:
            True if a pull was performed, False if the image was already present

        Raises:
            ProvisioningError: If the image could not be pulled
        """
        image = f"{repository}:{tag}"
        try:
            if not force and self._client.image_exists(image):
                logger.debug(f"Image {image} already present")
                return False

            logger.info(f"pulling image {image}")
            for record in self._client.pull_image(repository, tag):
                if record.get("error"):
                    raise ProvisioningError(f"pulling image {image} failed: {record['error']}")
                line = format_progress(record)
                if line:
                    logger.debug(f" -> {line}")
        except ProvisioningError:
            logger.error(f"Failed to pull image {image}")
            raise
        except FreighterCmdError as e:
            logger.error(f"Failed to pull image {image}: {e}")
            raise ProvisioningError(f"pulling image {image} failed: {e}") from e

        logger.info(f" -> pulling image {image} complete")
        return True
