"""Docker runtime client.

Single path to the Docker daemon for everything freighter-cmd does:
image provisioning, instance lifecycle calls and combined log retrieval.
Errors raised by docker-py and requests are translated into the
freighter-cmd error taxonomy at this boundary.
"""

from __future__ import annotations

import contextlib
import logging
import time
from collections.abc import Callable, Iterator
from typing import Any, TypeVar

import docker
import requests
from docker.errors import APIError, DockerException, ImageNotFound, NotFound

from freighter_cmd.core.constants import (
    DEFAULT_CLIENT_TIMEOUT_SECONDS,
    DEFAULT_DOCKER_ENDPOINT,
    DEFAULT_RETRY_BACKOFF_MS,
    DEFAULT_TRANSPORT_RETRIES,
)
from freighter_cmd.core.errors import LifecycleError, RuntimeConnectionRefused, TransportError
from freighter_cmd.core.schemas import ExecutionConfig, InstanceState

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _is_connection_refused(exc: BaseException) -> bool:
    """Walk an exception's chain and args looking for a refused connection."""
    seen: set[int] = set()
    pending: list[Any] = [exc]
    while pending:
        current = pending.pop()
        if not isinstance(current, BaseException) or id(current) in seen:
            continue
        seen.add(id(current))
        if isinstance(current, ConnectionRefusedError):
            return True
        pending.extend([current.__cause__, current.__context__, *current.args])
        reason = getattr(current, "reason", None)
        if reason is not None:
            pending.append(reason)
    return "connection refused" in str(exc).lower()


@contextlib.contextmanager
def translate_errors(action: str) -> Iterator[None]:
    """Translate docker-py and requests failures raised while performing ``action``.

    - daemon API errors become LifecycleError (with the HTTP status)
    - refused connections become RuntimeConnectionRefused
    - any other socket or client failure becomes TransportError
    """
    try:
        yield
    except APIError as e:
        raise LifecycleError(f"{action} failed: {e.explanation or e}", e.status_code) from e
    except (requests.exceptions.RequestException, DockerException, OSError) as e:
        if _is_connection_refused(e):
            raise RuntimeConnectionRefused(f"{action} failed: connection refused") from e
        raise TransportError(f"{action} failed: {e}") from e


class RuntimeClient:
    """Thin adapter over ``docker.APIClient``.

    Example:
        ```python
        client = RuntimeClient("unix:///var/run/docker.sock")
        instance_id = client.create_instance("freighterio/cmd:latest", ["bash", "/root/commands/ls.sh"])
        client.start(instance_id)
        ```
    """

    def __init__(
        self,
        endpoint: str = DEFAULT_DOCKER_ENDPOINT,
        api_version: str | None = None,
        timeout: int = DEFAULT_CLIENT_TIMEOUT_SECONDS,
        retries: int = DEFAULT_TRANSPORT_RETRIES,
        retry_backoff_ms: int = DEFAULT_RETRY_BACKOFF_MS,
        api: docker.APIClient | None = None,
    ) -> None:
        """Initialize the runtime client.

        Args:
            endpoint: Docker daemon address
            api_version: Docker API version (None negotiates with the daemon)
            timeout: Socket timeout for each request in seconds
            retries: Retries for idempotent calls on transient transport errors
            retry_backoff_ms: Base delay between retries; grows linearly per attempt
            api: Pre-built low-level client, mainly for tests
        """
        self.endpoint = endpoint
        self.retries = retries
        self.retry_backoff_ms = retry_backoff_ms
        if api is None:
            with translate_errors(f"connecting to {endpoint}"):
                api = docker.APIClient(base_url=endpoint, version=api_version, timeout=timeout)
        self._api = api

    @classmethod
    def from_config(cls, config: ExecutionConfig) -> RuntimeClient:
        return cls(
            endpoint=config.docker_endpoint,
            api_version=config.api_version,
            timeout=config.client_timeout_seconds,
            retries=config.transport_retries,
            retry_backoff_ms=config.retry_backoff_ms,
        )

    def _call(self, action: str, func: Callable[[], T], *, idempotent: bool = False) -> T:
        """Run one daemon call, retrying transient transport errors when idempotent."""
        attempts = self.retries + 1 if idempotent else 1
        attempt = 1
        while True:
            try:
                with translate_errors(action):
                    return func()
            except RuntimeConnectionRefused:
                raise
            except TransportError as e:
                if attempt >= attempts:
                    raise
                delay = self.retry_backoff_ms * attempt / 1000
                attempt += 1
                logger.warning(
                    f"{action} failed ({e}); retrying in {delay:.2f}s "
                    f"(attempt {attempt}/{attempts})"
                )
                time.sleep(delay)

    # Provisioning

    def image_exists(self, image: str) -> bool:
        """Return True if ``image`` is present in the local image store."""
        with translate_errors(f"inspecting image {image}"):
            try:
                self._api.inspect_image(image)
            except ImageNotFound:
                return False
        return True

    def pull_image(self, repository: str, tag: str) -> Iterator[dict[str, Any]]:
        """Pull ``repository:tag``, yielding decoded progress records as they arrive."""
        with translate_errors(f"pulling image {repository}:{tag}"):
            yield from self._api.pull(repository, tag=tag, stream=True, decode=True)

    # Instance lifecycle

    def create_instance(self, image: str, command: list[str]) -> str:
        """Create an instance from ``image`` running ``command``; returns its id."""
        logger.info(f"creating container {image}")
        try:
            container = self._call(
                f"creating container {image}",
                lambda: self._api.create_container(image, command=command),
            )
        except Exception as e:
            logger.error(f" -> error creating container {image}: {e}")
            raise
        instance_id = container["Id"]
        for warning in container.get("Warnings") or []:
            logger.warning(f" -> container {instance_id}: {warning}")
        logger.info(f" -> container {image} with id {instance_id} created")
        return instance_id

    def start(self, instance_id: str) -> None:
        logger.info(f"starting container {instance_id}")
        try:
            self._call(f"starting container {instance_id}", lambda: self._api.start(instance_id))
        except Exception as e:
            logger.error(f" -> error starting container {instance_id}: {e}")
            raise
        logger.info(f" -> container {instance_id} started")

    def inspect(self, instance_id: str) -> InstanceState:
        data = self._call(
            f"inspecting container {instance_id}",
            lambda: self._api.inspect_container(instance_id),
            idempotent=True,
        )
        return InstanceState.from_inspect(data)

    def remove(self, instance_id: str) -> None:
        """Forcibly remove an instance, discarding no volumes."""
        logger.info(f"remove container {instance_id}")

        def _remove() -> None:
            try:
                self._api.remove_container(instance_id, v=False, force=True)
            except NotFound:
                logger.debug(f" -> container {instance_id} already gone")

        try:
            self._call(f"removing container {instance_id}", _remove, idempotent=True)
        except Exception as e:
            logger.error(f" -> error removing container {instance_id}: {e}")
            raise
        logger.info(f" -> container {instance_id} removed")

    def logs(self, instance_id: str) -> bytes:
        """Fetch the raw combined log stream of an instance.

        ``APIClient.logs`` strips the frame headers for non-tty containers, so
        the endpoint is requested directly through the same session to keep
        stdout and stderr distinguishable.
        """
        logger.info(f"getting container {instance_id} logs")

        def _fetch() -> bytes:
            url = self._api._url("/containers/{0}/logs", instance_id)
            response = self._api._get(
                url, params={"follow": 0, "stdout": 1, "stderr": 1}, stream=False
            )
            self._api._raise_for_status(response)
            return response.content

        try:
            content = self._call(f"fetching container {instance_id} logs", _fetch, idempotent=True)
        except Exception as e:
            logger.error(f" -> error making container {instance_id} logs request: {e}")
            raise
        logger.info(f" -> container {instance_id} logs request complete")
        return content

    def close(self) -> None:
        self._api.close()
