"""List the images of running containers through the docker CLI."""

from __future__ import annotations

import json
import logging
import shutil
import subprocess
from dataclasses import dataclass

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30


class ContainerListError(Exception):
    """Raised when running containers cannot be listed."""


@dataclass
class RunningContainer:
    image: str
    name: str


def list_running_containers(timeout: int = DEFAULT_TIMEOUT) -> list[RunningContainer]:
    """Return the running containers, in the order ``docker ps`` lists them.

    Raises:
        ContainerListError: If docker is missing or the call fails.
    """
    if shutil.which("docker") is None:
        raise ContainerListError("docker not found in PATH")

    cmd = ["docker", "ps", "--no-trunc", "--format", "{{json .}}"]
    try:
        res = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            check=True,
            timeout=timeout,
        )
    except subprocess.CalledProcessError as e:
        raise ContainerListError(f"docker ps failed: {e.stderr.strip()}") from e
    except subprocess.TimeoutExpired as e:
        raise ContainerListError(f"docker ps timed out after {timeout}s") from e

    containers: list[RunningContainer] = []
    for line in res.stdout.splitlines():
        line = line.strip()
        if not line:
            continue
        try:
            data = json.loads(line)
        except json.JSONDecodeError:
            logger.debug("Ignoring unparseable docker ps line: %s", line)
            continue
        containers.append(
            RunningContainer(
                image=data.get("Image", ""),
                name=data.get("Names", "").split(",")[0].lstrip("/"),
            )
        )
    return containers
