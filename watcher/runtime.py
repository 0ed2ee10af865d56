"""
Docker Runtime - Thin wrapper over the docker SDK used by the monitor
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import docker
import requests
from docker.errors import DockerException

from .stats import RawStatsSnapshot


class ContainerRuntimeError(Exception):
    """Raised when the Docker engine cannot answer a request"""
    pass


@dataclass(frozen=True)
class ContainerSummary:
    """A running container as seen in one sampling cycle"""
    id: str
    name: str
    image: str
    status: str


def _strip_name(name: str) -> str:
    return name[1:] if name.startswith('/') else name


class DockerRuntime:
    """Lists containers and reads their stats through the low-level API"""

    def __init__(self, client: Optional[docker.DockerClient] = None):
        """
        Initialize runtime

        Args:
            client: Docker client (from_env() if None)

        Raises:
            ContainerRuntimeError: If the Docker engine is not reachable
        """
        if client is None:
            try:
                client = docker.from_env()
            except DockerException as e:
                raise ContainerRuntimeError(f"Cannot connect to Docker: {e}") from e
        self.client = client

    @property
    def api(self):
        return self.client.api

    def list_running_containers(self) -> List[ContainerSummary]:
        """
        List running containers

        Returns:
            ContainerSummary for each running container

        Raises:
            ContainerRuntimeError: If the engine call fails
        """
        try:
            containers = self.api.containers()
        except (DockerException, requests.exceptions.RequestException) as e:
            raise ContainerRuntimeError(f"Error listing containers: {e}") from e

        summaries = []
        for c in containers:
            names = c.get('Names') or []
            summaries.append(ContainerSummary(
                id=c['Id'],
                name=_strip_name(names[0]) if names else c['Id'][:12],
                image=c.get('Image', 'unknown'),
                status=c.get('Status', ''),
            ))
        return summaries

    def get_stats(self, container_id: str) -> RawStatsSnapshot:
        """
        Read a single stats sample for a container

        Raises:
            ContainerRuntimeError: If the engine call fails
        """
        try:
            stats = self.api.stats(container_id, stream=False)
        except (DockerException, requests.exceptions.RequestException) as e:
            raise ContainerRuntimeError(
                f"Error reading stats for {container_id[:12]}: {e}"
            ) from e
        return RawStatsSnapshot.from_docker(stats)

    def inspect(self, container_id: str) -> Dict[str, Any]:
        """
        Inspect a container

        Returns:
            Dict with the container 'name' (leading '/' stripped, empty
            if the engine reports none)

        Raises:
            ContainerRuntimeError: If the engine call fails
        """
        try:
            attrs = self.api.inspect_container(container_id)
        except (DockerException, requests.exceptions.RequestException) as e:
            raise ContainerRuntimeError(
                f"Error inspecting {container_id[:12]}: {e}"
            ) from e
        return {'name': _strip_name(attrs.get('Name') or '')}

    def close(self):
        self.client.close()
