"""Container runtime client.

This module defines the ContainerRuntime interface the bridge synthesizer
and the ping orchestrator consume, and DockerRuntime, its implementation on
top of the docker SDK.
"""

import logging
import random
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Set

import docker
from docker.errors import APIError, DockerException, NotFound
from docker.types import IPAMConfig, IPAMPool

from netlab.core.errors import NotFoundError, RuntimeCommandError

logger = logging.getLogger(__name__)


class ContainerRuntime(ABC):
    """Abstract base class for container runtimes."""

    @abstractmethod
    def list_network_memberships(self, container_id: str) -> Dict[str, str]:
        """Return the container's address on each network it is attached to.

        Args:
            container_id: Container name or id.

        Returns:
            Mapping of network name to address.
        """

    @abstractmethod
    def list_network_members(self, network_id: str) -> Set[str]:
        """Return the containers attached to a network."""

    @abstractmethod
    def install_route(self, container_id: str, subnet: str, gateway: str) -> None:
        """Install a static route inside a container.

        Raises:
            RuntimeCommandError: If the route could not be installed.
        """

    @abstractmethod
    def run_probe(self, container_id: str, target_address: str) -> str:
        """Ping ``target_address`` from inside a container.

        Returns:
            The raw probe output, whether or not the target answered.
        """


class DockerRuntime(ContainerRuntime):
    """Container runtime backed by the local docker daemon.

    Attributes:
        client: docker SDK client.
        probe_count: Echo requests sent per probe.
        probe_timeout: Deadline in seconds for a probe to finish.
        image: Image used for new containers.
    """

    def __init__(
        self,
        client: Optional[docker.DockerClient] = None,
        probe_count: int = 3,
        probe_timeout: int = 5,
        image: str = "alpine",
    ) -> None:
        """Initialize the runtime.

        Args:
            client: docker SDK client, docker.from_env() if omitted.
            probe_count: Echo requests sent per probe.
            probe_timeout: Deadline in seconds for a probe to finish.
            image: Image used for new containers.
        """
        if client is None:
            try:
                client = docker.from_env()
            except DockerException as e:
                raise RuntimeCommandError(f"Cannot reach the docker daemon: {e}") from e
        self.client = client
        self.probe_count = probe_count
        self.probe_timeout = probe_timeout
        self.image = image

    def _container(self, container_id: str) -> Any:
        try:
            return self.client.containers.get(container_id)
        except NotFound as e:
            raise NotFoundError(f"Container {container_id} not found") from e
        except APIError as e:
            raise RuntimeCommandError(str(e)) from e

    def _network(self, network_id: str) -> Any:
        try:
            return self.client.networks.get(network_id)
        except NotFound as e:
            raise NotFoundError(f"Network {network_id} not found") from e
        except APIError as e:
            raise RuntimeCommandError(str(e)) from e

    def _exec(self, container_id: str, cmd: List[str]) -> Any:
        container = self._container(container_id)
        try:
            return container.exec_run(cmd)
        except APIError as e:
            raise RuntimeCommandError(str(e)) from e

    def list_network_memberships(self, container_id: str) -> Dict[str, str]:
        container = self._container(container_id)
        networks = container.attrs["NetworkSettings"]["Networks"] or {}
        return {
            name: settings["IPAddress"]
            for name, settings in networks.items()
            if settings.get("IPAddress")
        }

    def list_network_members(self, network_id: str) -> Set[str]:
        network = self._network(network_id)
        containers = network.attrs.get("Containers") or {}
        # Reported by name so the ids line up with list_network_memberships keys.
        return {info["Name"] for info in containers.values() if info.get("Name")}

    def install_route(self, container_id: str, subnet: str, gateway: str) -> None:
        result = self._exec(container_id, ["ip", "route", "replace", subnet, "via", gateway])
        output = result.output.decode(errors="replace") if result.output else ""
        if result.exit_code != 0:
            raise RuntimeCommandError(
                f"Failed to install route {subnet} via {gateway} on {container_id}: "
                f"{output.strip()}"
            )
        logger.info("Installed route %s via %s on %s", subnet, gateway, container_id)

    def run_probe(self, container_id: str, target_address: str) -> str:
        result = self._exec(
            container_id,
            [
                "ping",
                "-c",
                str(self.probe_count),
                "-w",
                str(self.probe_timeout),
                target_address,
            ],
        )
        logger.info(
            "Probe %s -> %s exited with %s", container_id, target_address, result.exit_code
        )
        return result.output.decode(errors="replace") if result.output else ""

    # Lifecycle

    def create_container(self, image: Optional[str] = None) -> str:
        """Start a container able to configure routes and forward packets.

        The container is detached from docker's default bridge network.

        Returns:
            The container name.
        """
        try:
            container = self.client.containers.run(
                image or self.image,
                command="/bin/sh",
                tty=True,
                detach=True,
                cap_add=["NET_ADMIN"],
                sysctls={"net.ipv4.ip_forward": "1"},
            )
            self.client.networks.get("bridge").disconnect(container, force=True)
        except APIError as e:
            raise RuntimeCommandError(str(e)) from e
        logger.info("Created container %s", container.name)
        return container.name

    def remove_container(self, container_id: str) -> None:
        container = self._container(container_id)
        try:
            container.remove(force=True)
        except APIError as e:
            raise RuntimeCommandError(str(e)) from e
        logger.info("Removed container %s", container_id)

    def create_network(self, name: Optional[str] = None, subnet: Optional[str] = None) -> str:
        """Create a bridge network.

        Args:
            name: Network name, generated if omitted.
            subnet: Network subnet, a random 192.168.X.0/24 if omitted.

        Returns:
            The network name.
        """
        if subnet is None:
            subnet = f"192.168.{random.randint(0, 254)}.0/24"
        if name is None:
            name = f"net_{random.getrandbits(32):08x}"
        ipam = IPAMConfig(pool_configs=[IPAMPool(subnet=subnet)])
        try:
            network = self.client.networks.create(name, driver="bridge", ipam=ipam)
        except APIError as e:
            raise RuntimeCommandError(str(e)) from e
        logger.info("Created network %s (%s)", network.name, subnet)
        return network.name

    def connect(self, container_id: str, network_id: str) -> None:
        network = self._network(network_id)
        try:
            network.connect(container_id)
        except NotFound as e:
            raise NotFoundError(f"Container {container_id} not found") from e
        except APIError as e:
            raise RuntimeCommandError(str(e)) from e
        logger.info("Connected %s to %s", container_id, network_id)

    def create_bridge_router(self, network_a: str, network_b: str) -> str:
        """Start a container attached to both networks so it can bridge them.

        Returns:
            The bridge container name.
        """
        container = self.create_container()
        self.connect(container, network_a)
        self.connect(container, network_b)
        return container
