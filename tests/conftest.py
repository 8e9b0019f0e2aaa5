# tests/conftest.py
from typing import Dict, List, Optional, Set, Tuple

import matplotlib

matplotlib.use("Agg")

import pytest
import simpy

from netlab.containers.runtime import ContainerRuntime
from netlab.core.errors import NotFoundError, RuntimeCommandError
from netlab.core.simulator import NetworkLab
from netlab.core.topology import TopologyStore


class FakeRuntime(ContainerRuntime):
    """In-memory container runtime recording every command it is asked to run."""

    def __init__(self, memberships: Dict[str, Dict[str, str]]):
        self.memberships = memberships
        self.routes: List[Tuple[str, str, str]] = []
        self.probes: List[Tuple[str, str]] = []
        self.route_error: Optional[str] = None
        self.probe_output = "3 packets transmitted, 3 packets received, 0% packet loss"

    def list_network_memberships(self, container_id: str) -> Dict[str, str]:
        if container_id not in self.memberships:
            raise NotFoundError(f"Container {container_id} not found")
        return dict(self.memberships[container_id])

    def list_network_members(self, network_id: str) -> Set[str]:
        return {c for c, nets in self.memberships.items() if network_id in nets}

    def install_route(self, container_id: str, subnet: str, gateway: str) -> None:
        if self.route_error:
            raise RuntimeCommandError(self.route_error)
        self.routes.append((container_id, subnet, gateway))

    def run_probe(self, container_id: str, target_address: str) -> str:
        self.probes.append((container_id, target_address))
        return self.probe_output


@pytest.fixture
def env():
    return simpy.Environment()


@pytest.fixture
def store(env):
    return TopologyStore(env)


@pytest.fixture
def lab():
    return NetworkLab(seed=42)


@pytest.fixture
def bridged_runtime():
    """Source on netA, destination on netB, router1 attached to both."""
    return FakeRuntime(
        {
            "src": {"netA": "10.0.0.5"},
            "dst": {"netB": "10.0.1.7"},
            "router1": {"netA": "10.0.0.1", "netB": "10.0.1.1"},
        }
    )
