"""Service facade for the virtual network lab.

LabService is the surface a thin HTTP or UI layer calls. Every operation
returns a Result instead of raising, so a failure always reaches the caller
with its kind and a readable message.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

from netlab.containers.ping import PingOrchestrator
from netlab.core.enums import ErrorKind
from netlab.core.errors import LabError
from netlab.core.simulator import NetworkLab

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Result:
    """Outcome of a service call.

    Attributes:
        ok: Whether the call succeeded.
        value: Return value on success.
        error_kind: Taxonomy kind value on failure.
        message: Human-readable failure description.
    """

    ok: bool
    value: Any = None
    error_kind: Optional[str] = None
    message: str = ""

    @classmethod
    def success(cls, value: Any = None) -> "Result":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: LabError) -> "Result":
        return cls(ok=False, error_kind=error.kind.value, message=error.message)


class LabService:
    """Exposes the lab operations as Result-returning calls.

    Attributes:
        lab: Simulated network.
        orchestrator: Probe orchestrator for container networks, if configured.
    """

    def __init__(
        self, lab: NetworkLab, orchestrator: Optional[PingOrchestrator] = None
    ) -> None:
        self.lab = lab
        self.orchestrator = orchestrator

    def _call(self, operation: Callable[..., Any], *args: Any) -> Result:
        try:
            return Result.success(operation(*args))
        except LabError as e:
            logger.info("Request failed: %s: %s", e.kind.value, e.message)
            return Result.failure(e)

    def create_endpoint(self, name: str, address: str, kind: str = "host") -> Result:
        return self._call(lambda: self.lab.create_endpoint(name, address, kind).name)

    def create_network(self, name: str) -> Result:
        return self._call(lambda: self.lab.create_network(name).name)

    def attach(self, endpoint: str, network: str) -> Result:
        return self._call(self.lab.attach, endpoint, network)

    def detach(self, endpoint: str, network: str) -> Result:
        return self._call(self.lab.detach, endpoint, network)

    def create_link(self, a: str, b: str, delay: Optional[float] = None) -> Result:
        return self._call(lambda: repr(self.lab.create_link(a, b, delay)))

    def add_route(self, router: str, destination: str, next_hop: str) -> Result:
        return self._call(self.lab.add_route, router, destination, next_hop)

    def send_packet(self, source: str, destination: str, payload: Any = "") -> Result:
        return self._call(lambda: self.lab.send_packet(source, destination, payload).id)

    def resolve_reachability(self, source: str, destination: str) -> Result:
        return self._call(self.lab.resolve_reachability, source, destination)

    def resolve_bridge_and_probe(self, source_id: str, destination_id: str) -> Result:
        if self.orchestrator is None:
            return Result(
                ok=False,
                error_kind=ErrorKind.RUNTIME_FAILURE.value,
                message="No container runtime configured",
            )
        return self._call(self.orchestrator.resolve_bridge_and_probe, source_id, destination_id)
