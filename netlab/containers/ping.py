"""Ping orchestrator.

Combines the bridge synthesizer with a container runtime to run a real
reachability probe between two containers.
"""

import logging

from netlab.containers.bridge import DEFAULT_PREFIX_LENGTH, BridgeResult, synthesize_route
from netlab.containers.runtime import ContainerRuntime

logger = logging.getLogger(__name__)


class PingOrchestrator:
    """Runs probes between containers, installing a bridging route if needed.

    Attributes:
        runtime: Container runtime that executes the commands.
        prefix_length: Mask used for synthesized route subnets.
    """

    def __init__(
        self, runtime: ContainerRuntime, prefix_length: int = DEFAULT_PREFIX_LENGTH
    ) -> None:
        self.runtime = runtime
        self.prefix_length = prefix_length

    def plan(self, source_id: str, destination_id: str) -> BridgeResult:
        """Resolve the path between two containers without changing anything."""
        return synthesize_route(
            self.runtime, source_id, destination_id, prefix_length=self.prefix_length
        )

    def resolve_bridge_and_probe(self, source_id: str, destination_id: str) -> str:
        """Probe ``destination_id`` from ``source_id``.

        When the containers sit on different networks the synthesized route is
        installed on the source first. The probe output is returned as the
        runtime reported it; NoBridgeError and runtime failures propagate.
        """
        result = self.plan(source_id, destination_id)
        if result.route is not None:
            self.runtime.install_route(source_id, result.route.subnet, result.route.gateway)

        logger.info("Probing %s (%s) from %s", destination_id, result.target_address, source_id)
        return self.runtime.run_probe(source_id, result.target_address)
