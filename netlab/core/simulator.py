"""Network lab simulator.

This module defines the NetworkLab class, which owns the SimPy environment
and the topology store and exposes the operations of the virtual network:
building the topology, installing routes, sending packets and answering
reachability queries.
"""

import logging
import random
from collections import Counter
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

import networkx as nx
import numpy as np
import simpy

from netlab.core.enums import EndpointKind
from netlab.core.errors import LabError, NotFoundError
from netlab.core.link import DEFAULT_LINK_DELAY, Link
from netlab.core.network import Network
from netlab.core.node import Endpoint, parse_address
from netlab.core.packet import DEFAULT_TTL, Packet
from netlab.core.reachability import resolve_reachability
from netlab.core.topology import TopologyStore

logger = logging.getLogger(__name__)


class NetworkLab:
    """Virtual network simulation environment.

    Attributes:
        env: SimPy environment driving virtual time.
        store: Topology store holding endpoints, networks and links.
        default_ttl: TTL given to packets sent without an explicit one.
        packets: All packets sent in the simulation.
        completed_packets: Packets delivered to a host.
        dropped_packets: Packets dropped, with the error kind value.
        metrics: Delivery metrics for the simulation.
    """

    def __init__(
        self,
        env: Optional[simpy.Environment] = None,
        link_delay: float = DEFAULT_LINK_DELAY,
        default_ttl: int = DEFAULT_TTL,
        seed: Optional[int] = None,
    ) -> None:
        """Initialize the lab.

        Args:
            env: SimPy environment, a fresh one if omitted.
            link_delay: Default link delay in seconds.
            default_ttl: TTL for packets sent without an explicit one.
            seed: Random seed for traffic generation, if reproducibility is wanted.
        """
        self.env = env if env is not None else simpy.Environment()
        self.store = TopologyStore(self.env, link_delay, listener=self._on_event)
        self.default_ttl = default_ttl
        self.packets: List[Packet] = []
        self.completed_packets: List[Packet] = []
        self.dropped_packets: List[Tuple[Packet, str]] = []

        if seed is not None:
            random.seed(seed)
            np.random.seed(seed)

        self.metrics: Dict[str, Any] = {}

        self.hooks: Dict[str, List[Callable[..., Any]]] = {
            "packet_hop": [],  # packet leaves an endpoint over a link
            "packet_arrived": [],  # packet delivered to a host
            "packet_dropped": [],  # packet dropped
            "sim_end": [],  # the simulation ends
        }

    # Topology

    def create_endpoint(
        self, name: str, address: str, kind: Union[EndpointKind, str] = EndpointKind.HOST
    ) -> Endpoint:
        """Create a host or router. See TopologyStore.create_endpoint."""
        return self.store.create_endpoint(name, address, kind)

    def create_network(self, name: str) -> Network:
        """Create a shared network. See TopologyStore.create_network."""
        return self.store.create_network(name)

    def attach(self, endpoint: str, network: str) -> None:
        self.store.attach(endpoint, network)

    def detach(self, endpoint: str, network: str) -> None:
        self.store.detach(endpoint, network)

    def create_link(self, a: str, b: str, delay: Optional[float] = None) -> Link:
        """Connect two endpoints. See TopologyStore.create_link."""
        return self.store.create_link(a, b, delay)

    def remove_link(self, a: str, b: str) -> Link:
        return self.store.remove_link(a, b)

    # Routing

    def add_route(self, router: str, destination: str, next_hop: str) -> None:
        """Install a static route on a router.

        Args:
            router: Name of the router.
            destination: Destination address or prefix.
            next_hop: Name of the next-hop endpoint.

        Raises:
            NotFoundError: If the router is unknown.
            NotARouterError: If the endpoint is a host.
            InvalidAddressError: If the destination is malformed.
        """
        self.store.lookup_endpoint(router).add_route(destination, next_hop)

    def compute_shortest_paths(self) -> int:
        """Install host routes on every router along delay-weighted shortest paths.

        Returns:
            The number of routes installed.
        """
        installed = 0
        shortest_paths = nx.all_pairs_dijkstra_path(self.store.graph, weight="delay")

        for source, paths in shortest_paths:
            router = self.store.endpoints[source]
            if not router.is_router:
                continue
            for destination, path in paths.items():
                if source != destination and len(path) > 1:
                    address = self.store.endpoints[destination].address
                    router.add_route(address, path[1])
                    installed += 1
        return installed

    def resolve_reachability(self, source: str, destination: str) -> bool:
        """Check reachability over network membership. See resolve_reachability."""
        return resolve_reachability(self.store, source, destination)

    # Traffic

    def resolve_destination(self, destination: str) -> str:
        """Turn an endpoint name or address literal into an address.

        Raises:
            NotFoundError: If ``destination`` is neither.
        """
        if destination in self.store.endpoints:
            return self.store.endpoints[destination].address
        try:
            return parse_address(destination)
        except LabError:
            raise NotFoundError(
                f"Destination {destination} is neither an endpoint nor an address"
            ) from None

    def send_packet(
        self,
        source: str,
        destination: str,
        payload: Any = "",
        ttl: Optional[int] = None,
    ) -> Packet:
        """Send a packet from an endpoint.

        Delivery happens as simulation time advances; call run() to observe it.

        Args:
            source: Name of the sending endpoint.
            destination: Endpoint name or destination address.
            payload: Opaque payload.
            ttl: Initial TTL, the lab default if omitted.

        Returns:
            The packet that was sent.
        """
        sender = self.store.lookup_endpoint(source)
        packet = Packet(
            sender.address,
            self.resolve_destination(destination),
            payload,
            ttl=self.default_ttl if ttl is None else ttl,
            creation_time=self.env.now,
        )
        self.packets.append(packet)
        sender.send(packet)
        return packet

    def packet_generator(
        self,
        source: str,
        destination: str,
        payload: Callable[[], Any],
        interval: Callable[[], float],
        count: Optional[int] = None,
        jitter: float = 0,
    ) -> simpy.events.Process:
        """Send packets repeatedly.

        Args:
            source: Name of the sending endpoint.
            destination: Endpoint name or destination address.
            payload: Returns the payload of each packet.
            interval: Returns the time until the next packet in seconds.
            count: Number of packets to send, unlimited if None.
            jitter: Random variation in interval (fraction of interval).

        Returns:
            SimPy process for the packet generator.
        """
        self.store.lookup_endpoint(source)
        self.resolve_destination(destination)

        def generator_process():
            sent = 0
            while count is None or sent < count:
                self.send_packet(source, destination, payload())
                sent += 1

                current_interval = interval()
                if jitter > 0:
                    current_interval *= 1 + random.uniform(-jitter, jitter)
                yield self.env.timeout(current_interval)

        return self.env.process(generator_process())

    # Events

    def _on_event(self, event_type: str, *args: Any) -> None:
        if event_type == "packet_arrived":
            self.completed_packets.append(args[0])
        elif event_type == "packet_dropped":
            packet, _, error, _ = args
            self.dropped_packets.append((packet, error.kind.value))
        self.call_hooks(event_type, *args)

    def register_hook(self, event_type: str, callback: Callable[..., Any]) -> None:
        """Register a callback function for a specific event type.

        Args:
            event_type: The type of event to register for.
            callback: The function to call when the event occurs.
        """
        if event_type not in self.hooks:
            raise ValueError(f"Unknown hook type: {event_type}")
        self.hooks[event_type].append(callback)

    def call_hooks(self, event_type: str, *args: Any, **kwargs: Any) -> None:
        """Call all registered callbacks for the given event type."""
        for callback in self.hooks.get(event_type, []):
            callback(*args, **kwargs)

    # Running

    def calculate_metrics(self) -> Dict[str, Any]:
        """Calculate delivery metrics.

        Returns:
            Dictionary of calculated metrics.
        """
        sent = len(self.packets)
        delivered = len(self.completed_packets)
        delays = [p.get_total_delay() for p in self.completed_packets]

        drops_by_endpoint: Counter = Counter(
            packet.current_endpoint for packet, _ in self.dropped_packets
        )

        self.metrics = {
            "packets_sent": sent,
            "packets_delivered": delivered,
            "packets_dropped": len(self.dropped_packets),
            "packets_in_flight": sent - delivered - len(self.dropped_packets),
            "delivery_rate": delivered / sent if sent else 0,
            "average_delay": sum(delays) / len(delays) if delays else 0,
            "drops_by_reason": dict(Counter(reason for _, reason in self.dropped_packets)),
            "drops_by_endpoint": dict(drops_by_endpoint),
        }
        return self.metrics

    def run(self, until: Optional[float] = None) -> Dict[str, Any]:
        """Advance the simulation.

        Args:
            until: Simulation time to stop at. If None, run until no events are
                left, which never happens with an unbounded packet generator.

        Returns:
            Dictionary of calculated metrics.
        """
        self.env.run(until=until)
        self.calculate_metrics()
        self.call_hooks("sim_end", self.metrics)
        return self.metrics
