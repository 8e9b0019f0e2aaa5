"""Topology store for the virtual network lab.

This module defines the TopologyStore class, the authoritative registry of
endpoints, networks and links. Every mutation goes through it so that the
endpoint/network membership relation and the link graph stay consistent.
"""

import logging
import networkx as nx
import simpy
from typing import Dict, Iterator, List, Optional, Union

from netlab.core.enums import EndpointKind
from netlab.core.errors import (
    ConflictError,
    InvalidKindError,
    InvalidSenderError,
    NotFoundError,
)
from netlab.core.link import DEFAULT_LINK_DELAY, Link
from netlab.core.network import Network
from netlab.core.node import Endpoint, Listener, parse_address

logger = logging.getLogger(__name__)


class TopologyStore:
    """Registry of endpoints, networks and links.

    All operations are synchronous and run to completion between simulation
    events, so callers never observe a half-applied mutation.

    Attributes:
        env: SimPy environment shared by every endpoint and link.
        endpoints: Endpoint objects keyed by name.
        networks: Network objects keyed by name.
        links: All links in creation order.
        graph: NetworkX graph with endpoints as nodes and links as edges.
        link_delay: Delay used when a link is created without one.
    """

    def __init__(
        self,
        env: simpy.Environment,
        link_delay: float = DEFAULT_LINK_DELAY,
        listener: Optional[Listener] = None,
    ) -> None:
        """Initialize an empty topology.

        Args:
            env: SimPy environment.
            link_delay: Default link delay in seconds.
            listener: Event callback handed to every endpoint.
        """
        self.env = env
        self.link_delay = link_delay
        self.listener = listener
        self.endpoints: Dict[str, Endpoint] = {}
        self.networks: Dict[str, Network] = {}
        self.links: List[Link] = []
        self.graph = nx.Graph()

    def create_endpoint(
        self, name: str, address: str, kind: Union[EndpointKind, str] = EndpointKind.HOST
    ) -> Endpoint:
        """Create a host or router.

        Raises:
            ConflictError: If an endpoint with this name exists.
            InvalidAddressError: If the address is malformed.
            InvalidKindError: If the kind is not a host or router.
        """
        if name in self.endpoints:
            raise ConflictError(f"Endpoint {name} already exists")
        try:
            kind = EndpointKind.parse(kind)
        except ValueError as e:
            raise InvalidKindError(str(e)) from None
        endpoint = Endpoint(self.env, name, address, kind, listener=self.listener)
        self.endpoints[name] = endpoint
        self.graph.add_node(name, kind=endpoint.kind.value, address=endpoint.address)
        logger.info("Created %r", endpoint)
        return endpoint

    def create_network(self, name: str) -> Network:
        """Create a shared network.

        Raises:
            ConflictError: If a network with this name exists.
        """
        if name in self.networks:
            raise ConflictError(f"Network {name} already exists")
        network = Network(name)
        self.networks[name] = network
        logger.info("Created %r", network)
        return network

    def attach(self, endpoint_name: str, network_name: str) -> None:
        """Attach an endpoint to a network, updating both sides."""
        endpoint = self.lookup_endpoint(endpoint_name)
        network = self.lookup_network(network_name)
        if endpoint_name in network:
            return
        network.members[endpoint_name] = None
        endpoint.networks.append(network_name)
        logger.debug("Attached %s to %s", endpoint_name, network_name)

    def detach(self, endpoint_name: str, network_name: str) -> None:
        """Detach an endpoint from a network, updating both sides."""
        endpoint = self.lookup_endpoint(endpoint_name)
        network = self.lookup_network(network_name)
        if endpoint_name not in network:
            return
        del network.members[endpoint_name]
        endpoint.networks.remove(network_name)
        logger.debug("Detached %s from %s", endpoint_name, network_name)

    def create_link(self, a: str, b: str, delay: Optional[float] = None) -> Link:
        """Connect two endpoints with a link.

        Args:
            a: Name of the first endpoint.
            b: Name of the second endpoint.
            delay: Link delay in seconds, or None for the store default.

        Raises:
            NotFoundError: If either endpoint is unknown.
            InvalidSenderError: If both names refer to the same endpoint.
            InvalidDelayError: If the delay is negative.
        """
        endpoint_a = self.lookup_endpoint(a)
        endpoint_b = self.lookup_endpoint(b)
        if endpoint_a is endpoint_b:
            raise InvalidSenderError(f"Cannot link {a} to itself")

        link = Link(
            self.env,
            endpoint_a,
            endpoint_b,
            self.link_delay if delay is None else delay,
        )
        endpoint_a.connect(link)
        endpoint_b.connect(link)
        self.links.append(link)
        link.on_delay_change = self._on_link_delay_change
        self._refresh_graph_edge(a, b)
        logger.info("Created %r", link)
        return link

    def remove_link(self, a: str, b: str) -> Link:
        """Remove the first link between two endpoints.

        Deliveries already scheduled on the link still fire.

        Raises:
            NotFoundError: If either endpoint is unknown or they are not linked.
        """
        endpoint_a = self.lookup_endpoint(a)
        self.lookup_endpoint(b)
        link = endpoint_a.link_to(b)
        if link is None:
            raise NotFoundError(f"No link between {a} and {b}")

        link.endpoint_a.disconnect(link)
        link.endpoint_b.disconnect(link)
        self.links.remove(link)
        link.on_delay_change = None
        self._refresh_graph_edge(a, b)
        logger.info("Removed %r", link)
        return link

    def _on_link_delay_change(self, link: Link) -> None:
        logger.info("Delay of %r changed", link)
        self._refresh_graph_edge(link.endpoint_a.name, link.endpoint_b.name)

    def _refresh_graph_edge(self, a: str, b: str) -> None:
        """Weight the a-b edge with the fastest link between them, or drop it."""
        delays = [
            link.delay for link in self.links if link.connects_to(a) and link.connects_to(b)
        ]
        if delays:
            self.graph.add_edge(a, b, delay=min(delays))
        elif self.graph.has_edge(a, b):
            self.graph.remove_edge(a, b)

    def lookup_endpoint(self, name: str) -> Endpoint:
        """Return the endpoint named ``name``.

        Raises:
            NotFoundError: If there is no such endpoint.
        """
        try:
            return self.endpoints[name]
        except KeyError:
            raise NotFoundError(f"Endpoint {name} not found") from None

    def lookup_network(self, name: str) -> Network:
        """Return the network named ``name``.

        Raises:
            NotFoundError: If there is no such network.
        """
        try:
            return self.networks[name]
        except KeyError:
            raise NotFoundError(f"Network {name} not found") from None

    def find_endpoint_by_address(self, address: str) -> Optional[Endpoint]:
        """Return the first endpoint owning ``address``, if any."""
        address = parse_address(address)
        for endpoint in self.endpoints.values():
            if endpoint.address == address:
                return endpoint
        return None

    def routers(self) -> Iterator[Endpoint]:
        """Iterate over the router endpoints."""
        return (e for e in self.endpoints.values() if e.is_router)

    def __repr__(self) -> str:
        return (
            f"TopologyStore(endpoints={len(self.endpoints)}, "
            f"networks={len(self.networks)}, links={len(self.links)})"
        )
