"""Endpoint class for the virtual network lab.

This module defines the Endpoint class, which represents a host or a router
in the simulated network. Both variants share one class and one receive
entry point; a router is an endpoint whose kind is ROUTER and which carries
a forwarding table.
"""

import ipaddress
import logging
import simpy
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from netlab.core.enums import EndpointKind
from netlab.core.errors import (
    InvalidAddressError,
    LabError,
    NoRouteError,
    NotARouterError,
    TTLExceededError,
)
from netlab.core.link import Link
from netlab.core.packet import Packet

logger = logging.getLogger(__name__)

IPNetwork = Union[ipaddress.IPv4Network, ipaddress.IPv6Network]
Listener = Callable[..., None]


def parse_address(address: str) -> str:
    """Validate an address literal and return its canonical text.

    Raises:
        InvalidAddressError: If ``address`` is not an IPv4/IPv6 address.
    """
    try:
        return str(ipaddress.ip_address(str(address).strip()))
    except ValueError:
        raise InvalidAddressError(f"Invalid address: {address!r}") from None


def parse_destination(destination: str) -> IPNetwork:
    """Normalize a route destination, a bare address becoming a host route.

    Raises:
        InvalidAddressError: If ``destination`` is neither an address nor a prefix.
    """
    try:
        return ipaddress.ip_network(str(destination).strip(), strict=False)
    except ValueError:
        raise InvalidAddressError(f"Invalid route destination: {destination!r}") from None


def _no_listener(*args: Any, **kwargs: Any) -> None:
    pass


class Endpoint:
    """Represents a network endpoint (host or router).

    Attributes:
        env: SimPy environment.
        name: Unique name, also the lookup key in the topology store.
        address: Network address of the endpoint.
        kind: Host or router.
        forwarding_table: Next hop name per destination, None for hosts.
        links: Attached links in attachment order.
        networks: Names of the shared networks the endpoint is attached to.
        received: Packets terminally delivered to this endpoint.
        dropped: Packets dropped at this endpoint, with the reason.
    """

    def __init__(
        self,
        env: simpy.Environment,
        name: str,
        address: str,
        kind: Union[EndpointKind, str] = EndpointKind.HOST,
        listener: Optional[Listener] = None,
    ) -> None:
        """Initialize an endpoint.

        Args:
            env: SimPy environment.
            name: Unique endpoint name.
            address: Network address of the endpoint.
            kind: Host or router.
            listener: Called with (event, *args) for hop, arrival and drop events.
        """
        self.env = env
        self.name = name
        self.address = parse_address(address)
        self.kind = EndpointKind.parse(kind)
        self.forwarding_table: Optional[Dict[IPNetwork, str]] = (
            {} if self.kind is EndpointKind.ROUTER else None
        )
        self.links: List[Link] = []
        self.networks: List[str] = []
        self.received: List[Packet] = []
        self.dropped: List[Tuple[Packet, LabError]] = []
        self.listener = listener or _no_listener

    @property
    def is_router(self) -> bool:
        return self.kind is EndpointKind.ROUTER

    def connect(self, link: Link) -> None:
        """Attach a link to this endpoint."""
        if self is not link.endpoint_a and self is not link.endpoint_b:
            raise ValueError(f"{link!r} does not end at {self.name}")
        self.links.append(link)

    def disconnect(self, link: Link) -> None:
        """Detach a link from this endpoint."""
        self.links.remove(link)

    def link_to(self, name: str) -> Optional[Link]:
        """Return the first attached link whose far end is named ``name``."""
        for link in self.links:
            if link.other_end(self).name == name:
                return link
        return None

    def add_route(self, destination: str, next_hop: str) -> None:
        """Install a static route, replacing any entry for the same destination.

        Args:
            destination: Destination address or prefix.
            next_hop: Name of the next-hop endpoint. Not validated.
        """
        if self.forwarding_table is None:
            raise NotARouterError(f"{self.name} is a host and has no forwarding table")
        network = parse_destination(destination)
        previous = self.forwarding_table.get(network)
        self.forwarding_table[network] = next_hop
        if previous is not None and previous != next_hop:
            logger.info(
                "%s: route %s via %s replaces %s", self.name, network, next_hop, previous
            )
        else:
            logger.info("%s: route %s via %s", self.name, network, next_hop)

    def lookup_route(self, address: str) -> Optional[str]:
        """Find the next hop for a destination address.

        An exact host route wins; otherwise the most specific prefix that
        contains the address wins.

        Returns:
            The next hop name, or None when nothing matches.
        """
        if not self.forwarding_table:
            return None
        try:
            target = ipaddress.ip_address(address)
        except ValueError:
            return None

        best: Optional[IPNetwork] = None
        for network in self.forwarding_table:
            if network.version != target.version or target not in network:
                continue
            if best is None or network.prefixlen > best.prefixlen:
                best = network
        return self.forwarding_table[best] if best is not None else None

    def send(self, packet: Packet) -> None:
        """Originate a packet at this endpoint.

        Routers forward using their table. Hosts transmit on the link facing
        the destination if there is one, otherwise on their first link.
        """
        packet.record_hop(self.name, self.env.now)
        if self.is_router:
            self.forward(packet)
            return

        if not self.links:
            self.drop(packet, NoRouteError(f"{self.name} has no links"))
            return

        link = next(
            (
                candidate
                for candidate in self.links
                if candidate.other_end(self).address == packet.destination_address
            ),
            self.links[0],
        )
        self.listener("packet_hop", packet, self.name, link.other_end(self).name, self.env.now)
        link.transmit(self, packet)

    def receive(self, packet: Packet) -> None:
        """Handle an arriving packet.

        Hosts deliver the packet terminally. Routers forward it.
        """
        packet.record_hop(self.name, self.env.now)
        if not self.is_router:
            packet.arrival_time = self.env.now
            self.received.append(packet)
            logger.info("%s received %r", self.name, packet)
            self.listener("packet_arrived", packet, self, self.env.now)
            return
        self.forward(packet)

    def forward(self, packet: Packet) -> None:
        """Forward a packet according to the forwarding table.

        Drops (never raises) when no route matches, no link leads to the
        resolved next hop, or the TTL is exhausted, checked in that order.
        """
        next_hop = self.lookup_route(packet.destination_address)
        if next_hop is None:
            self.drop(packet, NoRouteError(f"no route to {packet.destination_address}"))
            return

        link = self.link_to(next_hop)
        if link is None:
            self.drop(packet, NoRouteError(f"no link to next hop {next_hop}"))
            return

        if packet.ttl <= 0:
            self.drop(packet, TTLExceededError(f"TTL exhausted for {packet.destination_address}"))
            return

        packet.ttl -= 1
        logger.debug("%s forwarding %r to %s", self.name, packet, next_hop)
        self.listener("packet_hop", packet, self.name, next_hop, self.env.now)
        link.transmit(self, packet)

    def drop(self, packet: Packet, error: LabError) -> None:
        """Drop a packet at this endpoint and report why."""
        packet.dropped = True
        packet.drop_reason = error.kind.value
        self.dropped.append((packet, error))
        logger.warning(
            "%s dropped %r: %s: %s", self.name, packet, type(error).__name__, error
        )
        self.listener("packet_dropped", packet, self, error, self.env.now)

    def __repr__(self) -> str:
        return f"{self.kind.value.capitalize()}({self.name}, {self.address})"
