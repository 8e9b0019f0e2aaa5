"""Bridge and route synthesizer.

Given two containers that may sit on disjoint networks, find a container
attached to both sides and derive the static route the source needs to
reach the destination through it.

Where several candidates exist (shared networks, networks to bridge, bridge
containers) the lowest identifier wins, so the choice does not depend on the
order the runtime happens to report.
"""

import ipaddress
import logging
from dataclasses import dataclass
from typing import Dict, Mapping, Optional

from netlab.containers.runtime import ContainerRuntime
from netlab.core.errors import InvalidAddressError, NoBridgeError

logger = logging.getLogger(__name__)

DEFAULT_PREFIX_LENGTH = 24


@dataclass(frozen=True)
class SynthesizedRoute:
    """Static route to install on the source container.

    Attributes:
        subnet: Destination subnet in CIDR notation.
        gateway: Address of the bridge on the source's network.
    """

    subnet: str
    gateway: str


@dataclass(frozen=True)
class BridgeResult:
    """Outcome of bridge synthesis.

    Attributes:
        direct: Whether source and destination share a network.
        network: Network the destination is addressed on.
        target_address: Address of the destination on that network.
        bridge: Container bridging the two networks, None when direct.
        route: Route the source needs, None when direct.
    """

    direct: bool
    network: str
    target_address: str
    bridge: Optional[str] = None
    route: Optional[SynthesizedRoute] = None


def subnet_of(address: str, prefix_length: int = DEFAULT_PREFIX_LENGTH) -> str:
    """Zero the host part of an address under a fixed mask.

    >>> subnet_of("10.0.1.7")
    '10.0.1.0/24'
    """
    try:
        network = ipaddress.ip_network(f"{address}/{prefix_length}", strict=False)
    except ValueError:
        raise InvalidAddressError(f"Invalid address: {address!r}") from None
    return str(network)


def synthesize_route(
    runtime: ContainerRuntime,
    source_id: str,
    destination_id: str,
    source_memberships: Optional[Mapping[str, str]] = None,
    destination_memberships: Optional[Mapping[str, str]] = None,
    prefix_length: int = DEFAULT_PREFIX_LENGTH,
) -> BridgeResult:
    """Work out how ``source_id`` can reach ``destination_id``.

    Args:
        runtime: Runtime used to look up network members and bridge addresses.
        source_id: Source container.
        destination_id: Destination container.
        source_memberships: Network to address map of the source, fetched
            from the runtime if omitted.
        destination_memberships: Same for the destination.
        prefix_length: Mask applied to the destination address.

    Returns:
        A direct result when the containers share a network, otherwise a
        bridged result carrying the route to install on the source.

    Raises:
        NoBridgeError: If either side has no network, no container is
            attached to both sides, or the bridge has no source-side address.
    """
    if source_memberships is None:
        source_memberships = runtime.list_network_memberships(source_id)
    if destination_memberships is None:
        destination_memberships = runtime.list_network_memberships(destination_id)

    if not source_memberships:
        raise NoBridgeError(f"{source_id} is not attached to any network")
    if not destination_memberships:
        raise NoBridgeError(f"{destination_id} is not attached to any network")

    shared = sorted(set(source_memberships) & set(destination_memberships))
    if shared:
        network = shared[0]
        logger.info("%s and %s share network %s", source_id, destination_id, network)
        return BridgeResult(
            direct=True,
            network=network,
            target_address=destination_memberships[network],
        )

    source_network = min(source_memberships)
    destination_network = min(destination_memberships)

    candidates = (
        set(runtime.list_network_members(source_network))
        & set(runtime.list_network_members(destination_network))
    ) - {source_id, destination_id}
    if not candidates:
        raise NoBridgeError(
            f"No container bridges {source_network} and {destination_network}"
        )

    bridge = min(candidates)
    bridge_memberships: Dict[str, str] = dict(runtime.list_network_memberships(bridge))
    gateway = bridge_memberships.get(source_network)
    if not gateway:
        raise NoBridgeError(f"Bridge {bridge} has no address on {source_network}")

    target_address = destination_memberships[destination_network]
    route = SynthesizedRoute(subnet=subnet_of(target_address, prefix_length), gateway=gateway)
    logger.info(
        "Bridging %s -> %s through %s: %s via %s",
        source_id,
        destination_id,
        bridge,
        route.subnet,
        route.gateway,
    )
    return BridgeResult(
        direct=False,
        network=destination_network,
        target_address=target_address,
        bridge=bridge,
        route=route,
    )
