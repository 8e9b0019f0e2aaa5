"""Reachability resolver for the virtual network lab.

Answers "can A reach B" from network membership alone. Links carry packets
but do not change membership, so they never make two endpoints reachable.
Results are recomputed on every call.
"""

from collections import deque
from typing import Deque, Set

from netlab.core.topology import TopologyStore


def resolve_reachability(store: TopologyStore, source: str, destination: str) -> bool:
    """Check whether ``destination`` is reachable from ``source``.

    Args:
        store: Topology to query.
        source: Name of the source endpoint.
        destination: Name of the destination endpoint.

    Returns:
        True if the endpoints share a network, or are connected through a
        chain of networks joined by common members.

    Raises:
        NotFoundError: If either endpoint is unknown.
    """
    source_endpoint = store.lookup_endpoint(source)
    destination_endpoint = store.lookup_endpoint(destination)
    if source_endpoint is destination_endpoint:
        return True

    if set(source_endpoint.networks) & set(destination_endpoint.networks):
        return True

    visited: Set[str] = {source}
    queue: Deque[str] = deque([source])
    while queue:
        current = store.endpoints[queue.popleft()]
        for network_name in current.networks:
            for member in store.networks[network_name].members:
                if member == destination:
                    return True
                if member not in visited:
                    visited.add(member)
                    queue.append(member)
    return False


def reachable_endpoints(store: TopologyStore, source: str) -> Set[str]:
    """Return the names of every endpoint reachable from ``source``.

    The source itself is not included.
    """
    store.lookup_endpoint(source)
    visited: Set[str] = {source}
    queue: Deque[str] = deque([source])
    while queue:
        current = store.endpoints[queue.popleft()]
        for network_name in current.networks:
            for member in store.networks[network_name].members:
                if member not in visited:
                    visited.add(member)
                    queue.append(member)
    visited.discard(source)
    return visited
