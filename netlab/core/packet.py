"""Packet class for the virtual network lab.

This module defines the Packet class, which represents a packet travelling
through the simulated network.
"""

from dataclasses import dataclass, field
from typing import Any, List, Optional, Tuple

DEFAULT_TTL = 8


@dataclass
class Packet:
    """Represents a network packet.

    Attributes:
        source_address: Address of the originating endpoint.
        destination_address: Address the packet is headed for.
        payload: Opaque payload.
        ttl: Remaining forwarding hops.
        creation_time: Simulation time when the packet was created.
        id: Unique identifier for the packet.
        hops: Endpoints visited by the packet, with arrival times.
        arrival_time: Time when the packet was delivered to a host.
        dropped: Whether the packet was dropped.
        drop_reason: Error kind value explaining the drop.
    """

    source_address: str
    destination_address: str
    payload: Any = ""
    ttl: int = DEFAULT_TTL
    creation_time: float = 0
    id: int = field(init=False)
    hops: List[Tuple[str, float]] = field(default_factory=list)
    arrival_time: Optional[float] = None
    dropped: bool = False
    drop_reason: Optional[str] = None

    _id_counter = 0

    def __post_init__(self):
        """Assign the packet id."""
        type(self)._id_counter += 1
        self.id = type(self)._id_counter

    def record_hop(self, endpoint: str, time: float) -> None:
        """Record a hop in the packet's journey.

        Args:
            endpoint: Name of the endpoint the packet arrived at.
            time: Current simulation time.
        """
        self.hops.append((endpoint, time))

    def get_total_delay(self) -> Optional[float]:
        """Calculate total delay if the packet has been delivered.

        Returns:
            Total delay in seconds or None if the packet hasn't arrived.
        """
        if self.arrival_time is None:
            return None
        return self.arrival_time - self.creation_time

    def get_hop_count(self) -> int:
        """Get number of hops taken."""
        return len(self.hops)

    @property
    def current_endpoint(self) -> Optional[str]:
        """Name of the last endpoint the packet reached."""
        return self.hops[-1][0] if self.hops else None

    def __repr__(self) -> str:
        return (
            f"Packet(id={self.id}, src={self.source_address}, "
            f"dst={self.destination_address}, ttl={self.ttl})"
        )
