"""Network class for the virtual network lab.

A Network is a shared medium: every attached endpoint can reach every other
attached endpoint directly. Membership is mutated only through the
TopologyStore, which keeps it in step with Endpoint.networks.
"""

from dataclasses import dataclass, field
from typing import Dict


@dataclass
class Network:
    """Represents a shared network segment.

    Attributes:
        name: Unique network name.
        members: Names of the attached endpoints, in attachment order.
    """

    name: str
    members: Dict[str, None] = field(default_factory=dict)

    def __contains__(self, endpoint_name: str) -> bool:
        return endpoint_name in self.members

    def __len__(self) -> int:
        return len(self.members)

    def __repr__(self) -> str:
        return f"Network({self.name}, members={list(self.members)})"
