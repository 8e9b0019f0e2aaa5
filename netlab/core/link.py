"""Link class for the virtual network lab.

This module defines the Link class, which represents a point-to-point delayed
channel between two endpoints of the simulated network.
"""

import logging
import simpy
from typing import TYPE_CHECKING, Any, Callable, Generator, Optional

from netlab.core.errors import (
    DeliveryCancelledError,
    InvalidDelayError,
    InvalidSenderError,
)
from netlab.core.packet import Packet

if TYPE_CHECKING:
    from netlab.core.node import Endpoint

logger = logging.getLogger(__name__)

DEFAULT_LINK_DELAY = 0.5


class Link:
    """Represents a network link between two endpoints.

    Attributes:
        env: SimPy environment.
        endpoint_a: First end of the link.
        endpoint_b: Second end of the link.
        delay: Transmission delay in seconds of simulation time. Setting it
            calls on_delay_change.
        on_delay_change: Called with the link after its delay changes.
        packets_sent: Number of packets delivered over this link.
        in_flight: Number of deliveries scheduled but not yet fired.
    """

    def __init__(
        self,
        env: simpy.Environment,
        endpoint_a: "Endpoint",
        endpoint_b: "Endpoint",
        delay: float = DEFAULT_LINK_DELAY,
    ) -> None:
        """Initialize a network link.

        Args:
            env: SimPy environment.
            endpoint_a: First end of the link.
            endpoint_b: Second end of the link.
            delay: Transmission delay in seconds (default: 0.5).

        Raises:
            InvalidDelayError: If ``delay`` is negative.
        """
        self.env = env
        self.endpoint_a = endpoint_a
        self.endpoint_b = endpoint_b
        self.on_delay_change: Optional[Callable[["Link"], None]] = None
        self._delay = self._check_delay(delay)
        self.packets_sent = 0
        self.in_flight = 0

    @staticmethod
    def _check_delay(delay: float) -> float:
        if delay < 0:
            raise InvalidDelayError(f"Link delay must be non-negative, got {delay}")
        return delay

    @property
    def delay(self) -> float:
        return self._delay

    @delay.setter
    def delay(self, value: float) -> None:
        self._delay = self._check_delay(value)
        if self.on_delay_change is not None:
            self.on_delay_change(self)

    def connects_to(self, name: str) -> bool:
        """Check whether either end of the link is named ``name``."""
        return self.endpoint_a.name == name or self.endpoint_b.name == name

    def other_end(self, endpoint: "Endpoint") -> "Endpoint":
        """Return the end of the link opposite to ``endpoint``.

        Raises:
            InvalidSenderError: If ``endpoint`` is neither end of the link.
        """
        if endpoint is self.endpoint_a:
            return self.endpoint_b
        if endpoint is self.endpoint_b:
            return self.endpoint_a
        raise InvalidSenderError(f"{endpoint.name} is not an end of {self!r}")

    def transmit(self, sender: "Endpoint", packet: Packet) -> simpy.events.Process:
        """Schedule delivery of a packet to the far end of the link.

        Each transmission is an independent process, so concurrent
        transmissions never wait on each other.

        Args:
            sender: Endpoint sending the packet.
            packet: The packet to transmit.

        Returns:
            SimPy process for the delivery. Interrupting it cancels delivery.
        """
        receiver = self.other_end(sender)
        logger.debug(
            "%s transmitting %r to %s (delay %.3fs)",
            sender.name,
            packet,
            receiver.name,
            self.delay,
        )
        self.in_flight += 1
        return self.env.process(self._deliver(sender, receiver, packet))

    def _deliver(
        self, sender: "Endpoint", receiver: "Endpoint", packet: Packet
    ) -> Generator[Any, Any, None]:
        try:
            yield self.env.timeout(self.delay)
        except simpy.Interrupt as interrupt:
            self.in_flight -= 1
            receiver.drop(
                packet,
                DeliveryCancelledError(
                    f"delivery from {sender.name} cancelled: {interrupt.cause}"
                ),
            )
            return

        self.in_flight -= 1
        self.packets_sent += 1
        logger.debug("Packet transmitted from %s to %s", sender.name, receiver.name)
        receiver.receive(packet)

    def __repr__(self) -> str:
        return (
            f"Link({self.endpoint_a.name}<->{self.endpoint_b.name}, "
            f"{self.delay * 1000:.1f}ms)"
        )
