"""Traffic generators for the virtual network lab.

This module provides interval factories (constant, variable, Poisson and
bursty traffic) and payload factories for NetworkLab.packet_generator.
"""

import itertools
import random
import numpy as np
from typing import Callable, Optional, Union


def _check_rate(rate: float, name: str = "rate") -> float:
    if rate <= 0:
        raise ValueError(f"{name} must be positive packets per second, got {rate}")
    return rate


def constant_traffic(rate: float) -> Callable[[], float]:
    """Send one packet every ``1 / rate`` seconds.

    Raises:
        ValueError: If ``rate`` is not positive.
    """
    interval = 1 / _check_rate(rate)
    return lambda: interval


def variable_traffic(
    min_rate: float, max_rate: float, seed: Optional[int] = None
) -> Callable[[], float]:
    """Draw a rate uniformly from ``[min_rate, max_rate]`` for each packet.

    Args:
        min_rate: Slowest rate in packets per second.
        max_rate: Fastest rate in packets per second.
        seed: Seed for a private generator. Without one the module-level
            generator is used, which NetworkLab seeds.

    Raises:
        ValueError: If a rate is not positive or the bounds are swapped.
    """
    _check_rate(min_rate, "min_rate")
    _check_rate(max_rate, "max_rate")
    if min_rate > max_rate:
        raise ValueError(f"min_rate {min_rate} exceeds max_rate {max_rate}")
    rng = random.Random(seed) if seed is not None else random
    return lambda: 1 / rng.uniform(min_rate, max_rate)


def poisson_traffic(rate: float, seed: Optional[int] = None) -> Callable[[], float]:
    """Exponentially distributed gaps averaging ``1 / rate`` seconds.

    Args:
        rate: Mean rate in packets per second.
        seed: Seed for a private numpy Generator. Without one the global
            numpy state is used, which NetworkLab seeds.

    Raises:
        ValueError: If ``rate`` is not positive.
    """
    scale = 1 / _check_rate(rate)
    if seed is None:
        return lambda: float(np.random.exponential(scale))
    rng = np.random.default_rng(seed)
    return lambda: float(rng.exponential(scale))


def bursty_traffic(
    burst_size: int, packet_interval: Union[float, Callable[[], float]]
) -> Callable[[], float]:
    """Generate bursty traffic.

    Each burst contains ``burst_size`` packets sent ``packet_interval`` apart,
    followed by a gap of ``packet_interval * burst_size`` before the next one.

    Args:
        burst_size: Number of packets to send in each burst.
        packet_interval: Time between packets within a burst, fixed or callable.

    Returns:
        Function that returns the time until the next packet should be sent.
    """
    get_interval = (
        packet_interval if callable(packet_interval) else lambda: packet_interval
    )

    packets = 0

    def next_packet_delay() -> float:
        nonlocal packets
        interval = get_interval()
        packets += 1
        if packets < burst_size:
            return interval
        # end burst
        packets = 0
        return interval * burst_size

    return next_packet_delay


def constant_payload(payload: str) -> Callable[[], str]:
    """Generate the same payload for every packet."""
    return lambda: payload


def sequence_payload(prefix: str = "seq") -> Callable[[], str]:
    """Generate numbered payloads: ``prefix-1``, ``prefix-2``, ..."""
    counter = itertools.count(1)
    return lambda: f"{prefix}-{next(counter)}"
