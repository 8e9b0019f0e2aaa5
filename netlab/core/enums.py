"""Enumerations for the virtual network lab.

This module defines enumerations used throughout the lab.
"""

from enum import Enum


class EndpointKind(Enum):
    """Enum for the endpoint variants.

    Attributes:
        HOST: Terminal endpoint, never forwards packets.
        ROUTER: Endpoint with a forwarding table.
    """

    HOST = "host"
    ROUTER = "router"

    @classmethod
    def parse(cls, value: "EndpointKind | str") -> "EndpointKind":
        """Coerce a kind given as an enum member or a case-insensitive string.

        "node" is accepted as an alias for a host.
        """
        if isinstance(value, cls):
            return value
        text = str(value).strip().lower()
        if text == "node":
            return cls.HOST
        try:
            return cls(text)
        except ValueError:
            raise ValueError(f"Unknown endpoint kind: {value!r}") from None


class ErrorKind(Enum):
    """Enum for the failure taxonomy reported to callers."""

    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    INVALID_SENDER = "invalid_sender"
    INVALID_ADDRESS = "invalid_address"
    INVALID_KIND = "invalid_kind"
    INVALID_DELAY = "invalid_delay"
    NOT_A_ROUTER = "not_a_router"
    NO_ROUTE = "no_route"
    TTL_EXCEEDED = "ttl_exceeded"
    NO_BRIDGE = "no_bridge"
    RUNTIME_FAILURE = "runtime_failure"
    CANCELLED = "cancelled"
