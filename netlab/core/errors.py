"""Error taxonomy for the virtual network lab.

Graph and model errors are raised to the caller that made the invalid
request. Forwarding errors (NoRouteError, TTLExceededError) are never raised
out of the forwarding path; endpoints record them as drops.
"""

from netlab.core.enums import ErrorKind


class LabError(Exception):
    """Base class for every failure the lab reports.

    Attributes:
        kind: Taxonomy kind of the failure.
        message: Human-readable description.
    """

    kind: ErrorKind = ErrorKind.RUNTIME_FAILURE

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(LabError):
    """Unknown endpoint, network, link or container."""

    kind = ErrorKind.NOT_FOUND


class ConflictError(LabError):
    """Duplicate name on create."""

    kind = ErrorKind.CONFLICT


class InvalidSenderError(LabError):
    """Transmit called with a sender that is not an end of the link."""

    kind = ErrorKind.INVALID_SENDER


class InvalidAddressError(LabError):
    """Malformed address or route destination."""

    kind = ErrorKind.INVALID_ADDRESS


class NotARouterError(LabError):
    """Route installation attempted on a host."""

    kind = ErrorKind.NOT_A_ROUTER


class NoRouteError(LabError):
    """No forwarding entry, or no link to the resolved next hop."""

    kind = ErrorKind.NO_ROUTE


class TTLExceededError(LabError):
    """Packet arrived at a router with no hops left."""

    kind = ErrorKind.TTL_EXCEEDED


class NoBridgeError(LabError):
    """No container is attached to both sides of a bridged probe."""

    kind = ErrorKind.NO_BRIDGE


class RuntimeCommandError(LabError):
    """The container runtime failed to run a command."""

    kind = ErrorKind.RUNTIME_FAILURE


class DeliveryCancelledError(LabError):
    """A scheduled delivery was interrupted before it fired."""

    kind = ErrorKind.CANCELLED


class InvalidKindError(LabError):
    """Unknown endpoint kind on create."""

    kind = ErrorKind.INVALID_KIND


class InvalidDelayError(LabError):
    """Negative link delay."""

    kind = ErrorKind.INVALID_DELAY
