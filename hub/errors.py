"""Hub error types.

Every error carries the exact message sent back to the requesting client
inside an ``error`` envelope.
"""


class HubError(Exception):
    """Base class for errors reported to the requesting connection."""

    kind = "error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class ProtocolError(HubError):
    """Unparseable frame, envelope, or unsupported message type."""

    kind = "protocol"


class RequestError(HubError):
    """Missing required field or reference to something that does not exist."""

    kind = "request"


class PersistenceError(HubError):
    """Filesystem failure while applying a mutation."""

    kind = "persistence"


class RemoteFetchError(HubError):
    """Network or decode failure while fetching a remote resource."""

    kind = "fetch"
