"""Error types raised by the collection controller and its collaborators."""


class CollectionError(Exception):
    """Base class for collection controller errors."""


class FilterValidationError(CollectionError, ValueError):
    """A filter set is malformed and must not be sent to the server.

    Raised before serialization, e.g. for a ``range`` date filter with only
    one bound set. Never reaches the network.
    """


class TransportError(CollectionError):
    """The fetch collaborator failed (network failure, non-2xx, unparsable body).

    The message is the user-facing error string stored on the collection state.
    """

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    def __str__(self) -> str:
        return self.message
