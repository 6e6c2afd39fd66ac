"""POSTCREDIT — Attribution Errors.

Only structural failures are errors. A signal that cannot be matched to a
post is a valid UNATTRIBUTED result, and a reference that points outside
its client degrades to "no match" without raising.
"""


class AttributionError(Exception):
    """Base class for recompute failures."""

    def __init__(self, message: str, client_id: str = "", range_days: int = 0):
        self.client_id = client_id
        self.range_days = range_days
        super().__init__(message)


class ClientNotFoundError(AttributionError):
    """Recompute was requested for a client that does not exist."""


class StorageFailure(AttributionError):
    """A read or write against the database failed; nothing was committed."""
