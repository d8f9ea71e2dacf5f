"""Error taxonomy shared by every ClipLink component.

Components raise these; the HTTP binding maps them to status codes.
"""


class ClipLinkError(Exception):
    """Base exception for synchronization operations."""

    status_code = 500


class NotFoundError(ClipLinkError):
    """Referenced channel, device, membership, or clipboard item does not exist."""

    status_code = 404

    def __init__(self, kind: str, key: str, *, channel_id: str | None = None) -> None:
        self.kind = kind
        self.key = key
        self.channel_id = channel_id
        if channel_id is None:
            super().__init__(f"{kind} not found: {key}")
        else:
            super().__init__(f"{kind} not found in channel {channel_id}: {key}")


class InvalidInputError(ClipLinkError, ValueError):
    """Malformed identifier or missing required field."""

    status_code = 400


class AlreadyExistsError(ClipLinkError):
    """Explicit creation collided with an existing identifier."""

    status_code = 409


class StorageUnavailableError(ClipLinkError):
    """Underlying persistence failed. The original driver error is chained as __cause__."""

    status_code = 500
