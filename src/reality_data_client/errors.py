"""Client exceptions."""

from typing import Optional


class RealityDataClientError(Exception):
    """Base class for all reality data client errors."""
    pass


class InvalidStateError(RealityDataClientError):
    """Raised when a required identifier or client reference is missing at call time."""
    pass


class ApiRequestError(RealityDataClientError):
    """Raised when a request to the Reality Data API fails.

    Attributes:
        status_code: HTTP status returned by the API, None on transport failure
        message: Human-readable message from the API error body or transport
    """

    def __init__(self, status_code: Optional[int], message: str):
        self.status_code = status_code
        self.message = message
        if status_code is None:
            super().__init__(f"API request error: {message}")
        else:
            super().__init__(f"API request error ({status_code}): {message}")


class ContainerResolutionError(ApiRequestError):
    """Raised when a blob container URL could not be obtained.

    Covers non-success status, transport failure and responses missing
    the container link.
    """

    def __init__(self, entity_id: str, mode, status_code: Optional[int], message: str):
        self.entity_id = entity_id
        self.mode = mode
        super().__init__(status_code, message)
        # Rebuild the text so the entity and mode show up in tracebacks
        permission = getattr(mode, "value", mode)
        detail = f"status {status_code}" if status_code is not None else "no status"
        self.args = (
            f"Could not resolve {permission} container for reality data "
            f"{entity_id} ({detail}): {message}",
        )


__all__ = [
    "RealityDataClientError",
    "InvalidStateError",
    "ApiRequestError",
    "ContainerResolutionError",
]
