"""Error kinds shared by services and the HTTP boundary."""


class ShowfinderError(Exception):
    """Base class for Showfinder errors."""


class ConfigurationError(ShowfinderError):
    """A required credential or key is missing."""


class ValidationError(ShowfinderError):
    """Request input is missing or malformed."""


class NotFoundError(ShowfinderError):
    """The requested entity does not exist upstream or locally."""


class UpstreamError(ShowfinderError):
    """A third-party API returned a non-success response or was unreachable."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class StoreError(ShowfinderError):
    """A favorites store operation failed."""
