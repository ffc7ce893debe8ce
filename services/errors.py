class CatalogError(Exception):
    """Base class for failures raised by the catalog service layer."""


class NetworkError(CatalogError):
    """A single request failed: transport error, bad status or malformed payload."""

    def __init__(self, message, url=None):
        super().__init__(message)
        self.url = url


class FetchExhaustedError(CatalogError):
    """Every attempt allowed for one URL failed."""

    def __init__(self, url, attempts, last_error=None):
        super().__init__(f"Failed to fetch {url} after {attempts} attempts: {last_error}")
        self.url = url
        self.attempts = attempts
        self.last_error = last_error
