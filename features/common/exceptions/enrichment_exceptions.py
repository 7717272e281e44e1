class EnrichmentError(Exception):
    """Base exception for environmental context errors."""
    pass

class UpstreamUnavailable(EnrichmentError):
    """Raised when a third-party fetch fails or returns malformed data."""
    pass

class ValidationFailure(EnrichmentError):
    """Raised when a log entry is missing a mandatory field."""

    def __init__(self, missing_fields):
        self.missing_fields = list(missing_fields)
        super().__init__(f"Missing required fields: {', '.join(self.missing_fields)}")

class StorageFailure(EnrichmentError):
    """Raised when the record store cannot be read or written."""
    pass
