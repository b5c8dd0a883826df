"""ReelScout exception classes."""


class ReelScoutError(Exception):
    """Base class for all ReelScout exceptions."""

    # Default HTTP status for API responses
    status_code: int = 500


class DetailUnavailable(ReelScoutError):
    """The catalog could not produce a detail record for the request."""

    status_code = 502


class NotFound(DetailUnavailable, KeyError):
    """The requested title does not exist in the catalog."""

    status_code = 404

    def __str__(self) -> str:
        # KeyError.__str__ quotes its argument
        return Exception.__str__(self)


class ProviderError(DetailUnavailable):
    """Transport failure or malformed response from the catalog provider."""

    status_code = 502
