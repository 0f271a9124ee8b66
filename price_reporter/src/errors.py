"""Error taxonomy for the price reporter.

Every failure the reporter can surface derives from :class:`OracleError`, so
the CLI can turn any of them into a non-zero exit with a readable message.
"""


class OracleError(Exception):
    """Base exception for price reporter errors."""

    pass


class InvalidPriceFormat(OracleError):
    """Raised when a price literal is not a finite decimal number."""

    pass


class PriceOverflow(OracleError):
    """Raised when a price does not fit into unsigned 64-bit chain units."""

    pass


class SourceError(OracleError):
    """Base exception for price source errors."""

    pass


class SourceUnavailable(SourceError):
    """Raised when a price source cannot be reached (network, timeout)."""

    pass


class SourceHTTPError(SourceUnavailable):
    """Raised when a price source answers with a non-2xx status.

    :ivar status_code: HTTP status code from the failed request.
    """

    def __init__(self, status_code: int, message: str):
        """Initialize the HTTP error.

        :param status_code: HTTP status code.
        :param message: Error message from response.
        """
        self.status_code = status_code
        super().__init__(f"HTTP {status_code}: {message}")


class SourceSchemaError(SourceError):
    """Raised when a source response lacks the expected price field."""

    pass


class NoViableSources(OracleError):
    """Raised when no weighted source produced a price."""

    pass


class NetworkError(OracleError):
    """Raised when the chain API cannot be reached or rejects a request."""

    pass


class SigningError(OracleError):
    """Raised when a report payload cannot be signed."""

    pass


class AuthenticationError(OracleError):
    """Raised when a wallet cannot be decrypted with the given password."""

    pass


class ConfigurationError(OracleError):
    """Raised for invalid user configuration (weights, delays, wallet path)."""

    pass
