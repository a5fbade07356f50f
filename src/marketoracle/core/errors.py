"""
Error taxonomy for the oracle service.

Every error carries the HTTP status it maps to at the request boundary.
"""


class OracleError(Exception):
    """Base exception for oracle and scanner errors."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidRequestError(OracleError):
    """Missing or malformed request parameters."""

    status_code = 400


class NotFoundError(OracleError):
    """Unknown symbol or pair. Terminal."""

    status_code = 404


class UpstreamUnavailableError(OracleError):
    """Upstream provider failed after the fetch policy was exhausted."""

    status_code = 500


class RateLimitedError(UpstreamUnavailableError):
    """
    Upstream rejected the request for exceeding its rate budget.

    Transient: the reference oracle retries it or serves stale data, so it
    only reaches a caller as a generic upstream failure.
    """

    def __init__(self, message: str, retry_after: float | None = None) -> None:
        super().__init__(message)
        self.retry_after = retry_after
