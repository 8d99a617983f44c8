"""Errors raised by the backend API client."""


class APIError(Exception):
    """Base exception for failed backend API calls."""

    pass


class APIConnectionError(APIError):
    """Raised when the backend cannot be reached (DNS, refused, timeout)."""

    pass


class APIStatusError(APIError):
    """Raised when the backend answers with a non-success HTTP status.

    Attributes:
        status_code: The HTTP status returned by the backend.
        message: Human-readable detail from the response body, if any.
    """

    def __init__(self, status_code: int, message: str = ""):
        self.status_code = status_code
        self.message = message
        detail = f": {message}" if message else ""
        super().__init__(f"Backend returned {status_code}{detail}")
