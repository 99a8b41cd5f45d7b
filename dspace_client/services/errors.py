"""
Service layer exceptions.
"""


class ServiceError(Exception):
    """Base exception for service layer errors."""

    def __init__(
        self,
        message: str,
        service_id: str | None = None,
        status_code: int | None = None,
    ):
        self.service_id = service_id
        self.status_code = status_code
        super().__init__(message)


class NotFoundError(ServiceError):
    """The requested endpoint or resource does not exist (HTTP 404)."""

    def __init__(self, path: str, service_id: str | None = None):
        self.path = path
        super().__init__(
            f"Resource not found: {path}", service_id=service_id, status_code=404
        )


class RequestTimeoutError(ServiceError):
    """Request timed out."""

    def __init__(self, service_id: str, timeout: float):
        self.timeout = timeout
        super().__init__(
            f"Request to service '{service_id}' timed out after {timeout}s",
            service_id=service_id,
        )


class InvalidInputError(ServiceError):
    """Caller input was rejected before any request was made."""

    pass


class BrowseUnavailableError(ServiceError):
    """Every browse strategy was exhausted without producing data."""

    def __init__(
        self,
        index: str,
        value: str | None = None,
        last_error: Exception | None = None,
        attempts: list[str] | None = None,
    ):
        self.index = index
        self.value = value
        self.last_error = last_error
        self.attempts = attempts or []
        if value is None:
            msg = f"No browse entries available for index '{index}'"
        else:
            msg = f"No items available for index '{index}' and value '{value}'"
        if last_error is not None:
            msg += f" (last error: {last_error})"
        super().__init__(msg)
