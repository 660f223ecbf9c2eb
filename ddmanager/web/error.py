class BackendError(Exception):
    """Unexpected response from the monitoring backend."""

    def __init__(self, status: int, message: str = ""):
        self.status = status
        super().__init__(f"Monitoring backend responded {status}: {message}")


class NotFoundError(BackendError):
    """Resource not found"""

    def __init__(self, message: str = "Not found"):
        super().__init__(404, message)


class AuthenticationError(BackendError):
    """The monitoring backend rejected the credentials."""
