from .client import DatadogClient
from .error import AuthenticationError, BackendError, NotFoundError

__all__ = [
    "DatadogClient",
    "AuthenticationError",
    "BackendError",
    "NotFoundError",
]
