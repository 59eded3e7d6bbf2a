from .base import Transport
from .http import HttpTransport

__all__ = [
    "Transport",
    "HttpTransport",
]
