"""
Transport definitions for the delivery pipeline.
"""

from abc import ABC, abstractmethod


class Transport(ABC):
    """
    Abstract base class for event transports.

    A transport performs exactly one delivery attempt per call. Retrying is
    the dispatcher's job.
    """

    @abstractmethod
    def send(self, body: bytes, timeout: float) -> None:
        """
        Deliver one serialized event.

        Args:
            body: The serialized event.
            timeout: Seconds allowed for the whole attempt.

        Raises:
            Unreachable: If the endpoint could not be reached in time.
            Rejected: If the endpoint answered with a non-2xx status.
        """
        pass

    def close(self) -> None:
        """
        Release any resources held by the transport.
        """
        pass
