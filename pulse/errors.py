from typing import Optional


class PulseError(Exception):
    """
    Base exception for pulse errors.

    Args:
        message (str): The error message.
    """
    def __init__(self, message: str = "An unexpected error occurred in pulse."):
        self.message = message
        super().__init__(self.message)


class InitializationError(PulseError):
    """
    Error raised when the client cannot be initialized.

    Args:
        message (str): The error message.
    """
    def __init__(self, message: str = "Unable to initialize pulse.\n"
                                      "Please check your configuration and try again."):
        super().__init__(message)


class AlreadyInitialized(InitializationError):
    """
    Error raised when initialize() is called while a client is still active.
    """
    def __init__(self, message: str = "pulse is already initialized.\n"
                                      "Call shutdown() before initializing again."):
        super().__init__(message)


class ConfigError(InitializationError):
    """
    Error raised when the provided configuration is invalid.
    """


class MissingField(ConfigError):
    """
    Error raised when a required configuration field is missing or blank.

    Args:
        name (str): The name of the missing field.
        message (str): The error message template.
    """
    def __init__(self, name: str,
                 message: str = "Missing required configuration field: {name}"):
        self.name = name
        super().__init__(message.format(name=name))


class InvalidSampleRate(ConfigError):
    """
    Error raised when traces_sample_rate is not a number in [0.0, 1.0].

    Args:
        value (object): The rejected value.
        message (str): The error message template.
    """
    def __init__(self, value: object = None,
                 message: str = "traces_sample_rate must be a number between 0.0 and 1.0, got {value!r}"):
        self.value = value
        super().__init__(message.format(value=value))


class TransportError(PulseError):
    """
    Base error for a failed delivery attempt.
    """

    @property
    def retryable(self) -> bool:
        return True


class Unreachable(TransportError):
    """
    Error raised when the endpoint could not be reached: connection refused,
    DNS failure or timeout.

    Args:
        reason (str): A short description of the underlying failure.
    """
    def __init__(self, reason: str = ""):
        self.reason = reason
        message = "Event endpoint unreachable"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class Rejected(TransportError):
    """
    Error raised when the endpoint answered with a non-2xx status.

    Args:
        status (int): The HTTP status code.
        retry_after (Optional[float]): Seconds requested by a Retry-After header.
    """
    def __init__(self, status: int, retry_after: Optional[float] = None):
        self.status = status
        self.retry_after = retry_after
        super().__init__(f"Event rejected by endpoint with status {status}")

    @property
    def retryable(self) -> bool:
        # 408 and 429 are transient, the other client errors are not.
        if self.status in (408, 429):
            return True
        return not 400 <= self.status < 500
