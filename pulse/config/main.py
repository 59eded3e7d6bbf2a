import os
from dataclasses import dataclass, field
from numbers import Real
from typing import Optional

from pulse.constants import (
    DEFAULT_HOST,
    DEFAULT_QUEUE_SIZE,
    ENV_HOST,
    ENV_RELEASE,
    REQUEST_TIMEOUT,
    STORE_ENDPOINT_TEMPLATE,
)
from pulse.errors import InvalidSampleRate, MissingField


REQUIRED_FIELDS = ("public_key", "project_id")


def _default_host() -> str:
    return os.getenv(ENV_HOST) or DEFAULT_HOST


def _default_release() -> Optional[str]:
    return os.getenv(ENV_RELEASE) or None


@dataclass(frozen=True)
class Config:
    """
    Client configuration, validated once at construction.

    Args:
        public_key (str): The project public key, sent as the auth token.
        project_id (str): The project id, part of the store endpoint.
        traces_sample_rate (float): Probability in [0.0, 1.0] that an event is sent.
        host (str): Host of the event store.
        release (Optional[str]): Release name attached to every event.
        attach_stacktrace (bool): Attach the caller stack to message events.
        queue_size (int): Capacity of the pending events queue.
        request_timeout (float): Per-attempt delivery timeout in seconds.

    Raises:
        MissingField: If public_key or project_id is missing or blank.
        InvalidSampleRate: If traces_sample_rate is outside [0.0, 1.0].
    """

    public_key: str
    project_id: str
    traces_sample_rate: float = 1.0
    host: str = field(default_factory=_default_host)
    release: Optional[str] = field(default_factory=_default_release)
    attach_stacktrace: bool = True
    queue_size: int = DEFAULT_QUEUE_SIZE
    request_timeout: float = REQUEST_TIMEOUT

    def __post_init__(self):
        for name in REQUIRED_FIELDS:
            value = getattr(self, name)
            if value is None or not str(value).strip():
                raise MissingField(name)

        rate = self.traces_sample_rate
        if isinstance(rate, bool) or not isinstance(rate, Real):
            raise InvalidSampleRate(rate)
        if not 0.0 <= rate <= 1.0:
            raise InvalidSampleRate(rate)

        if self.queue_size < 1:
            raise ValueError("queue_size must be a positive integer")
        if self.request_timeout <= 0:
            raise ValueError("request_timeout must be positive")

    @property
    def store_url(self) -> str:
        return STORE_ENDPOINT_TEMPLATE.format(
            host=self.host, project_id=str(self.project_id).strip()
        )

    def as_dict(self) -> dict:
        """
        Convert the configuration to a loggable dictionary. The public key is
        masked.
        """
        key = str(self.public_key)
        return {
            "public_key": f"{key[:4]}***" if len(key) > 4 else "***",
            "project_id": self.project_id,
            "traces_sample_rate": self.traces_sample_rate,
            "host": self.host,
            "release": self.release,
            "queue_size": self.queue_size,
        }
