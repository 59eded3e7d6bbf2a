import uuid
from datetime import datetime, timezone
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator


class Level(str, Enum):
    """
    Severity of a captured event.
    """

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    FATAL = "fatal"


class ExceptionInfo(BaseModel):
    """
    One link of an error's cause chain.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    type_name: str = Field(alias="type")
    message: str = Field(alias="value")


class Frame(BaseModel):
    model_config = ConfigDict(frozen=True)

    filename: str
    function: str
    lineno: Optional[int] = None
    context_line: Optional[str] = None


def _new_event_id() -> str:
    return uuid.uuid4().hex


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Event(BaseModel):
    """
    A single captured message, error or panic destined for the event store.

    Field aliases are the names used on the wire.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(default_factory=_new_event_id, alias="event_id")
    timestamp: datetime = Field(default_factory=_utcnow)
    level: Level
    message: str
    error_chain: Tuple[ExceptionInfo, ...] = Field(default=(), alias="exception")
    stack_trace: Optional[Tuple[Frame, ...]] = Field(default=None, alias="stacktrace")
    project_id: str
    public_key: str
    release: Optional[str] = None
    platform: str = "python"
    extra: Mapping[str, Any] = Field(default_factory=dict)

    @field_validator("extra", mode="after")
    @classmethod
    def freeze_extra(cls, value: Mapping[str, Any]) -> Mapping[str, Any]:
        return MappingProxyType(dict(value))

    @field_serializer("extra")
    def dump_extra(self, value: Mapping[str, Any]) -> Dict[str, Any]:
        return dict(value)
