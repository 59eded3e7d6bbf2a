from .creation import build_event, walk_error_chain
from .models import Event, ExceptionInfo, Frame, Level
from .serialization import deserialize, serialize, to_wire

__all__ = [
    "Event",
    "ExceptionInfo",
    "Frame",
    "Level",
    "build_event",
    "walk_error_chain",
    "serialize",
    "deserialize",
    "to_wire",
]
