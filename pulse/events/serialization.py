"""
Wire format for events.

One event is encoded as a single JSON object. Encoding is deterministic: keys
are sorted and separators are compact, so the same Event always produces the
same bytes.
"""

import json
from typing import Any, Dict, Union

from pulse.constants import UNSERIALIZABLE_PLACEHOLDER
from pulse.meta import get_sdk_info

from .models import Event


def _placeholder(value: Any) -> str:
    return UNSERIALIZABLE_PLACEHOLDER.format(type_name=type(value).__name__)


def _dumps(payload: Dict[str, Any]) -> str:
    return json.dumps(
        payload,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        allow_nan=False,
        default=_placeholder,
    )


def _coerce_extra(extra: Dict[str, Any]) -> Dict[str, Any]:
    """
    Make every extra value JSON encodable. Values that cannot be encoded on
    their own are replaced with a placeholder string.
    """
    coerced = {}
    for key, value in extra.items():
        try:
            _dumps({"value": value})
            coerced[key] = value
        except (TypeError, ValueError, RecursionError):
            coerced[key] = _placeholder(value)
    return coerced


def to_wire(event: Event) -> Dict[str, Any]:
    """
    Convert an Event into its wire dictionary.

    Args:
        event: The event to convert.

    Returns:
        Dict[str, Any]: A JSON encodable dictionary.
    """
    payload = event.model_dump(mode="json", by_alias=True, exclude={"extra"})

    if payload.get("stacktrace") is not None:
        payload["stacktrace"] = {"frames": payload["stacktrace"]}

    payload["extra"] = _coerce_extra(event.extra)
    payload["sdk"] = get_sdk_info()
    return payload


def serialize(event: Event) -> bytes:
    """
    Encode an Event as UTF-8 JSON bytes. Never raises for a well-formed Event.

    Lone surrogates, as produced by surrogateescape decoding of file names,
    are written as backslash escapes.
    """
    return _dumps(to_wire(event)).encode("utf-8", "backslashreplace")


def deserialize(raw: Union[bytes, str]) -> Event:
    """
    Decode wire bytes back into an Event.

    Raises:
        ValueError: If the payload is not valid JSON or not a valid event.
    """
    data = json.loads(raw)
    if not isinstance(data, dict):
        raise ValueError("Event payload must be a JSON object")

    data.pop("sdk", None)
    stacktrace = data.get("stacktrace")
    if isinstance(stacktrace, dict):
        data["stacktrace"] = stacktrace.get("frames")

    return Event.model_validate(data)
