import copy
import os
import traceback
from types import TracebackType
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from pulse.config import Config
from pulse.constants import MAX_CHAIN_DEPTH, MAX_STACK_FRAMES, UNSERIALIZABLE_PLACEHOLDER

from .models import Event, ExceptionInfo, Frame, Level

# Frames from inside this package are noise in a captured stack.
_PACKAGE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


def _type_name(error: BaseException) -> str:
    cls = type(error)
    module = getattr(cls, "__module__", None)
    if module in (None, "builtins", "__main__"):
        return cls.__qualname__
    return f"{module}.{cls.__qualname__}"


def _safe_str(value: object) -> str:
    try:
        return str(value)
    except Exception:
        return f"<unprintable {type(value).__name__}>"


def _next_link(error: BaseException) -> Optional[BaseException]:
    if error.__cause__ is not None:
        return error.__cause__
    if error.__suppress_context__:
        return None
    return error.__context__


def _copy_extra(extra: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """
    Snapshot the caller's context so later changes do not reach the queued
    event. Values that cannot be copied are replaced with a placeholder.
    """
    copied = {}
    for key, value in (extra or {}).items():
        try:
            copied[str(key)] = copy.deepcopy(value)
        except Exception:
            copied[str(key)] = UNSERIALIZABLE_PLACEHOLDER.format(
                type_name=type(value).__name__
            )
    return copied


def walk_error_chain(
    error: BaseException, max_depth: int = MAX_CHAIN_DEPTH
) -> Tuple[ExceptionInfo, ...]:
    """
    Collect type name and message for an error and its causes.

    The chain starts with the given error and follows explicit causes
    (``raise ... from ...``) or, failing that, the implicit context. It stops
    after ``max_depth`` links or when a link repeats.
    """
    chain: List[ExceptionInfo] = []
    seen = set()
    current: Optional[BaseException] = error

    while current is not None and len(chain) < max_depth:
        if id(current) in seen:
            break
        seen.add(id(current))
        chain.append(
            ExceptionInfo(type_name=_type_name(current), message=_safe_str(current))
        )
        current = _next_link(current)

    return tuple(chain)


def _to_frames(summaries: List[traceback.FrameSummary]) -> Tuple[Frame, ...]:
    frames = [
        Frame(
            filename=summary.filename,
            function=summary.name,
            lineno=summary.lineno,
            context_line=summary.line or None,
        )
        for summary in summaries
    ]
    return tuple(frames[-MAX_STACK_FRAMES:])


def frames_from_tb(tb: Optional[TracebackType]) -> Optional[Tuple[Frame, ...]]:
    if tb is None:
        return None
    return _to_frames(list(traceback.extract_tb(tb)))


def frames_from_traceback(error: BaseException) -> Optional[Tuple[Frame, ...]]:
    return frames_from_tb(error.__traceback__)


def current_stack_frames() -> Tuple[Frame, ...]:
    """
    Capture the caller's stack, excluding frames from this package.
    """
    summaries = [
        summary
        for summary in traceback.extract_stack()
        if not os.path.abspath(summary.filename).startswith(_PACKAGE_DIR + os.sep)
    ]
    return _to_frames(summaries)


def build_event(
    config: Config,
    message_or_error: Union[str, BaseException],
    level: Optional[Level] = None,
    extra: Optional[Mapping[str, Any]] = None,
    stack_trace: Optional[Tuple[Frame, ...]] = None,
) -> Event:
    """
    Build an Event for the active configuration.

    Args:
        config: The active client configuration.
        message_or_error: A message or an exception instance.
        level: The event level. Defaults to error for exceptions, info otherwise.
        extra: Additional context sent along with the event.
        stack_trace: Frames to attach instead of the collected ones.

    Returns:
        Event: A new immutable event with a fresh id and timestamp.
    """
    error_chain: Tuple[ExceptionInfo, ...] = ()

    if isinstance(message_or_error, BaseException):
        error = message_or_error
        error_chain = walk_error_chain(error)
        message = _safe_str(error) or _type_name(error)
        if level is None:
            level = Level.ERROR
        if stack_trace is None:
            stack_trace = frames_from_traceback(error)
    else:
        message = _safe_str(message_or_error)
        if level is None:
            level = Level.INFO
        if stack_trace is None and config.attach_stacktrace:
            stack_trace = current_stack_frames()

    return Event(
        level=Level(level),
        message=message,
        error_chain=error_chain,
        stack_trace=stack_trace,
        project_id=str(config.project_id),
        public_key=str(config.public_key),
        release=config.release,
        extra=_copy_extra(extra),
    )
