"""
Tests for event construction.
"""

import threading

import pytest
from pydantic import ValidationError

from pulse.config import Config
from pulse.constants import MAX_CHAIN_DEPTH
from pulse.events import Level, build_event, walk_error_chain


class PaymentError(Exception):
    pass


def _raise(error):
    raise error


def _chained_error():
    try:
        try:
            _raise(KeyError("card"))
        except KeyError as e:
            raise ValueError("invalid card") from e
    except ValueError as e:
        try:
            raise PaymentError("charge failed") from e
        except PaymentError as final:
            return final


@pytest.mark.unit
class TestBuildEvent:
    def test_message_event(self, config):
        event = build_event(config, "hi", Level.INFO)

        assert event.message == "hi"
        assert event.level is Level.INFO
        assert event.error_chain == ()
        assert event.project_id == "test_project"
        assert event.public_key == "test_key"
        assert event.timestamp.tzinfo is not None
        assert event.timestamp.utcoffset().total_seconds() == 0

    def test_ids_are_unique(self, config):
        ids = {build_event(config, "hi").id for _ in range(100)}
        assert len(ids) == 100

    def test_default_levels(self, config):
        assert build_event(config, "hi").level is Level.INFO
        assert build_event(config, RuntimeError("x")).level is Level.ERROR

    def test_level_accepts_string(self, config):
        assert build_event(config, "hi", "warning").level is Level.WARNING

    def test_error_event_walks_cause_chain(self, config):
        event = build_event(config, _chained_error())

        assert event.message == "charge failed"
        assert [link.type_name for link in event.error_chain] == [
            f"{__name__}.PaymentError",
            "ValueError",
            "KeyError",
        ]
        assert [link.message for link in event.error_chain] == [
            "charge failed",
            "invalid card",
            "'card'",
        ]

    def test_error_event_has_traceback_frames(self, config):
        event = build_event(config, _chained_error())

        assert event.stack_trace
        assert event.stack_trace[-1].function == "_chained_error"

    def test_error_without_traceback(self, config):
        event = build_event(config, RuntimeError("never raised"))
        assert event.stack_trace is None

    def test_empty_error_message_uses_type_name(self, config):
        event = build_event(config, RuntimeError())
        assert event.message == "RuntimeError"

    def test_message_stack_trace_follows_config(self, config):
        assert build_event(config, "hi").stack_trace is None

        with_stack = Config(public_key="key", project_id="1", attach_stacktrace=True)
        event = build_event(with_stack, "hi")
        assert event.stack_trace
        assert event.stack_trace[-1].function == "test_message_stack_trace_follows_config"
        assert all("pulse/events" not in frame.filename for frame in event.stack_trace)

    def test_extra_keys_are_strings(self, config):
        event = build_event(config, "hi", extra={1: "one", "two": 2})
        assert event.extra == {"1": "one", "two": 2}

    def test_extra_is_a_snapshot(self, config):
        context = {"user": {"id": 1}}
        event = build_event(config, "hi", extra=context)

        context["user"]["id"] = 2
        context["added"] = True

        assert event.extra == {"user": {"id": 1}}
        with pytest.raises(TypeError):
            event.extra["added"] = True

    def test_uncopyable_extra_is_replaced(self, config):
        event = build_event(config, "hi", extra={"lock": threading.Lock(), "ok": 1})

        assert event.extra["lock"].startswith("<unserializable")
        assert event.extra["ok"] == 1

    def test_event_is_immutable(self, config):
        event = build_event(config, "hi")
        with pytest.raises(ValidationError):
            event.message = "changed"

    def test_unprintable_error(self, config):
        class Unprintable(Exception):
            def __str__(self):
                raise RuntimeError("no")

        event = build_event(config, Unprintable())
        assert event.message == "<unprintable Unprintable>"


@pytest.mark.unit
class TestWalkErrorChain:
    def test_single_error(self):
        chain = walk_error_chain(ValueError("bad"))
        assert len(chain) == 1
        assert chain[0].type_name == "ValueError"
        assert chain[0].message == "bad"

    def test_depth_is_bounded(self):
        error = ValueError("0")
        for i in range(1, 50):
            outer = ValueError(str(i))
            outer.__cause__ = error
            error = outer

        chain = walk_error_chain(error)

        assert len(chain) == MAX_CHAIN_DEPTH
        assert chain[0].message == "49"

    def test_cycles_terminate(self):
        first = ValueError("first")
        second = ValueError("second")
        first.__cause__ = second
        second.__cause__ = first

        chain = walk_error_chain(first)

        assert [link.message for link in chain] == ["first", "second"]

    def test_suppressed_context_is_skipped(self):
        try:
            try:
                raise KeyError("inner")
            except KeyError:
                raise ValueError("outer") from None
        except ValueError as e:
            chain = walk_error_chain(e)

        assert [link.type_name for link in chain] == ["ValueError"]

    def test_implicit_context_is_followed(self):
        try:
            try:
                raise KeyError("inner")
            except KeyError:
                raise ValueError("outer")
        except ValueError as e:
            chain = walk_error_chain(e)

        assert [link.type_name for link in chain] == ["ValueError", "KeyError"]
