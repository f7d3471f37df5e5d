"""test_instrument.py - Unit and integration tests for the @decision_log decorator.

Covers:
    - Bare, empty-call and tagged decorator forms
    - Function name is the default section tag
    - Return values and exceptions pass through unchanged
    - No-op when no ambient log is active
    - Multiple sections opened inside a decorated function
    - Nested decorated calls: sections do not restore on return
    - Methods and coroutine functions
    - Metadata preserved via functools.wraps
"""

import asyncio

import pytest

from decisionlog import context as dlog
from decisionlog.context import _log_var
from decisionlog.instrument import decision_log


def _reset_context():
    """Clear the ambient slot for test isolation."""
    _log_var.set(None)


@decision_log
def simple_function(x):
    """Double x."""
    dlog.log("input", x)
    dlog.log("doubled", x * 2)
    return x * 2


@decision_log()
def empty_call_form(x):
    dlog.log("value", x)
    return x


@decision_log("custom_tag")
def with_custom_tag(x):
    dlog.log("value", x)
    return x + 1


@decision_log
def with_sections(x):
    dlog.log("start", x)
    dlog.tag("middle")
    dlog.log("processing", True)
    dlog.tag("finish")
    dlog.log("done", x * 2)
    return x * 2


@decision_log("math")
def calculate(op, a, b):
    dlog.log("operation", op)
    result = {"add": a + b, "sub": a - b, "mul": a * b}[op]
    dlog.log("result", result)
    return result


@decision_log("outer")
def outer_function(x):
    dlog.log("outer_input", x)
    result = inner_function(x * 2)
    dlog.log("outer_output", result)
    return result


@decision_log("inner")
def inner_function(x):
    dlog.log("inner_input", x)
    dlog.log("inner_output", x + 1)
    return x + 1


# ---------------------------------------------------------------------------
# Basic behaviour
# ---------------------------------------------------------------------------


class TestDecisionLogBasic:
    def setup_method(self):
        _reset_context()

    def test_adds_tag_and_returns_result_directly(self):
        """The wrapped function's result is returned unchanged."""
        dlog.start()
        assert simple_function(5) == 10
        assert len(dlog.close()) == 2

    def test_uses_function_name_as_default_tag(self):
        """Bare @decision_log tags with the function's __name__."""
        dlog.start()
        simple_function(3)
        lines = dlog.close()
        assert lines == ["simple_function_input: 3", "simple_function_doubled: 6"]

    def test_empty_call_form_uses_function_name(self):
        """@decision_log() behaves like the bare form."""
        dlog.start()
        empty_call_form(1)
        assert dlog.close() == ["empty_call_form_value: 1"]

    def test_accepts_custom_tag(self):
        """@decision_log('tag') uses the given tag."""
        dlog.start()
        assert with_custom_tag(10) == 11
        assert dlog.close() == ["custom_tag_value: 10"]

    def test_silently_skips_when_log_not_initialized(self):
        """Without an active log the function runs and no log is created."""
        assert simple_function(5) == 10
        assert not dlog.is_active()

    def test_exception_propagates_unchanged(self):
        """Errors raised inside the function are not swallowed."""

        @decision_log("failing")
        def explode():
            dlog.log("before", 1)
            raise ValueError("original message")

        dlog.start()
        with pytest.raises(ValueError, match="original message"):
            explode()
        assert dlog.close() == ["failing_before: 1"]

    def test_wraps_preserves_metadata(self):
        """functools.wraps keeps name and docstring."""
        assert simple_function.__name__ == "simple_function"
        assert simple_function.__doc__ == "Double x."

    def test_each_call_opens_a_new_section(self):
        """Calling twice creates two sections with the same tag."""
        dlog.start()
        with_custom_tag(1)
        with_custom_tag(2)
        assert [tag for tag, _ in dlog.get()] == ["custom_tag", "custom_tag"]
        dlog.close()


# ---------------------------------------------------------------------------
# Sections and arguments
# ---------------------------------------------------------------------------


class TestDecisionLogSections:
    def setup_method(self):
        _reset_context()

    def test_multiple_sections_inside_decorated_function(self):
        """tag() calls inside the function open further sections."""
        dlog.start()
        assert with_sections(10) == 20
        assert dlog.close() == [
            "with_sections_start: 10",
            "middle_processing: true",
            "finish_done: 20",
        ]

    def test_works_with_different_arguments(self):
        """Each call logs its own branch under the fixed tag."""
        logs = {}
        for op in ("add", "sub", "mul"):
            dlog.start()
            calculate(op, 6, 3)
            logs[op] = dlog.close()

        assert logs["add"] == ['math_operation: "add"', "math_result: 9"]
        assert logs["sub"] == ['math_operation: "sub"', "math_result: 3"]
        assert logs["mul"] == ['math_operation: "mul"', "math_result: 18"]

    def test_method_decoration(self):
        """Methods can be decorated; self is passed through."""

        class Pricing:
            rate = 0.1

            @decision_log("pricing")
            def discount(self, total):
                return dlog.trace(total * self.rate, "discount")

        dlog.start()
        assert Pricing().discount(200) == 20.0
        assert dlog.close() == ["pricing_discount: 20.0"]


# ---------------------------------------------------------------------------
# Nested calls
# ---------------------------------------------------------------------------


class TestDecisionLogNested:
    def setup_method(self):
        _reset_context()

    def test_nested_calls_do_not_restore_tag(self):
        """After the inner call returns, the outer function logs under inner_."""
        dlog.start()
        assert outer_function(5) == 11
        assert dlog.close() == [
            "outer_outer_input: 5",
            "inner_inner_input: 10",
            "inner_inner_output: 11",
            "inner_outer_output: 11",
        ]

    def test_nested_calls_keep_chronological_order(self):
        """Outer input precedes inner input, which precedes outer output."""
        dlog.start()
        outer_function(3)
        lines = dlog.close()
        assert lines.index("outer_outer_input: 3") < lines.index("inner_inner_input: 6")
        assert lines.index("inner_inner_input: 6") < lines.index("inner_outer_output: 7")

    def test_calls_are_independent_across_sessions(self):
        """Separate sessions produce separate logs."""
        dlog.start()
        simple_function(1)
        log1 = dlog.close()
        dlog.start()
        simple_function(2)
        log2 = dlog.close()

        assert "simple_function_input: 1" in log1
        assert "simple_function_input: 2" in log2
        assert "simple_function_input: 1" not in log2


# ---------------------------------------------------------------------------
# Coroutines
# ---------------------------------------------------------------------------


class TestDecisionLogAsync:
    def setup_method(self):
        _reset_context()

    def test_coroutine_function_tags_when_awaited(self):
        """Async functions are tagged when they start running."""

        @decision_log("fetch")
        async def fetch(x):
            await asyncio.sleep(0)
            dlog.log("value", x)
            return x

        async def main():
            dlog.start_tag("request")
            coro = fetch(7)
            dlog.log("scheduled", True)
            result = await coro
            return result, dlog.close()

        result, lines = asyncio.run(main())
        assert result == 7
        assert lines == ["request_scheduled: true", "fetch_value: 7"]

    def test_coroutine_without_log_is_noop(self):
        """Async functions run normally without an active log."""

        @decision_log
        async def compute():
            return 3

        assert asyncio.run(compute()) == 3
