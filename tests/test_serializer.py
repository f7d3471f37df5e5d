"""test_serializer.py - Unit tests for serialize() and the inspect() formatter.

Covers:
    - "{tag}_{label}: {value}" output format
    - Chronological order across sections and entries
    - Default formatter override passed to serialize()
    - Per-entry formatter precedence over the default formatter
    - inspect() renderings for scalars, containers and enums
    - The ": " separator is not escaped
"""

import enum

import pytest

from decisionlog.model import DecisionLog
from decisionlog.serializer import inspect, render_entry, serialize


class Color(enum.Enum):
    RED = 1


# ---------------------------------------------------------------------------
# serialize()
# ---------------------------------------------------------------------------


class TestSerialize:
    def test_serialize_empty_log_is_empty_list(self):
        """A log without sections renders to []."""
        assert serialize(DecisionLog.new()) == []

    def test_serialize_empty_section_renders_nothing(self):
        """A section without entries contributes no lines."""
        assert serialize(DecisionLog.new("a").tag("b").append("x", 1)) == ["b_x: 1"]

    def test_serialize_end_to_end_example(self):
        """The canonical validation/authorization example renders exactly."""
        log = (
            DecisionLog.new("validation")
            .append("input_valid", True)
            .tag("authorization")
            .append("user_role", "admin")
        )
        assert serialize(log) == [
            "validation_input_valid: true",
            'authorization_user_role: "admin"',
        ]

    def test_serialize_preserves_full_chronological_order(self):
        """Lines follow insertion order across all sections."""
        log = (
            DecisionLog.new("section_a")
            .append("first", "value1")
            .append("second", "value2")
            .tag("section_b")
            .append("other_step", "value")
        )
        assert serialize(log) == [
            'section_a_first: "value1"',
            'section_a_second: "value2"',
            'section_b_other_step: "value"',
        ]

    def test_serialize_repeated_tags_share_prefix(self):
        """Two sections with the same tag interleave under the same prefix."""
        log = DecisionLog.new("x").append("a", 1).tag("y").append("b", 2).tag("x").append("c", 3)
        assert serialize(log) == ["x_a: 1", "y_b: 2", "x_c: 3"]

    def test_serialize_uses_custom_default_formatter(self):
        """The formatter argument replaces inspect for plain entries."""
        log = DecisionLog.new("s").append("n", 5).append("m", "x")
        assert serialize(log, formatter=lambda v: f"<{v}>") == ["s_n: <5>", "s_m: <x>"]

    def test_per_entry_formatter_wins_over_default(self):
        """An entry's own formatter is used regardless of the default."""
        log = (
            DecisionLog.new("s")
            .append("amount", 12.5, lambda v: f"${v:.2f}")
            .append("plain", 3)
        )
        assert serialize(log, formatter=lambda v: "DEFAULT") == [
            "s_amount: $12.50",
            "s_plain: DEFAULT",
        ]

    def test_separator_in_value_is_not_escaped(self):
        """Values containing ': ' are emitted verbatim."""
        log = DecisionLog.new("s").append("note", "key: value", str)
        assert serialize(log) == ["s_note: key: value"]

    def test_serialize_returns_new_list_each_time(self):
        """Rendering twice yields equal, independent lists."""
        log = DecisionLog.new("s").append("a", 1)
        first = serialize(log)
        first.append("junk")
        assert serialize(log) == ["s_a: 1"]

    def test_render_entry_two_and_three_tuples(self):
        """render_entry handles entries with and without a formatter."""
        assert render_entry("t", ("k", 1), inspect) == "t_k: 1"
        assert render_entry("t", ("k", 1, lambda v: "one"), inspect) == "t_k: one"


# ---------------------------------------------------------------------------
# inspect()
# ---------------------------------------------------------------------------


class TestInspect:
    @pytest.mark.parametrize(
        "value, expected",
        [
            (True, "true"),
            (False, "false"),
            (None, "null"),
            (42, "42"),
            (0.2, "0.2"),
            ("admin", '"admin"'),
            ('say "hi"', '"say \\"hi\\""'),
            ("café", '"café"'),
            ([1, "a", None], '[1, "a", null]'),
            ((1,), "(1,)"),
            ((1, 2), "(1, 2)"),
            ({"user_id": 123, "ok": True}, '{"user_id": 123, "ok": true}'),
            (set(), "set()"),
            ({3, 1, 2}, "{1, 2, 3}"),
            (Color.RED, "Color.RED"),
        ],
    )
    def test_inspect_renders_value(self, value, expected):
        """inspect() produces a stable rendering for common types."""
        assert inspect(value) == expected

    def test_inspect_escapes_newlines_in_strings(self):
        """Newlines inside strings are escaped, keeping one entry per line."""
        assert "\n" not in inspect("line one\nline two")

    def test_inspect_self_referencing_list(self):
        """A list that contains itself renders the inner reference as [...]."""
        cyclic = [1]
        cyclic.append(cyclic)
        assert inspect(cyclic) == "[1, [...]]"

    def test_inspect_self_referencing_dict(self):
        """A dict that contains itself renders the inner reference as {...}."""
        cyclic = {"id": 7}
        cyclic["self"] = cyclic
        assert inspect(cyclic) == '{"id": 7, "self": {...}}'

    def test_inspect_repeated_container_is_not_a_cycle(self):
        """The same list appearing twice side by side is rendered in full."""
        shared = [1, 2]
        assert inspect([shared, shared]) == "[[1, 2], [1, 2]]"

    def test_close_with_cyclic_value(self):
        """A log holding a cyclic value still closes."""
        cyclic = [1]
        cyclic.append(cyclic)
        log = DecisionLog.new("a").append("x", cyclic)
        assert serialize(log) == ["a_x: [1, [...]]"]

    def test_inspect_escapes_lone_surrogates(self):
        """Lone surrogates become backslash escapes, so output encodes as UTF-8."""
        rendered = inspect("a\ud800b")
        assert rendered == '"a\\ud800b"'
        rendered.encode("utf-8")

    def test_inspect_falls_back_to_repr(self):
        """Unknown objects are rendered with repr()."""

        class Thing:
            def __repr__(self):
                return "Thing()"

        assert inspect(Thing()) == "Thing()"
