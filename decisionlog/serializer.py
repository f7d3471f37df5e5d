"""serializer.py - Flatten a DecisionLog into formatted strings.

Output format, one string per entry, in strict chronological order across
every section:

    ``{section_tag}_{entry_label}: {rendered_value}``

The rendered value comes from the entry's own formatter when it was logged
with one, otherwise from the default formatter given to ``serialize()``,
otherwise from ``inspect()``.

Note:
    The ``": "`` separator is not escaped. A rendered value that itself
    contains ``": "`` is ambiguous for readers that split on the first
    occurrence; that is a known property of the format.
"""

import enum
import json
from typing import Any, List, Optional, Set

from .model import DecisionLog, Entry, Formatter


def inspect(value: Any) -> str:
    """Default formatter: a stable, human-readable rendering of ``value``.

    Scalars follow JSON spelling (``true``, ``null``, ``"text"``) and
    containers are rendered recursively, so the same value always produces
    the same string. A container that contains itself renders the inner
    reference as ``[...]``, ``{...}`` or ``(...)``, like ``repr`` does.
    Lone surrogates in strings are written as ``\\udXXX`` escapes so the
    result is always valid UTF-8.

    Example:
        >>> inspect(True), inspect("admin"), inspect([1, None])
        ('true', '"admin"', '[1, null]')
    """
    return _render(value, set())


def _render_str(value: str) -> str:
    text = json.dumps(value, ensure_ascii=False)
    return text.encode("utf-8", "backslashreplace").decode("utf-8")


def _render(value: Any, active: Set[int]) -> str:
    if value is None:
        return "null"
    if value is True:
        return "true"
    if value is False:
        return "false"
    if isinstance(value, enum.Enum):
        return f"{type(value).__name__}.{value.name}"
    if isinstance(value, str):
        return _render_str(value)
    if isinstance(value, (int, float)):
        return repr(value)
    if isinstance(value, (dict, list, tuple)):
        if id(value) in active:
            if isinstance(value, dict):
                return "{...}"
            return "[...]" if isinstance(value, list) else "(...)"
        active.add(id(value))
        try:
            return _render_container(value, active)
        finally:
            active.discard(id(value))
    if isinstance(value, (set, frozenset)):
        if not value:
            return f"{type(value).__name__}()"
        # Set iteration order is not stable across runs.
        return "{" + ", ".join(sorted(_render(v, active) for v in value)) + "}"
    return repr(value)


def _render_container(value: Any, active: Set[int]) -> str:
    if isinstance(value, dict):
        body = ", ".join(
            f"{_render(k, active)}: {_render(v, active)}" for k, v in value.items()
        )
        return "{" + body + "}"
    if isinstance(value, list):
        return "[" + ", ".join(_render(v, active) for v in value) + "]"
    if len(value) == 1:
        return f"({_render(value[0], active)},)"
    return "(" + ", ".join(_render(v, active) for v in value) + ")"


def render_entry(tag: Any, entry: Entry, default_formatter: Formatter) -> str:
    """Render a single entry of the section named ``tag``."""
    if len(entry) == 3:
        label, value, formatter = entry
    else:
        label, value = entry
        formatter = default_formatter
    return f"{tag}_{label}: {formatter(value)}"


def serialize(log: DecisionLog, formatter: Optional[Formatter] = None) -> List[str]:
    """Return every entry of ``log`` as a formatted string, oldest first.

    Args:
        log: The log to render. An empty log renders to ``[]``.
        formatter: Default ``value -> str`` callable for entries logged
            without their own formatter. Defaults to ``inspect``.

    Returns:
        A new list of strings in chronological order.
    """
    default_formatter = formatter or inspect
    return [
        render_entry(tag, entry, default_formatter)
        for tag, entries in log.view()
        for entry in entries
    ]
