"""explicit.py - Decision log passed around as an explicit, immutable value.

Every function takes the current DecisionLog as its first argument and returns
the updated one. There is no hidden state, so contexts can be used from any
number of threads at once, and a context can be branched::

    from decisionlog import explicit

    ctx = explicit.new("validation")
    ctx = explicit.log(ctx, "input_valid", True)
    accepted = explicit.log(ctx, "decision", "accept")
    rejected = explicit.log(ctx, "decision", "reject")   # ctx is unchanged

Calls that record an entry into a context without any section return the
context unchanged, mirroring the tolerant behaviour of the ambient API.
"""

from typing import Any, Callable, List, Optional, Tuple, TypeVar

from .model import DecisionLog, Entry, Formatter, Pairs, materialize_pairs

_MISSING: Any = object()

T = TypeVar("T")


def new(tag: Any = None) -> DecisionLog:
    """Create an empty context, or one whose first section is ``tag``."""
    return DecisionLog.new(tag)


def tag(ctx: DecisionLog, label: Any) -> DecisionLog:
    """Return ``ctx`` with a new section named ``label`` opened."""
    return ctx.tag(label)


def log(
    ctx: DecisionLog,
    label: Any,
    value: Any = _MISSING,
    formatter: Optional[Formatter] = None,
) -> DecisionLog:
    """Return ``ctx`` with one more entry in its current section.

    ``log(ctx, label, value)`` uses an explicit label; ``log(ctx, value)``
    generates a ``step_N`` label from the current section size.
    """
    if not ctx.has_section():
        return ctx
    if value is _MISSING:
        return ctx.append_auto(label, formatter)
    return ctx.append(label, value, formatter)


def log_all(ctx: DecisionLog, items: Pairs) -> DecisionLog:
    """Return ``ctx`` with every ``(label, value)`` pair recorded in order."""
    if not ctx.has_section():
        return ctx
    return ctx.append_many(items)


def trace(
    ctx: DecisionLog,
    value: T,
    label: Any = None,
    formatter: Optional[Formatter] = None,
) -> Tuple[T, DecisionLog]:
    """Record ``value`` and return ``(value, ctx')``."""
    if not ctx.has_section():
        return value, ctx
    if label is None:
        return value, ctx.append_auto(value, formatter)
    return value, ctx.append(label, value, formatter)


def trace_all(ctx: DecisionLog, items: Pairs) -> Tuple[Pairs, DecisionLog]:
    """Record several pairs and return ``(items, ctx')``.

    An iterator is returned as the list it was read into.
    """
    items = materialize_pairs(items)
    return items, log_all(ctx, items)


def tagged(
    ctx: DecisionLog,
    value: T,
    label: Any,
    formatter: Optional[Formatter] = None,
) -> Tuple[Tuple[Any, T], DecisionLog]:
    """Record ``value`` and return ``((label, value), ctx')``."""
    _, ctx = trace(ctx, value, label, formatter)
    return (label, value), ctx


def close(ctx: DecisionLog, formatter: Optional[Formatter] = None) -> List[str]:
    """Render ``ctx`` into ``"{tag}_{label}: {value}"`` strings."""
    return ctx.close(formatter)


def view(ctx: DecisionLog) -> List[Tuple[Any, List[Entry]]]:
    """Return ``ctx`` as ``[(tag, entries), ...]`` in chronological order."""
    return ctx.view()


get = view


def wrap(
    tag: Any,
    body: Callable[[DecisionLog], Tuple[T, DecisionLog]],
    formatter: Optional[Formatter] = None,
) -> Tuple[T, List[str]]:
    """Run ``body`` with a fresh context tagged ``tag``.

    ``body`` receives the context and must return ``(result, final_ctx)``.
    Exceptions from ``body`` propagate unchanged; there is nothing to clean
    up because the context never leaves this call.

    Returns:
        ``(result, lines)`` where ``lines`` is ``close(final_ctx, formatter)``.
    """
    result, final_ctx = body(new(tag))
    return result, close(final_ctx, formatter)
