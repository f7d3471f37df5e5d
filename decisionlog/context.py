"""context.py - Ambient decision log bound to the current execution context.

The functions in this module build a DecisionLog without passing it around:
the log lives in a ``contextvars.ContextVar`` slot, so each thread and each
asyncio Task sees only its own log.

    from decisionlog import context as dlog

    dlog.start_tag("validation")
    dlog.log("input_valid", True)
    dlog.tag("authorization")
    dlog.log("user_role", "admin")
    dlog.close()
    # ['validation_input_valid: true', 'authorization_user_role: "admin"']

Lifecycle contract:
    - ``start()`` / ``start_tag()`` install a log, ``close()`` renders and
      clears it. Calling ``close()`` twice returns ``[]`` the second time.
    - ``tag()`` without an active log raises LogNotStartedError, since a
      missing ``start`` is a programming error.
    - ``log``, ``log_all``, ``trace``, ``trace_all`` and ``tagged`` are
      tolerant: without a log (or without a section to write to) they do
      nothing and still return their pass-through value, so optional
      instrumentation can run outside a logging session.
    - ``maybe_tag()`` is the silent variant of ``tag()`` used by the
      @decision_log decorator.

The slot always holds an immutable DecisionLog. Every mutation ``set()``s a
new value instead of changing the stored one, so a Task that inherited a
copy of the parent context cannot leak entries back into the parent.
"""

import logging
from contextvars import ContextVar
from typing import Any, Callable, List, Optional, Tuple, TypeVar

from .model import DecisionLog, Entry, Formatter, Pairs, materialize_pairs

logger = logging.getLogger(__name__)

DEFAULT_TAG = "default"

_MISSING: Any = object()

T = TypeVar("T")

# ---------------------------------------------------------------------------
# Per-thread / per-coroutine storage slot. ``None`` means "no active log".
# ---------------------------------------------------------------------------
_log_var: ContextVar[Optional[DecisionLog]] = ContextVar("decisionlog_log", default=None)


class LogNotStartedError(RuntimeError):
    """Raised by ``tag()`` when no decision log is active in this context."""


def _writable() -> Optional[DecisionLog]:
    """Return the active log if it has a section to write to, else ``None``."""
    current = _log_var.get()
    if current is None or not current.has_section():
        return None
    return current


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------


def start() -> None:
    """Install an empty decision log (no sections) in the current context."""
    _log_var.set(DecisionLog.new())


def start_tag(tag: Any) -> None:
    """Install a decision log whose first section is named ``tag``."""
    _log_var.set(DecisionLog.new(tag))


def close(formatter: Optional[Formatter] = None) -> List[str]:
    """Clear the active log and return it serialized.

    Args:
        formatter: Default ``value -> str`` callable for entries that were
            logged without their own formatter. Defaults to ``inspect``.

    Returns:
        The formatted entries in chronological order, or ``[]`` when no log
        is active.
    """
    current = _log_var.get()
    _log_var.set(None)
    if current is None:
        return []
    return current.close(formatter)


def get() -> List[Tuple[Any, List[Entry]]]:
    """Return the chronological view of the active log without clearing it."""
    current = _log_var.get()
    if current is None:
        return []
    return current.view()


def current() -> Optional[DecisionLog]:
    """Return the active DecisionLog value itself, or ``None``."""
    return _log_var.get()


def is_active() -> bool:
    """Return True if a decision log is active in the current context."""
    return _log_var.get() is not None


# ---------------------------------------------------------------------------
# Sections
# ---------------------------------------------------------------------------


def tag(label: Any) -> None:
    """Open a new section named ``label`` in the active log.

    Raises:
        LogNotStartedError: If ``start()`` or ``start_tag()`` was not called
            in this context.
    """
    current = _log_var.get()
    if current is None:
        raise LogNotStartedError(
            "DecisionLog not initialized. Call start() or start_tag() first."
        )
    _log_var.set(current.tag(label))


def maybe_tag(label: Any) -> None:
    """Like ``tag()``, but a no-op when no log is active."""
    current = _log_var.get()
    if current is not None:
        _log_var.set(current.tag(label))


# ---------------------------------------------------------------------------
# Entries
# ---------------------------------------------------------------------------


def log(label: Any, value: Any = _MISSING, formatter: Optional[Formatter] = None) -> None:
    """Record an entry in the current section.

    ``log(label, value)`` records an explicit label. With a single positional
    argument, ``log(value)``, the label is ``step_N`` where N is the number of
    entries already in the current section.

    Args:
        label: The entry label, or the value when called with one argument.
        value: The value to record.
        formatter: Optional ``value -> str`` callable used for this entry
            instead of the default formatter given to ``close()``.
    """
    current = _writable()
    if current is None:
        return
    if value is _MISSING:
        _log_var.set(current.append_auto(label, formatter))
    else:
        _log_var.set(current.append(label, value, formatter))


def log_all(items: Pairs) -> None:
    """Record several ``(label, value)`` pairs (or a mapping) in order."""
    current = _writable()
    if current is not None:
        _log_var.set(current.append_many(items))


def trace(value: T, label: Any = None, formatter: Optional[Formatter] = None) -> T:
    """Record ``value`` and return it unchanged.

    Handy inside expressions::

        total = trace(sum(prices), "subtotal")

    Without ``label`` the entry gets an auto-generated ``step_N`` label.
    """
    current = _writable()
    if current is not None:
        if label is None:
            _log_var.set(current.append_auto(value, formatter))
        else:
            _log_var.set(current.append(label, value, formatter))
    return value


def trace_all(items: Pairs) -> Pairs:
    """Record several pairs like ``log_all()`` and return ``items``.

    A generator or other iterator is consumed by logging, so it is read into
    a list first and that list is returned instead.
    """
    items = materialize_pairs(items)
    log_all(items)
    return items


def tagged(value: T, label: Any, formatter: Optional[Formatter] = None) -> Tuple[Any, T]:
    """Record ``value`` and return ``(label, value)``.

    The label travels with the value, which tells a caller *which* check
    produced a failing result in a chain of short-circuiting checks::

        for label, check in (("user", check_user), ("items", check_items)):
            step, ok = tagged(check(order), label)
            if not ok:
                return reject(step)
    """
    trace(value, label, formatter)
    return label, value


def force_log(label: Any, value: Any, tag: Any = None) -> None:
    """Record an entry, starting a log first if none is active.

    Without ``tag`` the entry goes to the current section, which is a new
    ``"default"`` section when the log had to be created. With ``tag`` the
    entry goes to a section of that name: the current one when its tag
    already matches, otherwise a newly opened one.

    The log created here still has to be released with ``close()``.
    """
    current = _log_var.get()
    if current is None:
        current = DecisionLog.new(tag if tag is not None else DEFAULT_TAG)
    elif tag is not None and current.current_tag != tag:
        current = current.tag(tag)
    elif not current.has_section():
        current = current.tag(DEFAULT_TAG)
    _log_var.set(current.append(label, value))


# ---------------------------------------------------------------------------
# Managed lifecycle
# ---------------------------------------------------------------------------


def wrap(
    tag: Any, body: Callable[[], T], formatter: Optional[Formatter] = None
) -> Tuple[T, List[str]]:
    """Run ``body`` inside a fresh decision log and return ``(result, log)``.

    A log tagged ``tag`` is started before ``body`` runs and closed after it
    returns. If ``body`` raises, the log is discarded and the exception
    propagates unchanged; the slot is empty afterwards on both paths.

    Warning:
        ``wrap`` does not nest. It replaces any log already active in this
        context. An inner ``wrap`` discards the outer log, entries logged
        after it returns are dropped, and the outer call returns ``[]``.
        Use ``tag()`` for sub-steps, or ``explicit.wrap`` for independent
        logs.

    Example:
        >>> result, lines = wrap("order", lambda: trace(42, "status"))
        >>> result, lines
        (42, ['order_status: 42'])
    """
    start_tag(tag)
    try:
        result = body()
    except BaseException:
        discarded = _log_var.get()
        _log_var.set(None)
        logger.debug(
            "discarded decision log %r (%d entries) after failure",
            tag,
            len(discarded) if discarded is not None else 0,
        )
        raise
    return result, close(formatter)
