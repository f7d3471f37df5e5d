"""instrument.py - @decision_log decorator that tags the ambient log on entry.

The decorator lets a function declare "my entries belong to a section named
after me" without owning the log's lifecycle. The caller still starts and
closes the log; the decorated function only opens a section when it runs.

    from decisionlog import context as dlog, decision_log

    @decision_log                  # section named "validate"
    def validate(order):
        dlog.log("items", len(order.items))

    @decision_log("pricing")       # fixed section name
    def price(order):
        ...

Behaviour:
    - On entry the wrapper calls ``context.maybe_tag()``, which is a no-op
      when no log is active, so decorated code runs fine without logging.
    - The wrapped function's return value is returned as is and its
      exceptions propagate untouched.
    - Sections do not restore on return. After a nested decorated call, the
      caller keeps writing into the section the inner call opened.

Only the ambient API can be intercepted; explicit contexts have no implicit
storage to tag.
"""

import inspect
from functools import wraps
from typing import Any, Callable, Optional, TypeVar, overload

from . import context

F = TypeVar("F", bound=Callable[..., Any])


def _instrument(func: F, tag: Any) -> F:
    if inspect.iscoroutinefunction(func):

        @wraps(func)
        async def async_wrapper(*args, **kwargs):
            # Tag when the coroutine starts running, not when it is created.
            context.maybe_tag(tag)
            return await func(*args, **kwargs)

        return async_wrapper  # type: ignore[return-value]

    @wraps(func)
    def wrapper(*args, **kwargs):
        context.maybe_tag(tag)
        return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


@overload
def decision_log(func: F) -> F: ...


@overload
def decision_log(tag: Optional[Any] = None) -> Callable[[F], F]: ...


def decision_log(func_or_tag: Any = None):
    """Decorate a function so each call opens a section in the ambient log.

    Args:
        func_or_tag: Either the function itself (bare ``@decision_log``) or
            the section tag to use (``@decision_log("pricing")``). With no
            tag, or ``@decision_log()``, the function's ``__name__`` is used.

    Returns:
        The wrapped function, or a decorator when a tag was given.

    Example:
        >>> from decisionlog import context as dlog
        >>> @decision_log("math")
        ... def add(a, b):
        ...     dlog.log("result", a + b)
        ...     return a + b
        >>> dlog.start()
        >>> add(3, 4)
        7
        >>> dlog.close()
        ['math_result: 7']
    """
    if callable(func_or_tag):
        return _instrument(func_or_tag, func_or_tag.__name__)

    def decorator(func: F) -> F:
        tag = func_or_tag if func_or_tag is not None else func.__name__
        return _instrument(func, tag)

    return decorator
