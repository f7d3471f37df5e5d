"""model.py - Immutable section/entry tree behind every decision log.

A DecisionLog is an ordered list of Sections, and each Section is an ordered
list of entries. Entries are plain tuples:

    ``(label, value)``              rendered with the default formatter
    ``(label, value, formatter)``   rendered with its own formatter

Design decisions:
    - Both levels are stored most-recent-first in a persistent linked stack
      (``_Node``), so prepending a section or an entry is O(1) and the old
      value stays valid. ``view()`` reverses them back to chronological order.
    - Every operation returns a new DecisionLog. Nothing is mutated in place,
      which lets the explicit API fork a log into independent branches and
      lets the ambient API store the log in a ContextVar without copying.
    - Each node caches the length of the stack below it, so the auto-label
      ``step_N`` is computed from the current section size in O(1).
"""

from collections import abc
from typing import Any, Callable, Iterable, Iterator, List, Mapping, Optional, Tuple, Union

Formatter = Callable[[Any], str]
Entry = Union[Tuple[Any, Any], Tuple[Any, Any, Formatter]]
Pairs = Union[Mapping[Any, Any], Iterable[Tuple[Any, Any]]]


class EmptyLogError(ValueError):
    """Raised when an entry is appended to a log that has no section yet."""


class _Node:
    """One cell of a persistent, most-recent-first stack."""

    __slots__ = ("item", "rest", "size")

    def __init__(self, item: Any, rest: "Optional[_Node]") -> None:
        self.item = item
        self.rest = rest
        self.size = 1 + (rest.size if rest is not None else 0)


def _push(stack: Optional[_Node], item: Any) -> _Node:
    return _Node(item, stack)


def _iter_newest_first(stack: Optional[_Node]) -> Iterator[Any]:
    node = stack
    while node is not None:
        yield node.item
        node = node.rest


def _chronological(stack: Optional[_Node]) -> List[Any]:
    items = list(_iter_newest_first(stack))
    items.reverse()
    return items


def _size(stack: Optional[_Node]) -> int:
    return stack.size if stack is not None else 0


def _pairs(items: Pairs) -> Iterable[Tuple[Any, Any]]:
    if isinstance(items, abc.Mapping):
        return items.items()
    return items


def materialize_pairs(items: Pairs) -> Pairs:
    """Return ``items``, or a list of its pairs if it is a one-shot iterator.

    Mappings, lists and tuples are returned as they are. Generators and other
    iterators are read once into a list so the pairs can be logged and still
    handed back to the caller.
    """
    if isinstance(items, abc.Iterator):
        return list(items)
    return items


def step_label(count: int) -> str:
    """Return the synthesized label for the ``count``-th entry of a section."""
    return f"step_{count}"


class Section:
    """A named group of entries, created by a tag operation.

    Sections are never merged: tagging with the same label twice produces two
    distinct Section objects that happen to share a ``tag``.

    Attributes:
        tag: The section label, used as the prefix of every serialized entry.
    """

    __slots__ = ("tag", "_entries")

    def __init__(self, tag: Any, entries: Optional[_Node] = None) -> None:
        self.tag = tag
        self._entries = entries

    def push(self, entry: Entry) -> "Section":
        """Return a copy of this section with ``entry`` added as the newest."""
        return Section(self.tag, _push(self._entries, entry))

    def entries(self) -> List[Entry]:
        """Return the entries in chronological order (oldest first)."""
        return _chronological(self._entries)

    def next_step_label(self) -> str:
        return step_label(len(self))

    def __len__(self) -> int:
        return _size(self._entries)

    def __repr__(self) -> str:  # pragma: no cover
        return f"Section({self.tag!r}, entries={len(self)})"


class DecisionLog:
    """Immutable, append-only decision log.

    A log starts empty (no sections) or with one section, grows through
    ``tag`` and ``append*`` calls, and is rendered with ``close()``. Each call
    returns a new DecisionLog; the receiver is left untouched.

    Example:
        >>> log = DecisionLog.new("validation")
        >>> log = log.append("input_valid", True)
        >>> log = log.tag("authorization").append("user_role", "admin")
        >>> log.close()
        ['validation_input_valid: true', 'authorization_user_role: "admin"']
    """

    __slots__ = ("_sections",)

    def __init__(self, sections: Optional[_Node] = None) -> None:
        self._sections = sections

    # ---------------------------------------------------------------------- #
    # Construction
    # ---------------------------------------------------------------------- #

    @classmethod
    def new(cls, tag: Any = None) -> "DecisionLog":
        """Create an empty log, or a log with one empty section named ``tag``."""
        if tag is None:
            return cls()
        return cls().tag(tag)

    def tag(self, label: Any) -> "DecisionLog":
        """Open a new, empty section named ``label`` and make it current."""
        return DecisionLog(_push(self._sections, Section(label)))

    # ---------------------------------------------------------------------- #
    # Appending entries
    # ---------------------------------------------------------------------- #

    def append(
        self, label: Any, value: Any, formatter: Optional[Formatter] = None
    ) -> "DecisionLog":
        """Add ``(label, value)`` to the current section.

        Args:
            label: Entry label. Serialized as ``{section}_{label}``.
            value: Arbitrary payload.
            formatter: Optional ``value -> str`` callable that takes precedence
                over the default formatter passed to ``close()``.

        Raises:
            EmptyLogError: If the log has no section yet.
        """
        current = self._current_section()
        entry: Entry = (label, value) if formatter is None else (label, value, formatter)
        return self._replace_current(current.push(entry))

    def append_auto(
        self, value: Any, formatter: Optional[Formatter] = None
    ) -> "DecisionLog":
        """Add ``value`` under a ``step_N`` label, N being the current section size."""
        current = self._current_section()
        return self.append(current.next_step_label(), value, formatter)

    def append_many(self, items: Pairs) -> "DecisionLog":
        """Add several ``(label, value)`` pairs, keeping their input order."""
        current = self._current_section()
        for label, value in _pairs(items):
            current = current.push((label, value))
        return self._replace_current(current)

    # ---------------------------------------------------------------------- #
    # Inspection
    # ---------------------------------------------------------------------- #

    def view(self) -> List[Tuple[Any, List[Entry]]]:
        """Return ``[(tag, entries), ...]`` with sections and entries oldest first."""
        return [(s.tag, s.entries()) for s in _chronological(self._sections)]

    def sections(self) -> List[Section]:
        """Return the Section objects in chronological order."""
        return _chronological(self._sections)

    def close(self, formatter: Optional[Formatter] = None) -> List[str]:
        """Serialize the log into ``"{tag}_{label}: {value}"`` strings."""
        from .serializer import serialize

        return serialize(self, formatter)

    @property
    def current_tag(self) -> Any:
        """Tag of the section new entries go to, or ``None`` for an empty log."""
        if self._sections is None:
            return None
        return self._sections.item.tag

    @property
    def section_count(self) -> int:
        return _size(self._sections)

    def has_section(self) -> bool:
        return self._sections is not None

    def __len__(self) -> int:
        """Return the total number of entries across all sections."""
        return sum(len(s) for s in _iter_newest_first(self._sections))

    def __bool__(self) -> bool:
        return self._sections is not None

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DecisionLog):
            return NotImplemented
        return self.view() == other.view()

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:  # pragma: no cover
        return f"DecisionLog({self.view()!r})"

    # ---------------------------------------------------------------------- #
    # Private helpers
    # ---------------------------------------------------------------------- #

    def _current_section(self) -> Section:
        if self._sections is None:
            raise EmptyLogError(
                "DecisionLog has no section; create it with DecisionLog.new(tag) "
                "or call tag() before logging"
            )
        return self._sections.item

    def _replace_current(self, section: Section) -> "DecisionLog":
        # The current section is always the head node, so swapping it shares
        # every older section with the receiver.
        return DecisionLog(_Node(section, self._sections.rest))
