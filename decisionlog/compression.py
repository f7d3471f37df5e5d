"""compression.py - gzip encoding of serialized decision logs for storage.

A closed log (a list of strings) is joined with ``"\\n"``, encoded as UTF-8
and gzipped. Any consumer with a gzip codec can read it back, e.g. a
database with a gzip decompression extension followed by a split on newline.

Small logs are often not worth compressing: gzip adds a fixed header and
trailer of roughly 20 bytes, so a short log can come out larger than it went
in. ``compress(lines, min_size=...)`` therefore returns a Payload tagged
``raw`` or ``compressed``. Whoever stores the payload must store its ``kind``
too, because the two variants are not self-describing.

Known limitation:
    A newline inside a rendered value is indistinguishable from the entry
    separator, so such an entry comes back as two entries. The default
    ``inspect`` formatter escapes newlines in strings; custom formatters
    may not.

    A lone surrogate in a line cannot be encoded as UTF-8. It is stored as a
    ``\\udXXX`` escape and does not survive a round trip unchanged.
    ``inspect`` already renders lone surrogates that way.
"""

import gzip
import logging
import zlib
from typing import Any, List, NamedTuple, Optional, Union

from .model import DecisionLog, Formatter

logger = logging.getLogger(__name__)

SEPARATOR = "\n"
AUTO_MIN_SIZE = 100

RAW = "raw"
COMPRESSED = "compressed"

OK = "ok"
ERROR = "error"

# Exceptions a malformed or truncated gzip stream can produce.
CODEC_ERRORS = (OSError, EOFError, zlib.error, UnicodeDecodeError)


class Payload(NamedTuple):
    """A size-tagged compression result: ``(kind, data)``.

    Attributes:
        kind: ``"raw"`` for the joined UTF-8 bytes, ``"compressed"`` for the
            gzip stream.
        data: The bytes to store.
    """

    kind: str
    data: bytes


class DecodeResult(NamedTuple):
    """Outcome of a recoverable decode: ``("ok", lines)`` or ``("error", exc)``."""

    status: str
    value: Any

    @property
    def ok(self) -> bool:
        return self.status == OK


def _join(lines: List[str]) -> bytes:
    # Lone surrogates cannot be encoded; write them as \udXXX escapes.
    return SEPARATOR.join(lines).encode("utf-8", "backslashreplace")


def _split(data: bytes) -> List[str]:
    text = data.decode("utf-8")
    # An empty payload can only come from an empty log.
    if not text:
        return []
    return text.split(SEPARATOR)


def resolve_min_size(min_size: Union[int, str]) -> int:
    """Turn a ``min_size`` option into a byte threshold.

    Raises:
        ValueError: If ``min_size`` is negative or an unknown keyword.
    """
    if min_size == "auto":
        return AUTO_MIN_SIZE
    if isinstance(min_size, bool) or not isinstance(min_size, int):
        raise ValueError(f"min_size must be an int >= 0 or 'auto', got {min_size!r}")
    if min_size < 0:
        raise ValueError(f"min_size must be >= 0, got {min_size}")
    return min_size


def compress(
    lines: List[str], min_size: Optional[Union[int, str]] = None
) -> Union[bytes, Payload]:
    """Compress a closed decision log.

    Args:
        lines: Output of ``close()``.
        min_size: When omitted, always gzip and return ``bytes``. When given,
            return a Payload: ``raw`` if the joined log is shorter than
            ``min_size`` bytes, ``compressed`` otherwise. ``0`` always
            compresses and ``"auto"`` uses ``AUTO_MIN_SIZE`` (100 bytes).

    Returns:
        ``bytes`` without ``min_size``, a Payload with it.

    Example:
        >>> compress(["a_b: 1"], min_size="auto")
        Payload(kind='raw', data=b'a_b: 1')
    """
    joined = _join(lines)
    if min_size is None:
        return gzip.compress(joined, mtime=0)

    threshold = resolve_min_size(min_size)
    if len(joined) < threshold:
        return Payload(RAW, joined)
    return Payload(COMPRESSED, gzip.compress(joined, mtime=0))


def compress_context(
    log: DecisionLog,
    min_size: Optional[Union[int, str]] = None,
    formatter: Optional[Formatter] = None,
) -> Union[bytes, Payload]:
    """Close ``log`` with ``formatter`` and compress the result in one step."""
    return compress(log.close(formatter), min_size=min_size)


def decompress_strict(data: bytes) -> List[str]:
    """Decode a gzip blob back into log lines, raising on any codec error.

    Raises:
        gzip.BadGzipFile, EOFError, zlib.error, UnicodeDecodeError: If the
            blob is not a complete gzip stream of UTF-8 text.
    """
    return _split(gzip.decompress(data))


def decompress(data: bytes) -> DecodeResult:
    """Decode a gzip blob back into log lines.

    Returns:
        ``DecodeResult("ok", lines)`` on success, or
        ``DecodeResult("error", exc)`` carrying the codec exception when the
        blob is malformed or truncated. A partial list is never returned.

    Example:
        >>> decompress(compress(["a_b: 1", "a_c: 2"]))
        DecodeResult(status='ok', value=['a_b: 1', 'a_c: 2'])
    """
    try:
        return DecodeResult(OK, decompress_strict(data))
    except CODEC_ERRORS as exc:
        logger.debug("failed to decompress decision log: %s", exc)
        return DecodeResult(ERROR, exc)


def decompress_result(payload: Payload) -> DecodeResult:
    """Decode a Payload produced by ``compress(lines, min_size=...)``."""
    kind, data = payload
    if kind == COMPRESSED:
        return decompress(data)
    if kind == RAW:
        try:
            return DecodeResult(OK, _split(data))
        except UnicodeDecodeError as exc:
            return DecodeResult(ERROR, exc)
    return DecodeResult(ERROR, ValueError(f"unknown payload kind {kind!r}"))
