"""decisionlog/__init__.py - Public API for the decisionlog package.

decisionlog records the decisions made while a unit of work runs (checks
passed, branches taken, values computed) as labeled entries grouped into
named sections, and renders them as a flat, chronological list of strings::

    validation_input_valid: true
    authorization_user_role: "admin"

Three interchangeable ways to build a log produce identical output:

    # 1. Ambient: state lives in a ContextVar, nothing to pass around
    from decisionlog import context as dlog
    dlog.start_tag("validation")
    dlog.log("input_valid", True)
    lines = dlog.close()

    # 2. Explicit: an immutable value threaded through calls
    from decisionlog import explicit
    ctx = explicit.new("validation")
    ctx = explicit.log(ctx, "input_valid", True)
    lines = explicit.close(ctx)

    # 3. Interception: a decorator that opens a section on function entry
    from decisionlog import decision_log

    @decision_log("validation")
    def validate(order):
        dlog.log("input_valid", True)

Closed logs can be compressed for storage::

    from decisionlog import compress, decompress
    blob = compress(lines)
    status, restored = decompress(blob)

Exported names:
    DecisionLog:        The immutable section/entry log value.
    decision_log:       Decorator that tags the ambient log on entry.
    DecisionLogHandler: logging.Handler that feeds the ambient log.
    context, explicit:  The ambient and explicit APIs (modules).
    inspect, serialize: Default formatter and serializer.
    compress, decompress, decompress_strict, decompress_result,
    compress_context:   gzip wrapper for closed logs.
"""

import logging

from . import context, explicit
from .compression import (
    AUTO_MIN_SIZE,
    COMPRESSED,
    RAW,
    DecodeResult,
    Payload,
    compress,
    compress_context,
    decompress,
    decompress_result,
    decompress_strict,
)
from .context import DEFAULT_TAG, LogNotStartedError
from .handler import DecisionLogHandler
from .instrument import decision_log
from .model import DecisionLog, EmptyLogError, Section
from .serializer import inspect, serialize

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "AUTO_MIN_SIZE",
    "COMPRESSED",
    "DEFAULT_TAG",
    "RAW",
    "DecisionLog",
    "DecisionLogHandler",
    "DecodeResult",
    "EmptyLogError",
    "LogNotStartedError",
    "Payload",
    "Section",
    "compress",
    "compress_context",
    "context",
    "decision_log",
    "decompress",
    "decompress_result",
    "decompress_strict",
    "explicit",
    "inspect",
    "serialize",
]
__version__ = "0.1.0"
