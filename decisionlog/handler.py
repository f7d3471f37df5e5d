"""handler.py - Bridge from standard ``logging`` into the ambient decision log.

DecisionLogHandler copies log records into the decision log that is active in
the emitting thread or Task. Code that already logs through ``logging``
produces decision-log entries without extra calls:

    import logging
    from decisionlog import DecisionLogHandler, context as dlog

    audit = logging.getLogger("orders.audit")
    audit.addHandler(DecisionLogHandler(level=logging.INFO))

    dlog.start_tag("approval")
    audit.info("manager sign-off present")
    dlog.close()
    # ['approval_info: "manager sign-off present"']

Records emitted while no decision log is active are ignored, so the handler
can stay attached permanently.

Attach it to the loggers whose messages belong in the audit trail, not to the
root logger. At DEBUG the root logger also receives decisionlog's own
diagnostics, such as ``compression.decompress`` reporting a corrupt blob, and
those would become entries in the caller's decision log.
"""

import logging
from typing import Any, Optional

from . import context


class DecisionLogHandler(logging.Handler):
    """A logging.Handler that records messages into the ambient decision log.

    Each record becomes one entry in the current section: the label is the
    lower-cased level name (``info``, ``warning``...) unless a fixed ``label``
    is configured, and the value is the formatted message string.

    Thread-safety:
        ``logging.Handler.handle`` serialises ``emit()`` with the handler lock,
        and the decision log itself is stored per context, so records from
        different threads land in their own logs.

    Attributes:
        _label: Fixed entry label, or ``None`` to use the record's level name.
    """

    def __init__(self, level: int = logging.NOTSET, label: Optional[Any] = None) -> None:
        """Initialise the handler.

        Args:
            level: Minimum record level to record. Defaults to NOTSET.
            label: Entry label for every record. Defaults to the record's
                lower-cased level name.
        """
        super().__init__(level)
        self._label = label

    def emit(self, record: logging.LogRecord) -> None:
        """Append ``record`` to the active decision log, if there is one."""
        try:
            context.log(self._label_for(record), record.getMessage())
        except Exception:
            # A failing bridge must never break the application's own logging.
            self.handleError(record)

    def _label_for(self, record: logging.LogRecord) -> Any:
        if self._label is not None:
            return self._label
        return record.levelname.lower()
