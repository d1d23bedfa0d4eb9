"""Python logging setup for loadcompare command-line tools.

Library modules only create loggers with ``logging.getLogger(__name__)``;
this adapter attaches a handler and renders the structured ``extra``
fields (scenario, target, file, ...) that those modules pass along.
"""

import logging
import sys
from typing import TextIO

# Standard LogRecord attributes that should not be treated as extra fields
_STANDARD_LOGRECORD_ATTRS = frozenset(
    {
        "args",
        "asctime",
        "created",
        "exc_info",
        "exc_text",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "message",
        "module",
        "msecs",
        "msg",
        "name",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "taskName",
        "thread",
        "threadName",
    }
)

DEFAULT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class ExtraFieldsFormatter(logging.Formatter):
    """Formatter that appends ``extra`` fields as ``key=value`` pairs.

    Example:
        ```python
        logger.error("Error processing file", extra={"target": "coordix"})
        # ... ERROR loadcompare.runtime.aggregator: Error processing file target=coordix
        ```
    """

    def format(self, record: logging.LogRecord) -> str:
        base = super().format(record)
        extras = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _STANDARD_LOGRECORD_ATTRS
            and isinstance(value, (str, int, float, bool))
        }
        if not extras:
            return base
        pairs = " ".join(f"{key}={value}" for key, value in sorted(extras.items()))
        head, sep, tail = base.partition("\n")
        return f"{head} {pairs}{sep}{tail}"


def configure_logging(
    level: int | str = logging.INFO,
    stream: TextIO | None = None,
) -> logging.Handler:
    """Attach a stream handler to the ``loadcompare`` logger.

    Calling this again replaces the handler installed by the previous call.

    Args:
        level: Log level for the package logger.
        stream: Output stream. Defaults to stderr.

    Returns:
        The installed handler.
    """
    logger = logging.getLogger("loadcompare")
    for handler in list(logger.handlers):
        if getattr(handler, "_loadcompare_handler", False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(ExtraFieldsFormatter(DEFAULT_FORMAT))
    handler._loadcompare_handler = True  # type: ignore[attr-defined]
    logger.addHandler(handler)
    logger.setLevel(level)
    return handler
