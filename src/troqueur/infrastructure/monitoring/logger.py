"""
Structured JSON logging configuration.

Records emitted while an instruction executes carry its id, and escrow
log calls may attach structured fields through `extra`:

    logger.warning("rejected", extra={"escrow": str(address), "error_code": code})
"""

import json
import logging
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Iterator, Optional
from uuid import uuid4

# Context variable for instruction tracking
instruction_id_ctx: ContextVar[Optional[str]] = ContextVar(
    "instruction_id", default=None
)

# Record attributes copied into JSON output when present
STRUCTURED_FIELDS = ("escrow", "instruction", "error_code")


class JSONFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.

    Outputs one JSON object per record with a stable schema.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        instruction_id = instruction_id_ctx.get()
        if instruction_id:
            log_data["instruction_id"] = instruction_id

        for name in STRUCTURED_FIELDS:
            value = getattr(record, name, None)
            if value is not None:
                log_data[name] = value

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        log_data["location"] = f"{record.module}:{record.funcName}:{record.lineno}"
        return json.dumps(log_data)


def setup_logging(level: str = "INFO", json_logs: bool = True) -> None:
    """
    Configure application logging.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR)
        json_logs: Use JSON format (True) or plain text (False)
    """
    log_level = getattr(logging, level.upper())
    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)
    if json_logs:
        handler.setFormatter(JSONFormatter(datefmt="%Y-%m-%dT%H:%M:%S"))
    else:
        handler.setFormatter(
            logging.Formatter(
                "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
    root_logger.addHandler(handler)

    logging.getLogger("asyncio").setLevel(logging.WARNING)


@contextmanager
def instruction_scope(instruction_id: Optional[str] = None) -> Iterator[str]:
    """
    Tag every record logged inside the block with an instruction id.

    Args:
        instruction_id: Id to use (generates a UUID if None)

    Yields:
        The instruction id in effect
    """
    value = instruction_id or str(uuid4())
    token = instruction_id_ctx.set(value)
    try:
        yield value
    finally:
        instruction_id_ctx.reset(token)


def get_logger(name: str) -> logging.Logger:
    """Get logger with given name (usually __name__)."""
    return logging.getLogger(name)
