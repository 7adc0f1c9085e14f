from __future__ import annotations

import logging
import sys
from typing import Optional, TextIO

from offer_runtime.settings import get_settings

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s [%(correlation_id)s] - %(message)s"


class CorrelationIdFilter(logging.Filter):
    """Fill in correlation_id for records logged without one."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "correlation_id"):
            record.correlation_id = "-"
        return True


def configure_logging(level: Optional[str] = None, stream: Optional[TextIO] = None) -> None:
    """
    Configure root logging once per process.

    The CLI passes stderr so stdout carries only the calculation result.
    """
    settings = get_settings()
    handler = logging.StreamHandler(stream or sys.stdout)
    handler.addFilter(CorrelationIdFilter())
    logging.basicConfig(level=level or settings.log_level, format=LOG_FORMAT, handlers=[handler])
