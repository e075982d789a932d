"""JSON log records for the classifier and a `data=` aware adapter."""

import json
import logging
import traceback
from datetime import datetime, timezone
from typing import Any

PACKAGE = "instrument_classifier"


class JSONFormatter(logging.Formatter):
    """
    One JSON object per record.

    Keys: timestamp (optional), level, component, logger, message, and
    when present data and exception.
    """

    def __init__(self, include_timestamp: bool = True):
        super().__init__()
        self.include_timestamp = include_timestamp

    @staticmethod
    def _extract_component(logger_name: str) -> str:
        """
        Logger name relative to the package.

        Examples:
            instrument_classifier.core.spectrogram -> core.spectrogram
            instrument_classifier.classification.decision -> classification.decision
            __main__ -> main
        """
        if logger_name == "__main__":
            return "main"
        prefix = PACKAGE + "."
        if logger_name.startswith(prefix):
            return logger_name[len(prefix):]
        return logger_name

    @staticmethod
    def _exception(exc_info) -> dict[str, Any]:
        exc_type, exc_value, _ = exc_info
        return {
            "type": exc_type.__name__ if exc_type else None,
            "message": str(exc_value) if exc_value else None,
            "traceback": traceback.format_exception(*exc_info),
        }

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {}
        if self.include_timestamp:
            entry["timestamp"] = datetime.fromtimestamp(record.created, timezone.utc).isoformat()

        entry.update(
            level=record.levelname,
            component=self._extract_component(record.name),
            logger=record.name,
            message=(record.getMessage() or "").strip(),
        )

        data = getattr(record, "structured_data", None)
        if data:
            entry["data"] = data
        if record.exc_info:
            entry["exception"] = self._exception(record.exc_info)

        return json.dumps(entry, ensure_ascii=False, default=str)


class StructuredLogAdapter(logging.LoggerAdapter):
    """
    Adapter that accepts a `data=` mapping on every logging call.

    Usage:
        logger = StructuredLogAdapter(logging.getLogger(__name__))
        logger.info("Extracted features", data={"frames": 341, "mels": 128})
    """

    def __init__(self, logger: logging.Logger, extra: dict | None = None):
        super().__init__(logger, extra or {})

    def process(self, msg: str, kwargs: dict) -> tuple[str, dict]:
        """Move a non-empty `data` kwarg onto the record as structured_data."""
        data = kwargs.pop("data", None)
        extra = dict(kwargs.get("extra") or {})
        if data:
            extra["structured_data"] = data
        kwargs["extra"] = extra
        return msg, kwargs
