"""
Logging configuration for structured JSON logging.
"""
import json
import logging
import sys


DEFAULT_SERVICE = "weather-widget"

# Extra fields callers may attach through ``extra=``
STRUCTURED_FIELDS = ("request_id", "task", "duration_ms", "status")


class StructuredJSONFormatter(logging.Formatter):
    """One JSON object per record, tagged with the emitting service."""

    def __init__(self, service: str = DEFAULT_SERVICE, datefmt=None):
        super().__init__(datefmt=datefmt)
        self.service = service

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": self.formatTime(record, self.datefmt),
            "service": self.service,
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for field in STRUCTURED_FIELDS:
            if hasattr(record, field):
                log_entry[field] = getattr(record, field)

        # Add exception info if present
        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, ensure_ascii=False)


def setup_logging(
    log_level: str = "INFO", stream=None, service: str = DEFAULT_SERVICE
) -> None:
    """Route all records to ``stream`` (stderr) as JSON lines."""
    formatter = StructuredJSONFormatter(service=service, datefmt="%Y-%m-%dT%H:%M:%S")

    # Setup root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    # Remove existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(formatter)
    root_logger.addHandler(handler)

    # Reduce noise from third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def log_request(
    logger: logging.Logger,
    request_id: str,
    task: str,
    duration_ms: int,
    status: str,
    message: str = "",
    level: int = logging.INFO,
) -> None:
    """Log a request with structured fields."""
    logger.log(
        level,
        message,
        extra={
            "request_id": request_id,
            "task": task,
            "duration_ms": duration_ms,
            "status": status,
        },
    )

