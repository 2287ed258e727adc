import json
import logging
from typing import Optional, TextIO

# Attributes every LogRecord has; anything else was passed via 'extra'
_RESERVED = (
    "levelname", "msg", "args", "name", "levelno", "pathname", "filename", "module",
    "exc_info", "exc_text", "stack_info", "lineno", "funcName", "created", "msecs",
    "relativeCreated", "thread", "threadName", "processName", "process", "message",
    "asctime", "taskName",
)


class JsonFormatter(logging.Formatter):
    """Format log records as JSON objects."""
    def format(self, record):
        log_record = {
            "level": record.levelname,
            "time": self.formatTime(record, self.datefmt),
            "name": record.name,
            "message": record.getMessage(),
        }
        for key, value in record.__dict__.items():
            if key not in _RESERVED:
                log_record[key] = value
        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_record, default=str)


class ScreenFormatter(logging.Formatter):
    """Human readable one-line records: [time] name.LEVEL: message"""
    def __init__(self):
        super().__init__(fmt="[%(asctime)s] %(name)s.%(levelname)s: %(message)s",
                         datefmt="%Y-%m-%d %H:%M:%S")


def setup_logging(level=logging.INFO, json_format: bool = False, stream: Optional[TextIO] = None):
    """Configure the root logger to write screen or JSON formatted records to stream (stderr by default)."""
    handler = logging.StreamHandler(stream)
    handler.setFormatter(JsonFormatter() if json_format else ScreenFormatter())
    logging.basicConfig(level=level, handlers=[handler], force=True)
