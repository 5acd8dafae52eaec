"""Structured logging configuration for the registry API.

JSON lines for production, a human-readable format for development.

Security Impact:
    - Callers never pass passwords, hashes or tokens to the logger
    - Structured format enables log shipping and analysis
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict


class StructuredFormatter(logging.Formatter):
    """Format log records as single-line JSON documents."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        # Request context set through ``extra=`` by the logging middleware
        for attribute in ("method", "path", "status_code", "client_ip"):
            if hasattr(record, attribute):
                log_data[attribute] = getattr(record, attribute)

        return json.dumps(log_data)


def setup_logging(use_json: bool = False, log_level: str = "INFO") -> None:
    """Configure the root logger.

    Parameters:
        use_json: Use JSON formatting (for production)
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)

    if use_json:
        formatter = StructuredFormatter()
    else:
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

    handler.setFormatter(formatter)
    root_logger.addHandler(handler)

    # Requests are already logged by LoggingMiddleware
    logging.getLogger("uvicorn").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("fastapi").setLevel(logging.WARNING)
    logging.getLogger("passlib").setLevel(logging.ERROR)
