"""
Structured logging utility for the application
"""
import logging
import json
import traceback
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from core.config import settings


class StructuredLogger:
    """
    Structured logger that outputs one JSON object per log line
    """

    def __init__(self, name: str = "haggle", level: str = "INFO", log_format: str = "json"):
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, level.upper(), logging.INFO))
        self.log_format = log_format

        # Create console handler if not exists
        if not self.logger.handlers:
            handler = logging.StreamHandler()
            if log_format == "simple":
                formatter = logging.Formatter(
                    '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
                )
            else:
                formatter = logging.Formatter('%(message)s')
            handler.setFormatter(formatter)
            self.logger.addHandler(handler)

    def _create_log_entry(
        self,
        level: str,
        message: str,
        user_id: Optional[str] = None,
        endpoint: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
        exception: Optional[BaseException] = None
    ) -> Dict[str, Any]:
        """
        Create a structured log entry
        """
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": level.upper(),
            "message": message,
            "service": "haggle-api",
        }

        if user_id:
            log_entry["user_id"] = str(user_id)

        if endpoint:
            log_entry["endpoint"] = endpoint

        if metadata:
            log_entry["metadata"] = metadata

        if exception:
            log_entry["exception"] = {
                "type": type(exception).__name__,
                "message": str(exception),
                "traceback": "".join(
                    traceback.format_exception(type(exception), exception, exception.__traceback__)
                ),
            }

        return log_entry

    def _emit(self, level: int, entry: Dict[str, Any]):
        self.logger.log(level, json.dumps(entry, default=str))

    def debug(self, message: str, metadata: Optional[Dict[str, Any]] = None, **kwargs):
        self._emit(logging.DEBUG, self._create_log_entry("debug", message, metadata=metadata, **kwargs))

    def info(
        self,
        message: str,
        user_id: Optional[str] = None,
        endpoint: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None
    ):
        """Log info message"""
        self._emit(logging.INFO, self._create_log_entry(
            "info", message, user_id, endpoint, metadata
        ))

    def warning(
        self,
        message: str,
        user_id: Optional[str] = None,
        endpoint: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
        exception: Optional[BaseException] = None
    ):
        """Log warning message"""
        self._emit(logging.WARNING, self._create_log_entry(
            "warning", message, user_id, endpoint, metadata, exception
        ))

    def error(
        self,
        message: str,
        user_id: Optional[str] = None,
        endpoint: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
        exception: Optional[BaseException] = None
    ):
        """Log error message"""
        self._emit(logging.ERROR, self._create_log_entry(
            "error", message, user_id, endpoint, metadata, exception
        ))


# Create global logger instance
structured_logger = StructuredLogger(
    level=settings.LOG_LEVEL,
    log_format=settings.LOG_FORMAT,
)
