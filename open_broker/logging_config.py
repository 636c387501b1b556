"""Logging configuration and setup."""

import logging
import logging.handlers
import json
from typing import Optional
from datetime import datetime, timezone

from open_broker.config import config
from open_broker.models.context import Context

EXTRA_FIELDS = ('operation', 'instance_id', 'binding_id', 'request_identity', 'platform', 'status')


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_entry = {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno
        }

        # Add extra fields if present
        for name in EXTRA_FIELDS:
            if hasattr(record, name):
                log_entry[name] = getattr(record, name)

        if record.exc_info:
            log_entry['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)


class AuditLogger:
    """Specialized logger for the broker operation trail."""

    def __init__(self):
        self.logger = logging.getLogger('open_broker.audit')

    def log_operation(self, operation: str, status: int, instance_id: Optional[str] = None,
                      binding_id: Optional[str] = None, request_identity: Optional[str] = None,
                      originating_identity: Optional[Context] = None):
        """Log the outcome of one broker operation."""
        extra = {
            'operation': operation,
            'status': status,
            'instance_id': instance_id,
            'binding_id': binding_id,
            'request_identity': request_identity,
            'platform': originating_identity.platform if originating_identity else None
        }

        message = f"Broker operation: {operation} -> {status}"
        if instance_id:
            message += f" for instance {instance_id}"
        if binding_id:
            message += f" binding {binding_id}"

        self.logger.info(message, extra=extra)


def setup_logging():
    """Set up logging configuration."""
    # Root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, config.logging.level.upper()))

    # Remove existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    # Console handler
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(JSONFormatter())
    root_logger.addHandler(console_handler)

    # File handler if configured
    if config.logging.file_path:
        file_handler = logging.handlers.RotatingFileHandler(
            config.logging.file_path,
            maxBytes=config.logging.max_file_size,
            backupCount=config.logging.backup_count
        )
        file_handler.setFormatter(JSONFormatter())
        root_logger.addHandler(file_handler)

    # Set specific logger levels
    logging.getLogger('urllib3').setLevel(logging.WARNING)
    logging.getLogger('werkzeug').setLevel(logging.WARNING)


# Initialize audit logger
audit_logger = AuditLogger()
