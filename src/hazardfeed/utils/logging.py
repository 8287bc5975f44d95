"""
Logging utilities for HazardFeed.
"""

import logging
import logging.handlers
import json
import sys
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict
import structlog
from structlog.stdlib import LoggerFactory

from ..core.config import LoggingConfig

_RESERVED_ATTRS = {
    'name', 'msg', 'args', 'levelname', 'levelno', 'pathname',
    'filename', 'module', 'lineno', 'funcName', 'created',
    'msecs', 'relativeCreated', 'thread', 'threadName',
    'processName', 'process', 'getMessage', 'exc_info',
    'exc_text', 'stack_info', 'taskName', 'message', 'asctime',
}


class HazardFeedFormatter(logging.Formatter):
    """JSON formatter that keeps ``extra`` fields under ``data``."""

    def format(self, record: logging.LogRecord) -> str:
        extra_data = {
            key: value for key, value in record.__dict__.items() if key not in _RESERVED_ATTRS
        }

        log_entry = {
            'timestamp': datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno,
        }

        if extra_data:
            log_entry['data'] = extra_data

        if record.exc_info:
            log_entry['exception'] = {
                'type': record.exc_info[0].__name__ if record.exc_info[0] else None,
                'message': str(record.exc_info[1]) if record.exc_info[1] else None,
                'traceback': self.formatException(record.exc_info),
            }

        return json.dumps(log_entry, default=str)


class PerformanceLogger:
    """Logger for operation timings."""

    def __init__(self, logger: logging.Logger):
        self.logger = logger
        self._timers: Dict[str, Dict[str, Any]] = {}
        self._counter = 0

    def start_timer(self, operation: str) -> str:
        """Start timing an operation and return its timer id."""
        self._counter += 1
        timer_id = f"{operation}_{self._counter}"
        self._timers[timer_id] = {
            'operation': operation,
            'start': time.perf_counter(),
        }
        return timer_id

    def end_timer(self, timer_id: str, success: bool = True, **extra_data) -> float:
        """End timing an operation, log it and return the duration in ms."""
        timer = self._timers.pop(timer_id, None)
        if timer is None:
            self.logger.warning(f"Timer {timer_id} not found")
            return 0.0

        duration_ms = round((time.perf_counter() - timer['start']) * 1000, 2)
        self.logger.info(
            f"Operation completed: {timer['operation']}",
            extra={
                'operation': timer['operation'],
                'duration_ms': duration_ms,
                'success': success,
                **extra_data
            }
        )
        return duration_ms


def setup_logging(config: LoggingConfig) -> tuple[logging.Logger, PerformanceLogger]:
    """
    Setup logging for HazardFeed.

    Args:
        config: Logging configuration

    Returns:
        Tuple of (main_logger, performance_logger)
    """
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer()
        ],
        context_class=dict,
        logger_factory=LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logger = logging.getLogger('hazardfeed')
    logger.setLevel(getattr(logging, config.level.upper(), logging.INFO))
    logger.handlers.clear()

    if config.format == 'json':
        formatter = HazardFeedFormatter()
    else:
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if config.file:
        file_path = Path(config.file)
        file_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            file_path,
            maxBytes=10 * 1024 * 1024,  # 10MB
            backupCount=5
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    performance_logger = PerformanceLogger(logger)

    logger.info("Logging system initialized", extra={
        'log_level': config.level,
        'log_format': config.format,
        'log_file': str(config.file) if config.file else None
    })

    return logger, performance_logger


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structlog logger bound under the hazardfeed namespace."""
    return structlog.get_logger(f'hazardfeed.{name}')
