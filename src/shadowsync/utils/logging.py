"""
Logging configuration for shadowsync.

This module provides centralized logging setup with:
- Structured logging through structlog
- Rich console output
- Optional rotating JSON log files
"""

import logging
import logging.handlers
import sys
import os
import json
from pathlib import Path
from typing import TYPE_CHECKING, Optional, Dict, Any
from datetime import datetime, timezone
import structlog
from rich.logging import RichHandler
from rich.console import Console

if TYPE_CHECKING:
    from .config import ShadowSyncConfig


console = Console(file=sys.stderr)


class JSONFormatter(logging.Formatter):
    """Custom JSON formatter for structured logging."""

    _reserved = frozenset((
        'name', 'msg', 'args', 'created', 'filename', 'funcName', 'levelname',
        'levelno', 'lineno', 'module', 'msecs', 'message', 'pathname', 'process',
        'processName', 'relativeCreated', 'thread', 'threadName', 'exc_info',
        'exc_text', 'stack_info', 'taskName',
    ))

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_obj = {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno,
        }

        # Add extra fields
        for key, value in record.__dict__.items():
            if key in self._reserved:
                continue
            try:
                json.dumps(value)
                log_obj[key] = value
            except (TypeError, ValueError):
                log_obj[key] = str(value)

        if record.exc_info:
            log_obj['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_obj)


def setup_logging(
    app_name: str = "shadowsync",
    log_level: str = "INFO",
    log_dir: Optional[Path] = None,
    enable_json: bool = False,
    enable_console: bool = True,
) -> Dict[str, Any]:
    """
    Set up logging for an application embedding shadowsync.

    Args:
        app_name: Application name for log identification
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_dir: Directory for log files; no file output when omitted
        enable_json: Render structlog events as JSON instead of console text
        enable_console: Attach a rich console handler

    Returns:
        Dictionary with logger instances and configuration
    """
    renderer = structlog.processors.JSONRenderer() if enable_json else structlog.dev.ConsoleRenderer()

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
            renderer
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, log_level.upper()))

    # Remove existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    if enable_console:
        console_handler = RichHandler(
            console=console,
            show_time=True,
            show_path=False,
            rich_tracebacks=True,
            tracebacks_suppress=["asyncio"],
        )
        console_handler.setFormatter(logging.Formatter('%(message)s'))
        root_logger.addHandler(console_handler)
    else:
        root_logger.addHandler(logging.NullHandler())

    if log_dir is not None:
        log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_dir / f"{app_name}.log",
            maxBytes=10 * 1024 * 1024,  # 10MB
            backupCount=5,
            encoding='utf-8'
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(JSONFormatter())
        root_logger.addHandler(file_handler)

    loggers = {
        'main': structlog.get_logger(app_name),
        'patch': structlog.get_logger(f"{app_name}.patch"),
        'transport': structlog.get_logger(f"{app_name}.transport"),
        'mediator': structlog.get_logger(f"{app_name}.mediator"),
    }

    loggers['main'].info(
        "logging_initialized",
        app_name=app_name,
        log_level=log_level,
        log_dir=str(log_dir) if log_dir else None,
        enable_json=enable_json,
        pid=os.getpid(),
    )

    return {
        'loggers': loggers,
        'log_dir': log_dir,
        'console': console,
        'config': {
            'app_name': app_name,
            'log_level': log_level,
            'enable_json': enable_json,
        }
    }


def setup_logging_from_config(config: "ShadowSyncConfig", enable_console: bool = True) -> Dict[str, Any]:
    """Set up logging from the ``logging`` section of a loaded configuration."""
    return setup_logging(
        app_name=config.app_name,
        log_level="DEBUG" if config.debug else config.logging.level,
        log_dir=config.logging.directory,
        enable_json=config.logging.json_output,
        enable_console=enable_console,
    )


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a logger instance by name."""
    return structlog.get_logger(name)


__all__ = [
    'setup_logging',
    'setup_logging_from_config',
    'get_logger',
    'JSONFormatter',
]
