"""
Logging configuration for the PixelCheck classifier

Modules log through ``logging.getLogger(__name__)``; the engine emits
structured events through ``get_logger``. ``setup_logging`` wires both to the
handlers described by a LoggingConfig section.
"""
import logging
import logging.handlers
import sys
from pathlib import Path
from typing import List, Optional

import structlog

from ..config.settings import LoggingConfig, settings

# Marks handlers installed here so a later call replaces only those
_OWNED_MARKER = "_pixelcheck_owned"


def _build_handlers(config: LoggingConfig, level: int) -> List[logging.Handler]:
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]

    if config.file_path:
        Path(config.file_path).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.handlers.RotatingFileHandler(
            config.file_path,
            maxBytes=config.max_file_size,
            backupCount=config.backup_count,
        ))

    formatter = logging.Formatter(config.format, datefmt='%Y-%m-%d %H:%M:%S')
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        setattr(handler, _OWNED_MARKER, True)
    return handlers


def setup_logging(log_level: Optional[str] = None, config: Optional[LoggingConfig] = None):
    """
    Setup logging configuration for the application

    Safe to call repeatedly: handlers from an earlier call are closed and
    replaced, handlers installed by the host application are left alone.

    Args:
        log_level: Override log level from config
        config: Logging section to use instead of the global settings
    """
    config = config or settings.logging
    level = getattr(logging, (log_level or config.level).upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    for handler in root_logger.handlers[:]:
        if getattr(handler, _OWNED_MARKER, False):
            root_logger.removeHandler(handler)
            handler.close()

    for handler in _build_handlers(config, level):
        root_logger.addHandler(handler)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="ISO"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer()
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # Pillow logs every plugin import at DEBUG
    logging.getLogger("PIL").setLevel(logging.WARNING)

    logging.getLogger(__name__).info(f"Logging configured at {logging.getLevelName(level)}")


def get_logger(name: str):
    """Structured logger bound to the stdlib logger ``name``"""
    return structlog.get_logger(name)
