"""
Logging utilities for the analytics service
"""
import logging
import sys
from typing import Any, Dict

# Configure basic logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(sys.stdout)
    ]
)


def _render(message: str, context: Dict[str, Any]) -> str:
    extra_info = " ".join([f"{k}={v}" for k, v in context.items()])
    return f"{message} {extra_info}".strip()


class EnhancedLogger:
    """Enhanced logger that handles keyword arguments"""

    def __init__(self, logger: logging.Logger):
        self._logger = logger

    def info(self, message: str, **kwargs):
        self._logger.info(_render(message, kwargs))

    def error(self, message: str, exc_info: bool = False, **kwargs):
        self._logger.error(_render(message, kwargs), exc_info=exc_info)

    def warning(self, message: str, **kwargs):
        self._logger.warning(_render(message, kwargs))

    def debug(self, message: str, **kwargs):
        if self._logger.isEnabledFor(logging.DEBUG):
            self._logger.debug(_render(message, kwargs))

    def exception(self, message: str, **kwargs):
        self._logger.exception(_render(message, kwargs))


def get_logger(name: str) -> EnhancedLogger:
    """Get a logger instance"""
    base_logger = logging.getLogger(name)
    return EnhancedLogger(base_logger)


def set_log_level(level: str) -> None:
    """Apply the configured level to the root logger"""
    logging.getLogger().setLevel(level.upper())


def log_analysis_run(component: str, duration_ms: float, **kwargs):
    """Log a completed analyzer computation"""
    logger = get_logger("analytics")
    logger.info(f"Computed {component} in {duration_ms:.1f}ms", **kwargs)
