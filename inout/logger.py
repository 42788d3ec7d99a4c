"""Logging infrastructure with owner context."""
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional


class OwnerContextFilter(logging.Filter):
    """Add the current owner id to log records."""

    def __init__(self):
        super().__init__()
        self.owner_id: Optional[str] = None

    def filter(self, record):
        record.owner_id = self.owner_id or "system"
        return True


class InOutLogger:
    """Centralized logging manager."""

    def __init__(self, log_level: str = "INFO", log_file: Optional[str] = None):
        self.owner_filter = OwnerContextFilter()

        self.logger = logging.getLogger("inout")
        self.logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))
        self.logger.handlers.clear()

        formatter = logging.Formatter(
            "%(asctime)s [%(levelname)s] [owner:%(owner_id)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        )

        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(formatter)
        console_handler.addFilter(self.owner_filter)
        self.logger.addHandler(console_handler)

        if log_file:
            path = Path(log_file)
            path.parent.mkdir(parents=True, exist_ok=True)
            # 10MB per file, keep 30
            file_handler = RotatingFileHandler(
                path, maxBytes=10 * 1024 * 1024, backupCount=30, encoding="utf-8"
            )
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(formatter)
            file_handler.addFilter(self.owner_filter)
            self.logger.addHandler(file_handler)

    def set_owner_context(self, owner_id: Optional[str]):
        self.owner_filter.owner_id = owner_id

    def get_logger(self, name: Optional[str] = None) -> logging.Logger:
        return self.logger.getChild(name) if name else self.logger


_logger_instance: Optional[InOutLogger] = None


def configure_logging(log_level: str = "INFO", log_file: Optional[str] = None) -> logging.Logger:
    """(Re)build the global logger, e.g. once settings are loaded."""
    global _logger_instance
    _logger_instance = InOutLogger(log_level, log_file)
    return _logger_instance.get_logger()


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Get or create the global logger, optionally a named child of it."""
    global _logger_instance
    if _logger_instance is None:
        _logger_instance = InOutLogger()
    return _logger_instance.get_logger(name)


def set_owner_context(owner_id: Optional[str]):
    if _logger_instance:
        _logger_instance.set_owner_context(owner_id)
