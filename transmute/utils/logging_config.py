"""
Centralized logging configuration for transmute.

Logging is configured once, on the first ``get_logger`` call, from:

- ``LOG_LEVEL``: level name (default INFO, WARNING while running under pytest)
- ``LOG_FORMAT``: ``standard``, ``dev`` or ``json``
- ``LOG_TO_FILE`` / ``LOG_FILE``: also write to a rotating log file
"""

import logging
import logging.handlers
import os
import sys
from pathlib import Path
from typing import Dict, Optional


LEVEL_NAMES = {
    'DEBUG': logging.DEBUG,
    'INFO': logging.INFO,
    'WARNING': logging.WARNING,
    'WARN': logging.WARNING,
    'ERROR': logging.ERROR,
    'CRITICAL': logging.CRITICAL,
    'FATAL': logging.CRITICAL,
}

LOG_FILE_MAX_BYTES = 10 * 1024 * 1024
LOG_FILE_BACKUPS = 5


def level_from_string(level_str: str) -> int:
    """Convert a level name to its logging constant, defaulting to INFO."""
    return LEVEL_NAMES.get(level_str.upper(), logging.INFO)


class LogConfig:
    """Environment-driven logging settings."""

    DEFAULT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    DEV_FORMAT = '%(asctime)s [%(levelname)8s] %(name)s:%(lineno)d - %(message)s'
    JSON_FORMAT = '{"timestamp": "%(asctime)s", "level": "%(levelname)s", "logger": "%(name)s", "message": "%(message)s"}'

    FORMATS = {
        'standard': DEFAULT_FORMAT,
        'dev': DEV_FORMAT,
        'development': DEV_FORMAT,
        'json': JSON_FORMAT,
    }

    @staticmethod
    def get_log_level() -> int:
        level_str = os.getenv('LOG_LEVEL')
        if level_str:
            return level_from_string(level_str)
        if 'PYTEST_CURRENT_TEST' in os.environ or 'pytest' in sys.modules:
            return logging.WARNING
        return logging.INFO

    @classmethod
    def get_log_format(cls) -> str:
        return cls.FORMATS.get(os.getenv('LOG_FORMAT', 'standard').lower(), cls.DEFAULT_FORMAT)

    @staticmethod
    def should_log_to_file() -> bool:
        return os.getenv('LOG_TO_FILE', 'false').lower() in ('true', '1', 'yes')

    @staticmethod
    def get_log_file_path() -> Optional[Path]:
        log_file = os.getenv('LOG_FILE')
        return Path(log_file) if log_file else None


class LoggerFactory:
    """Configures the root logger once and hands out named loggers."""

    _loggers: Dict[str, logging.Logger] = {}
    _configured = False

    @classmethod
    def configure_logging(cls) -> None:
        if cls._configured:
            return

        level = LogConfig.get_log_level()
        formatter = logging.Formatter(LogConfig.get_log_format())

        handlers = [logging.StreamHandler(sys.stdout)]
        log_file = LogConfig.get_log_file_path()
        if LogConfig.should_log_to_file() and log_file:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            handlers.append(logging.handlers.RotatingFileHandler(
                log_file, maxBytes=LOG_FILE_MAX_BYTES, backupCount=LOG_FILE_BACKUPS
            ))

        root_logger = logging.getLogger()
        root_logger.setLevel(level)
        for handler in root_logger.handlers[:]:
            root_logger.removeHandler(handler)
        for handler in handlers:
            handler.setLevel(level)
            handler.setFormatter(formatter)
            root_logger.addHandler(handler)

        cls._configured = True

    @classmethod
    def get_logger(cls, name: str) -> logging.Logger:
        if name not in cls._loggers:
            cls.configure_logging()
            cls._loggers[name] = logging.getLogger(name)
        return cls._loggers[name]


def get_logger(name: str = "transmute") -> logging.Logger:
    """Convenience function to get a logger."""
    return LoggerFactory.get_logger(name)
