"""
fiaplot - HDF5 file-structure discovery for the FIA plotting service.

The package exposes a single Loguru ``logger`` shared by every submodule.
Importing the package configures console and file sinks, except under pytest
where tests install their own sinks through :func:`configure_test_logging`.
"""

__version__ = "0.1.0"

import os
import sys
import warnings
from pathlib import Path
from typing import Dict, Optional, TextIO, Union

from loguru import logger


log_format_console = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)

log_format_file = (
    "{time:YYYY-MM-DD HH:mm:ss.SSS} | "
    "{level: <8} | "
    "{name}:{function}:{line} - {message}"
)


class LoggingConfigError(Exception):
    """Raised when a logging sink cannot be validated or installed."""


class LoggerState:
    """Tracks which sinks the package installed so they can be torn down."""

    def __init__(self):
        self._initialized = False
        self._test_mode = False
        self._sink_ids = []

    def is_initialized(self) -> bool:
        return self._initialized

    def is_test_mode(self) -> bool:
        return self._test_mode

    def mark_initialized(self, test_mode: bool = False):
        self._initialized = True
        self._test_mode = test_mode

    def add_sink_id(self, sink_id: int):
        self._sink_ids.append(sink_id)

    @property
    def sink_ids(self):
        return list(self._sink_ids)

    def reset(self):
        self._initialized = False
        self._test_mode = False
        self._sink_ids.clear()


_logger_state = LoggerState()


def validate_log_level(level: str) -> str:
    """
    Validate and normalise a Loguru level name.

    Args:
        level: Level name in any case

    Returns:
        Upper-cased level name

    Raises:
        LoggingConfigError: If the level is not a Loguru level
    """
    valid_levels = {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}
    level_upper = str(level).upper()

    if level_upper not in valid_levels:
        raise LoggingConfigError(
            f"Invalid log level '{level}'. Must be one of: {', '.join(sorted(valid_levels))}"
        )

    return level_upper


def _get_default_log_directory() -> Path:
    return Path.home() / ".fiaplot" / "logs"


def _ensure_log_directory(path: Path) -> None:
    path.mkdir(parents=True, exist_ok=True)


def configure_console_logging(
    level: str = "INFO",
    format_template: Optional[str] = None,
    colorize: bool = True,
    destination: TextIO = sys.stderr,
) -> int:
    """
    Install a console sink.

    Returns:
        Sink ID for later removal

    Raises:
        LoggingConfigError: If the sink cannot be installed
    """
    try:
        sink_id = logger.add(
            destination,
            level=validate_log_level(level),
            format=format_template or log_format_console,
            colorize=colorize,
        )
    except LoggingConfigError:
        raise
    except Exception as e:
        raise LoggingConfigError(f"Failed to configure console logging: {e}") from e

    _logger_state.add_sink_id(sink_id)
    return sink_id


def configure_file_logging(
    log_file_path: Union[str, Path],
    level: str = "DEBUG",
    rotation: str = "10 MB",
    retention: str = "7 days",
    compression: str = "zip",
    format_template: Optional[str] = None,
    encoding: str = "utf-8",
) -> int:
    """
    Install a rotating file sink, creating the parent directory if needed.

    Returns:
        Sink ID for later removal

    Raises:
        LoggingConfigError: If the directory or sink cannot be created
    """
    validated_level = validate_log_level(level)
    log_path = Path(log_file_path)
    try:
        _ensure_log_directory(log_path.parent)
        sink_id = logger.add(
            str(log_path),
            rotation=rotation,
            retention=retention,
            compression=compression,
            level=validated_level,
            format=format_template or log_format_file,
            encoding=encoding,
        )
    except Exception as e:
        raise LoggingConfigError(f"Failed to configure file logging at '{log_path}': {e}") from e

    _logger_state.add_sink_id(sink_id)
    return sink_id


def configure_test_logging(
    console_level: str = "DEBUG",
    console_destination: Optional[TextIO] = None,
    file_destination: Optional[Union[str, Path]] = None,
) -> Dict[str, int]:
    """
    Reset the logger and install uncoloured sinks suitable for tests.

    Returns:
        Mapping of sink type to sink ID
    """
    reset_logging()

    sink_ids = {
        "console": configure_console_logging(
            level=console_level,
            destination=console_destination if console_destination is not None else sys.stderr,
            colorize=False,
        )
    }
    if file_destination is not None:
        sink_ids["file"] = configure_file_logging(file_destination)

    _logger_state.mark_initialized(test_mode=True)
    return sink_ids


def reset_logging():
    """Remove every sink and forget the package logging state."""
    try:
        logger.remove()
    except Exception as e:
        raise LoggingConfigError(f"Failed to reset logging configuration: {e}") from e
    _logger_state.reset()


def initialize_production_logging(
    console_level: str = "INFO",
    file_level: str = "DEBUG",
    log_dir: Optional[Union[str, Path]] = None,
) -> Dict[str, int]:
    """
    Install the default console sink and a daily file sink.

    The file sink goes to ``log_dir`` when given, otherwise to
    ``~/.fiaplot/logs``.

    Returns:
        Mapping of sink type to sink ID
    """
    logger.remove()

    sink_ids = {"console": configure_console_logging(level=console_level)}

    directory = Path(log_dir) if log_dir is not None else _get_default_log_directory()
    sink_ids["file"] = configure_file_logging(
        directory / "fiaplot_{time:YYYYMMDD}.log",
        level=file_level,
    )

    _logger_state.mark_initialized(test_mode=False)
    logger.info("--- fiaplot logger initialized ---")
    return sink_ids


def get_logger_state() -> LoggerState:
    return _logger_state


def is_logging_initialized() -> bool:
    return _logger_state.is_initialized()


def _is_pytest_running() -> bool:
    return "pytest" in sys.modules or "PYTEST_CURRENT_TEST" in os.environ


def _auto_initialize_logging():
    if _logger_state.is_initialized() or _is_pytest_running():
        return
    try:
        initialize_production_logging()
    except LoggingConfigError as e:
        warnings.warn(f"Failed to initialize production logging: {e}. Using basic stderr logging.")
        logger.add(sys.stderr, level="INFO")
        _logger_state.mark_initialized(test_mode=False)


_auto_initialize_logging()


__all__ = [
    "__version__",
    "logger",
    "log_format_console",
    "log_format_file",
    "LoggingConfigError",
    "LoggerState",
    "validate_log_level",
    "configure_console_logging",
    "configure_file_logging",
    "configure_test_logging",
    "reset_logging",
    "initialize_production_logging",
    "get_logger_state",
    "is_logging_initialized",
]
