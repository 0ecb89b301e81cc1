"""
fiaplot exception hierarchy.

Every error raised by the package derives from :class:`FiaPlotError`, which
carries an ``error_code`` for programmatic handling and a ``context`` mapping
for debugging:

- FiaPlotError: base class
- ConfigError: settings and YAML override failures
- DiscoveryError: file-structure discovery failures
    - PathEnumerationError: the path listing failed (fatal for a run)
    - MetadataFetchError: one path's metadata could not be fetched (recovered)
    - DiscoveryCancelled: the run was abandoned through its cancellation token
- DataFetchError: data, error-series or file-path lookups failed
- AuthError: a token refresh was rejected or timed out

Usage:
    >>> try:
    ...     structure = await engine.discover("run.nxs", "/archive/run.nxs")
    ... except PathEnumerationError as e:
    ...     logger.error(f"could not discover file structure: {e}")
    ...     if e.error_code == "DISCOVERY_002":
    ...         ...
"""

import sys
from typing import Any, Dict, Optional


class FiaPlotError(Exception):
    """
    Base exception for all fiaplot errors.

    Attributes:
        error_code (str): Identifier for programmatic error handling
        context (Dict[str, Any]): Extra information for debugging

    Error Codes:
        FIAPLOT_001: Generic fiaplot error
    """

    def __init__(
        self,
        message: str,
        error_code: str = "FIAPLOT_001",
        context: Optional[Dict[str, Any]] = None
    ) -> None:
        super().__init__(message)
        self.error_code = error_code
        self.context = dict(context) if context else {}

        if hasattr(sys, '_getframe'):
            frame = sys._getframe(1)
            # skip subclass constructors chaining up to this one
            while frame is not None and frame.f_code.co_name == "__init__" and frame.f_locals.get("self") is self:
                frame = frame.f_back
            if frame:
                self.context.setdefault('source_function', frame.f_code.co_name)

    def with_context(self, context: Dict[str, Any]) -> 'FiaPlotError':
        """
        Add context to the exception and return it for chaining.

        Example:
            >>> raise DataFetchError("Request failed").with_context({
            ...     "file": "/archive/run.nxs",
            ...     "path": "/entry/data/data",
            ... })
        """
        self.context.update(context)
        return self

    @property
    def message(self) -> str:
        return super().__str__()

    def __str__(self) -> str:
        message = super().__str__()
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{message} [Error Code: {self.error_code}, Context: {context_str}]"
        return f"{message} [Error Code: {self.error_code}]"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={super().__str__()!r}, "
            f"error_code={self.error_code!r}, "
            f"context={self.context!r})"
        )


class ConfigError(FiaPlotError):
    """
    Settings loading and validation errors.

    Error Codes:
        CONFIG_001: Settings override file not found
        CONFIG_002: YAML parsing error
        CONFIG_003: Pydantic validation failure
    """

    def __init__(
        self,
        message: str,
        error_code: str = "CONFIG_001",
        context: Optional[Dict[str, Any]] = None
    ) -> None:
        super().__init__(message, error_code, context)
        if context and 'config_path' in context:
            self.context['config_path'] = str(context['config_path'])


class DiscoveryError(FiaPlotError):
    """
    File-structure discovery errors.

    Error Codes:
        DISCOVERY_001: Generic discovery failure
        DISCOVERY_002: Path enumeration failed
        DISCOVERY_003: Entity metadata fetch failed
        DISCOVERY_004: Discovery run cancelled
    """

    def __init__(
        self,
        message: str,
        error_code: str = "DISCOVERY_001",
        context: Optional[Dict[str, Any]] = None
    ) -> None:
        super().__init__(message, error_code, context)
        if context:
            for key in ('file', 'path', 'filename'):
                if key in context:
                    self.context[key] = str(context[key])


class PathEnumerationError(DiscoveryError):
    """Listing the searchable paths of a file failed; no structure can be built."""

    def __init__(
        self,
        message: str,
        error_code: str = "DISCOVERY_002",
        context: Optional[Dict[str, Any]] = None
    ) -> None:
        super().__init__(message, error_code, context)


class MetadataFetchError(DiscoveryError):
    """Metadata for a single path could not be fetched or understood."""

    def __init__(
        self,
        message: str,
        error_code: str = "DISCOVERY_003",
        context: Optional[Dict[str, Any]] = None
    ) -> None:
        super().__init__(message, error_code, context)


class DiscoveryCancelled(DiscoveryError):
    """A discovery run was abandoned before it produced a result."""

    def __init__(
        self,
        message: str = "Discovery run cancelled",
        error_code: str = "DISCOVERY_004",
        context: Optional[Dict[str, Any]] = None
    ) -> None:
        super().__init__(message, error_code, context)


class DataFetchError(FiaPlotError):
    """
    Dataset value, error-series and file lookup errors.

    Error Codes:
        DATA_001: Request to the plotting service failed
        DATA_002: Response payload could not be interpreted
    """

    def __init__(
        self,
        message: str,
        error_code: str = "DATA_001",
        context: Optional[Dict[str, Any]] = None
    ) -> None:
        super().__init__(message, error_code, context)


class AuthError(FiaPlotError):
    """
    Authentication session errors.

    Error Codes:
        AUTH_001: Token refresh rejected
        AUTH_002: Token refresh timed out
    """

    def __init__(
        self,
        message: str,
        error_code: str = "AUTH_001",
        context: Optional[Dict[str, Any]] = None
    ) -> None:
        super().__init__(message, error_code, context)


def log_and_raise(
    exception: FiaPlotError,
    logger: Optional[Any] = None,
    level: str = "error"
) -> None:
    """
    Log an exception with its context, then raise it.

    Example:
        >>> from fiaplot import logger
        >>> log_and_raise(ConfigError("Invalid batch size", "CONFIG_003"), logger)
    """
    if logger is not None:
        log_method = getattr(logger, level, logger.error)
        log_method(f"{exception.__class__.__name__}: {exception}")

    raise exception


__all__ = [
    'FiaPlotError',
    'ConfigError',
    'DiscoveryError',
    'PathEnumerationError',
    'MetadataFetchError',
    'DiscoveryCancelled',
    'DataFetchError',
    'AuthError',
    'log_and_raise',
]
