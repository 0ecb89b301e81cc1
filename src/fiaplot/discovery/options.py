"""
DiscoveryOptions - immutable policy for a discovery run.

The batch size turns the sequential and batched fetch strategies into one
code path: ``batch_size=1`` fetches paths one at a time, the default of 15
keeps up to 15 metadata requests in flight.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Tuple

from .pairing import DEFAULT_ERROR_MARKERS

if TYPE_CHECKING:
    from fiaplot.config.settings import PlottingSettings

DEFAULT_BATCH_SIZE = 15


@dataclass(frozen=True)
class DiscoveryOptions:
    """
    Immutable configuration for :class:`DatasetDiscoveryEngine`.

    Attributes:
        batch_size: Number of metadata fetches issued concurrently (default: 15)
        error_markers: Lower-case substrings marking a path as an error series
            (default: ("error", "err"))
        validate_paths: Treat paths that do not start with ``/`` as failed
            fetches instead of requesting them (default: True)

    Examples:
        >>> options = DiscoveryOptions.defaults()
        >>> options = DiscoveryOptions.sequential()
        >>> options = DiscoveryOptions(batch_size=5, error_markers=("error",))
    """

    batch_size: int = DEFAULT_BATCH_SIZE
    error_markers: Tuple[str, ...] = DEFAULT_ERROR_MARKERS
    validate_paths: bool = True

    def __post_init__(self):
        if isinstance(self.batch_size, bool) or not isinstance(self.batch_size, int):
            raise TypeError(
                f"batch_size must be an integer, got {type(self.batch_size).__name__}. "
                f"Example: batch_size=15"
            )
        if self.batch_size < 1:
            raise ValueError(
                f"batch_size must be at least 1, got {self.batch_size}. "
                f"Use batch_size=1 for sequential fetching."
            )

        if isinstance(self.error_markers, str):
            raise TypeError(
                "error_markers must be a sequence of strings, not a single string. "
                "Example: error_markers=('error', 'err')"
            )
        markers = tuple(self.error_markers)
        if not markers:
            raise ValueError("error_markers cannot be empty. Example: error_markers=('error',)")
        for marker in markers:
            if not isinstance(marker, str) or not marker:
                raise ValueError(f"Each error marker must be a non-empty string, got {marker!r}")
        object.__setattr__(self, "error_markers", tuple(marker.lower() for marker in markers))

        if not isinstance(self.validate_paths, bool):
            raise TypeError(
                f"validate_paths must be a boolean, got {type(self.validate_paths).__name__}"
            )

    @classmethod
    def defaults(cls) -> "DiscoveryOptions":
        return cls()

    @classmethod
    def sequential(cls) -> "DiscoveryOptions":
        """Fetch one path at a time."""
        return cls(batch_size=1)

    @classmethod
    def from_settings(cls, settings: "PlottingSettings") -> "DiscoveryOptions":
        return cls(
            batch_size=settings.batch_size,
            error_markers=tuple(settings.error_markers),
            validate_paths=settings.validate_paths,
        )


__all__ = ["DEFAULT_BATCH_SIZE", "DiscoveryOptions"]
