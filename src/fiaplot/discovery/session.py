"""Selection-aware discovery runs."""

from __future__ import annotations

from typing import Optional

from fiaplot import logger
from fiaplot.exceptions import DiscoveryCancelled

from .batching import CancellationToken
from .engine import DatasetDiscoveryEngine
from .models import FileStructure


class DiscoverySession:
    """
    Keep discovery in step with the currently selected file.

    Selecting a new file cancels the run for the previous selection, so its
    outstanding requests are abandoned and its result can never replace the
    newer one.
    """

    def __init__(self, engine: DatasetDiscoveryEngine) -> None:
        self.engine = engine
        self._token: Optional[CancellationToken] = None
        self._selection: Optional[str] = None
        self._current: Optional[FileStructure] = None

    @property
    def current(self) -> Optional[FileStructure]:
        """Structure of the most recent selection that finished discovering."""
        return self._current

    @property
    def selection(self) -> Optional[str]:
        return self._selection

    @property
    def running(self) -> bool:
        return self._token is not None and not self._token.cancelled

    def cancel(self, reason: str = "selection cleared") -> None:
        if self._token is not None:
            self._token.cancel(reason)
        self._token = None
        self._selection = None

    async def select(self, filename: str, full_path: str) -> Optional[FileStructure]:
        """
        Discover ``full_path`` as the new selection.

        Returns:
            The structure, or None if the run was superseded or cancelled
        """
        if self._token is not None:
            self._token.cancel(f"superseded by {full_path}")

        token = CancellationToken()
        self._token = token
        self._selection = full_path
        self._current = None

        try:
            structure = await self.engine.discover(filename, full_path, cancel_token=token)
        except DiscoveryCancelled as exc:
            logger.debug(f"Discovery of {full_path} abandoned: {exc.context.get('reason')}")
            return None

        if self._token is not token:
            logger.debug(f"Discarding stale discovery result for {full_path}")
            return None

        self._token = None
        self._current = structure
        return structure


__all__ = ["DiscoverySession"]
