"""Collaborator interfaces consumed by the discovery engine."""
from __future__ import annotations

from typing import Dict, List, Mapping, Optional, Protocol, Union, runtime_checkable

from fiaplot import logger
from fiaplot.exceptions import MetadataFetchError, PathEnumerationError

from .models import EntityMetadata


@runtime_checkable
class MetadataFetchClient(Protocol):
    """Protocol for the metadata service, injected into the discovery engine."""

    async def list_paths(self, file: str) -> List[str]:
        """Return every searchable path in ``file``; raise PathEnumerationError on failure."""

    async def get_entity_metadata(self, file: str, path: str) -> EntityMetadata:
        """Return metadata for ``path`` in ``file``; raise MetadataFetchError on failure."""


class StaticMetadataClient:
    """
    In-memory metadata client serving a fixed set of entities.

    ``entities`` maps each path to its metadata, or to an exception that is
    raised when that path is fetched. Paths are enumerated in mapping order.
    """

    def __init__(
        self,
        entities: Mapping[str, Union[EntityMetadata, BaseException]],
        *,
        files: Optional[List[str]] = None,
        enumeration_error: Optional[BaseException] = None,
    ) -> None:
        self._entities: Dict[str, Union[EntityMetadata, BaseException]] = dict(entities)
        self._files = files
        self._enumeration_error = enumeration_error
        self.calls: List[str] = []

    def _check_file(self, file: str) -> None:
        if self._files is not None and file not in self._files:
            raise PathEnumerationError(f"Unknown file: {file}", context={"file": file})

    async def list_paths(self, file: str) -> List[str]:
        if self._enumeration_error is not None:
            raise self._enumeration_error
        self._check_file(file)
        logger.debug(f"Static client listing {len(self._entities)} paths for {file}")
        return list(self._entities)

    async def get_entity_metadata(self, file: str, path: str) -> EntityMetadata:
        self.calls.append(path)
        try:
            entry = self._entities[path]
        except KeyError:
            raise MetadataFetchError(
                f"No entity at {path}", context={"file": file, "path": path}
            ) from None
        if isinstance(entry, BaseException):
            raise entry
        return entry


__all__ = ["MetadataFetchClient", "StaticMetadataClient"]
