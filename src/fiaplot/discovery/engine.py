"""Discovery orchestration: enumerate, fetch in batches, classify, pair."""

from __future__ import annotations

import math
from typing import List, Optional

from fiaplot import logger
from fiaplot.exceptions import MetadataFetchError, PathEnumerationError

from .batching import BatchOutcome, CancellationToken, process_batches
from .classification import classify_entity
from .models import DiscoveredDataset, EntityMetadata, FileStructure
from .options import DiscoveryOptions
from .pairing import pair_error_datasets, partition_candidates, select_primary
from .providers import MetadataFetchClient
from .stats import StatisticsCollector


class DatasetDiscoveryEngine:
    """
    Discover the plottable datasets of one HDF5 file.

    The engine only talks to its injected :class:`MetadataFetchClient`. Path
    enumeration failing is fatal for a run; every other per-path failure is
    logged, counted and skipped, so a run may return fewer datasets than the
    file holds.
    """

    def __init__(
        self,
        client: MetadataFetchClient,
        options: Optional[DiscoveryOptions] = None,
    ) -> None:
        self.client = client
        self.options = options or DiscoveryOptions.defaults()
        logger.debug(
            f"Initialized DatasetDiscoveryEngine with client={type(client).__name__}, "
            f"batch_size={self.options.batch_size}"
        )

    async def _enumerate(self, full_path: str, filename: str) -> List[str]:
        try:
            paths = await self.client.list_paths(full_path)
        except PathEnumerationError:
            logger.error(f"Could not discover file structure for {filename}: path enumeration failed")
            raise
        except Exception as exc:
            logger.error(f"Could not discover file structure for {filename}: {exc}")
            raise PathEnumerationError(
                f"Failed to enumerate paths for {full_path}",
                context={"file": full_path, "filename": filename, "original_error": repr(exc)},
            ) from exc
        return list(paths)

    async def _fetch(self, full_path: str, path: str) -> EntityMetadata:
        if self.options.validate_paths and not path.startswith("/"):
            raise MetadataFetchError(f"Invalid path: {path}", context={"file": full_path, "path": path})
        return await self.client.get_entity_metadata(full_path, path)

    async def discover(
        self,
        filename: str,
        full_path: str,
        cancel_token: Optional[CancellationToken] = None,
    ) -> FileStructure:
        """
        Build the :class:`FileStructure` of ``full_path``.

        Args:
            filename: Display name of the file
            full_path: Location of the file as understood by the metadata service
            cancel_token: Optional token abandoning the run when cancelled

        Returns:
            Retained numeric datasets with pairing and primary selection applied

        Raises:
            PathEnumerationError: If the path listing fails
            DiscoveryCancelled: If ``cancel_token`` is cancelled before completion
        """
        logger.debug(f"Starting discovery for {filename} ({full_path})")
        collector = StatisticsCollector()

        if cancel_token is not None:
            cancel_token.raise_if_cancelled()

        paths = await self._enumerate(full_path, filename)
        collector.paths_enumerated = len(paths)
        collector.batches = math.ceil(len(paths) / self.options.batch_size)
        logger.debug(f"Enumerated {len(paths)} paths in {full_path}")

        outcomes: List[BatchOutcome[str, EntityMetadata]] = await process_batches(
            paths,
            self.options.batch_size,
            lambda path: self._fetch(full_path, path),
            cancel_token=cancel_token,
        )

        retained: List[DiscoveredDataset] = []
        for outcome in outcomes:
            if not outcome.ok:
                logger.debug(f"Skipping inaccessible path {outcome.item}: {outcome.error}")
                collector.record_failure(outcome.item)
                continue
            classified = classify_entity(outcome.value)
            if classified.retained:
                retained.append(classified.dataset)
            else:
                collector.record_skip(classified.skip_reason)

        data, errors = partition_candidates(retained, self.options.error_markers)
        linked = pair_error_datasets(data, errors)
        data_dataset, error_dataset = select_primary(data, errors)

        primary_paths = [ds.path for ds in retained if ds.is_primary]
        if primary_paths:
            logger.debug(f"Primary datasets: {primary_paths}")

        statistics = collector.freeze(
            datasets_retained=len(retained),
            data_candidates=len(data),
            error_candidates=len(errors),
            pairs_linked=linked,
        )
        logger.info(f"Discovered {len(retained)} datasets in {filename}: {statistics.summary()}")
        if statistics.paths_failed:
            logger.warning(
                f"{statistics.paths_failed} of {statistics.paths_enumerated} paths in {filename} "
                f"could not be fetched and were skipped"
            )

        return FileStructure(
            filename=filename,
            full_path=full_path,
            datasets=tuple(retained),
            data_dataset=data_dataset,
            error_dataset=error_dataset,
            statistics=statistics,
        )


async def discover(
    client: MetadataFetchClient,
    filename: str,
    full_path: str,
    options: Optional[DiscoveryOptions] = None,
    cancel_token: Optional[CancellationToken] = None,
) -> FileStructure:
    """Run a single discovery with a throwaway engine."""
    return await DatasetDiscoveryEngine(client, options).discover(filename, full_path, cancel_token)


__all__ = ["DatasetDiscoveryEngine", "discover"]
