"""
High-level entry points for discovering and plotting HDF5 files.

These functions wire settings, the HTTP client and the discovery engine
together for callers that do not need to manage them directly.
"""

from __future__ import annotations

import asyncio
from typing import Optional, Tuple

import numpy as np

from fiaplot import logger
from fiaplot.client.plotting import PlottingServiceClient
from fiaplot.config.settings import PlottingSettings, load_settings
from fiaplot.discovery.batching import CancellationToken
from fiaplot.discovery.engine import DatasetDiscoveryEngine
from fiaplot.discovery.models import FileStructure
from fiaplot.discovery.options import DiscoveryOptions
from fiaplot.discovery.providers import MetadataFetchClient
from fiaplot.exceptions import DataFetchError


async def discover_file_structure(
    filename: str,
    full_path: str,
    *,
    client: Optional[MetadataFetchClient] = None,
    settings: Optional[PlottingSettings] = None,
    options: Optional[DiscoveryOptions] = None,
    cancel_token: Optional[CancellationToken] = None,
) -> FileStructure:
    """
    Discover the datasets of ``full_path``.

    When ``client`` is omitted a :class:`PlottingServiceClient` is built from
    ``settings`` (or from the environment) and closed afterwards. ``options``
    default to the ones implied by the settings.

    Raises:
        PathEnumerationError: If the file's paths cannot be listed
        DiscoveryCancelled: If ``cancel_token`` is cancelled first
    """
    if settings is None and (client is None or options is None):
        settings = load_settings()
    if options is None:
        options = DiscoveryOptions.from_settings(settings)

    if client is not None:
        return await DatasetDiscoveryEngine(client, options).discover(filename, full_path, cancel_token)

    logger.debug(f"Creating plotting service client for discovery of {filename}")
    async with PlottingServiceClient.from_settings(settings) as owned_client:
        return await DatasetDiscoveryEngine(owned_client, options).discover(filename, full_path, cancel_token)


def discover_file_structure_sync(
    filename: str,
    full_path: str,
    *,
    settings: Optional[PlottingSettings] = None,
    options: Optional[DiscoveryOptions] = None,
) -> FileStructure:
    """Blocking wrapper around :func:`discover_file_structure` for scripts and notebooks."""
    return asyncio.run(discover_file_structure(filename, full_path, settings=settings, options=options))


async def fetch_dataset_series(
    client: PlottingServiceClient,
    structure: FileStructure,
    dataset_path: Optional[str] = None,
    selection: Optional[int] = None,
) -> Tuple[np.ndarray, Optional[np.ndarray]]:
    """
    Fetch a dataset's values together with its paired error series.

    Args:
        client: Client used for the data requests
        structure: Result of a discovery run on the file
        dataset_path: Dataset to fetch; defaults to the primary data dataset
        selection: Row index for 2D datasets

    Returns:
        Tuple of (values, errors); errors is None when no error series is paired

    Raises:
        DataFetchError: If the dataset is unknown or a request fails
    """
    dataset = structure.get(dataset_path) if dataset_path is not None else structure.data_dataset
    if dataset is None:
        raise DataFetchError(
            f"No dataset {dataset_path!r} in {structure.filename}",
            error_code="DATA_002",
            context={"filename": structure.filename, "path": dataset_path},
        )

    if dataset.is_1d:
        selection = None

    values = await client.fetch_data_1d(structure.full_path, dataset.path, selection)
    if dataset.error_path is None:
        return values, None

    errors = await client.fetch_error_data(structure.full_path, dataset.error_path, selection)
    if errors.shape != values.shape:
        logger.warning(
            f"Error series {dataset.error_path} has {errors.size} points but {dataset.path} has {values.size}"
        )
    return values, errors


__all__ = [
    "discover_file_structure",
    "discover_file_structure_sync",
    "fetch_dataset_series",
]
