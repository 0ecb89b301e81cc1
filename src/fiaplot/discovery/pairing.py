"""Data/error candidate partitioning, pairing and primary selection."""

from __future__ import annotations

from typing import Iterable, List, Optional, Sequence, Tuple

from fiaplot import logger

from .classification import shapes_match
from .models import DiscoveredDataset, has_signal_attribute

DEFAULT_ERROR_MARKERS: Tuple[str, ...] = ("error", "err")


def is_error_path(path: str, markers: Iterable[str] = DEFAULT_ERROR_MARKERS) -> bool:
    """
    Return True if the lower-cased path contains any error marker.

    This is a substring test, so a path such as ``/entry/data/terrain``
    counts as an error path.
    """
    lowered = path.lower()
    return any(marker in lowered for marker in markers)


def partition_candidates(
    datasets: Sequence[DiscoveredDataset],
    markers: Iterable[str] = DEFAULT_ERROR_MARKERS,
) -> Tuple[List[DiscoveredDataset], List[DiscoveredDataset]]:
    """Split datasets into (data, error) candidates, both in discovery order."""
    markers = tuple(markers)
    data: List[DiscoveredDataset] = []
    errors: List[DiscoveredDataset] = []
    for ds in datasets:
        (errors if is_error_path(ds.path, markers) else data).append(ds)
    return data, errors


def same_parent(first: str, second: str) -> bool:
    """True when both paths have the same depth and identical parent segments."""
    first_parts = first.split("/")
    second_parts = second.split("/")
    if len(first_parts) != len(second_parts):
        return False
    return first_parts[:-1] == second_parts[:-1]


def pair_error_datasets(
    data: Sequence[DiscoveredDataset],
    errors: Sequence[DiscoveredDataset],
) -> int:
    """
    Link each data candidate to the first matching error candidate.

    A match needs an equal shape and the same parent group. The first match
    in discovery order wins; there is no scoring between candidates.

    Returns:
        Number of data candidates that received an ``error_path``
    """
    linked = 0
    for data_ds in data:
        for error_ds in errors:
            if shapes_match(data_ds.shape, error_ds.shape) and same_parent(data_ds.path, error_ds.path):
                data_ds.link_error(error_ds.path)
                linked += 1
                logger.debug(f"Linked error path {error_ds.path} -> {data_ds.path}")
                break
    return linked


def select_primary(
    data: Sequence[DiscoveredDataset],
    errors: Sequence[DiscoveredDataset],
) -> Tuple[Optional[DiscoveredDataset], Optional[DiscoveredDataset]]:
    """
    Choose the default data and error series.

    The data series is the first data candidate carrying a ``signal``
    attribute, falling back to the first data candidate. The error series is
    the first error candidate, chosen independently of pairing.
    """
    data_dataset = next((ds for ds in data if has_signal_attribute(ds.attributes)), None)
    if data_dataset is None and data:
        data_dataset = data[0]
    error_dataset = errors[0] if errors else None
    return data_dataset, error_dataset


__all__ = [
    "DEFAULT_ERROR_MARKERS",
    "is_error_path",
    "partition_candidates",
    "same_parent",
    "pair_error_datasets",
    "select_primary",
]
