"""Per-entity classification of fetched metadata into candidate datasets."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from fiaplot import logger

from .dtypes import normalize_dtype
from .models import DiscoveredDataset, EntityMetadata

NOT_DATASET = "not_dataset"
NOT_NUMERIC = "not_numeric"


@dataclass(frozen=True)
class ClassificationOutcome:
    """Either a retained dataset or the reason the entity was skipped."""

    path: str
    dataset: Optional[DiscoveredDataset] = None
    skip_reason: Optional[str] = None

    @property
    def retained(self) -> bool:
        return self.dataset is not None


def shapes_match(first: Sequence[int], second: Sequence[int]) -> bool:
    """Compare shapes by length first, then dimension by dimension."""
    if len(first) != len(second):
        return False
    return all(a == b for a, b in zip(first, second))


def classify_entity(metadata: EntityMetadata) -> ClassificationOutcome:
    """
    Turn one metadata record into a candidate dataset.

    Only datasets whose class is Integer or Float and whose shape has at
    least one dimension are retained; scalars, strings, compounds, groups
    and links are skipped.
    """
    path = metadata.path

    if not metadata.is_dataset:
        logger.trace(f"Skipping {metadata.kind.value} at {path}")
        return ClassificationOutcome(path, skip_reason=NOT_DATASET)

    dtype = normalize_dtype(metadata.dtype)
    candidate = DiscoveredDataset(
        path=path,
        shape=metadata.shape,
        dtype=dtype,
        attributes=metadata.attributes,
    )

    if not candidate.is_numeric:
        logger.debug(
            f"Skipping non-numeric dataset {path} (shape={list(metadata.shape)}, class={dtype.class_label.value})"
        )
        return ClassificationOutcome(path, skip_reason=NOT_NUMERIC)

    logger.debug(f"Discovered numeric dataset {path} (shape={list(candidate.shape)}, class={dtype.class_label.value})")
    return ClassificationOutcome(path, dataset=candidate)


__all__ = [
    "NOT_DATASET",
    "NOT_NUMERIC",
    "ClassificationOutcome",
    "shapes_match",
    "classify_entity",
]
