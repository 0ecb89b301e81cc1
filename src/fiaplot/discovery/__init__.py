"""
HDF5 file-structure discovery.

Given a file known to the metadata service, the discovery engine enumerates
its paths, fetches metadata in bounded concurrent batches, keeps the numeric
datasets, pairs data series with error series and picks the primary
data/error datasets for display.
"""

from fiaplot.discovery.batching import BatchOutcome, CancellationToken, process_batches
from fiaplot.discovery.classification import ClassificationOutcome, classify_entity, shapes_match
from fiaplot.discovery.dtypes import HDF5_CLASS_CODES, class_label_for_code, normalize_dtype
from fiaplot.discovery.engine import DatasetDiscoveryEngine, discover
from fiaplot.discovery.models import (
    Attribute,
    DiscoveredDataset,
    DtypeClass,
    EntityKind,
    EntityMetadata,
    FileStructure,
    LegacyNumericClass,
    NormalizedDtype,
    StructuredDtype,
    has_signal_attribute,
    parse_raw_dtype,
)
from fiaplot.discovery.options import DEFAULT_BATCH_SIZE, DiscoveryOptions
from fiaplot.discovery.pairing import (
    DEFAULT_ERROR_MARKERS,
    is_error_path,
    pair_error_datasets,
    partition_candidates,
    same_parent,
    select_primary,
)
from fiaplot.discovery.providers import MetadataFetchClient, StaticMetadataClient
from fiaplot.discovery.session import DiscoverySession
from fiaplot.discovery.stats import DiscoveryStatistics

__all__ = [
    "Attribute",
    "BatchOutcome",
    "CancellationToken",
    "ClassificationOutcome",
    "DEFAULT_BATCH_SIZE",
    "DEFAULT_ERROR_MARKERS",
    "DatasetDiscoveryEngine",
    "DiscoveredDataset",
    "DiscoveryOptions",
    "DiscoverySession",
    "DiscoveryStatistics",
    "DtypeClass",
    "EntityKind",
    "EntityMetadata",
    "FileStructure",
    "HDF5_CLASS_CODES",
    "LegacyNumericClass",
    "MetadataFetchClient",
    "NormalizedDtype",
    "StaticMetadataClient",
    "StructuredDtype",
    "class_label_for_code",
    "classify_entity",
    "discover",
    "has_signal_attribute",
    "is_error_path",
    "normalize_dtype",
    "pair_error_datasets",
    "parse_raw_dtype",
    "partition_candidates",
    "process_batches",
    "same_parent",
    "select_primary",
    "shapes_match",
]
