"""Data models for entity metadata and discovery results."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

import pandas as pd

from fiaplot.discovery.stats import DiscoveryStatistics


class EntityKind(str, Enum):
    """Kind of node found at a path inside an HDF5 file."""

    GROUP = "group"
    DATASET = "dataset"
    SOFT_LINK = "soft_link"
    EXTERNAL_LINK = "external_link"
    OTHER = "other"

    @classmethod
    def parse(cls, value: Any) -> "EntityKind":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            return cls.OTHER


class DtypeClass(str, Enum):
    """HDF5 datatype class vocabulary."""

    INTEGER = "Integer"
    FLOAT = "Float"
    TIME = "Time"
    STRING = "String"
    BITFIELD = "Bitfield"
    OPAQUE = "Opaque"
    COMPOUND = "Compound"
    REFERENCE = "Reference"
    ENUMERATION = "Enumeration"
    ARRAY_VARIABLE_LENGTH = "Array (variable length)"
    ARRAY = "Array"
    UNKNOWN = "Unknown"


NUMERIC_CLASSES = frozenset({DtypeClass.INTEGER, DtypeClass.FLOAT})


@dataclass(frozen=True)
class Attribute:
    """An attribute attached to an HDF5 entity."""

    name: str
    value: Any = None
    dtype: Any = None
    shape: Optional[Tuple[int, ...]] = None


@dataclass(frozen=True)
class LegacyNumericClass:
    """Raw dtype whose class is an HDF5 class code such as ``1`` for Float."""

    code: int
    fields: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class StructuredDtype:
    """Raw dtype already described by a structured record."""

    record: Mapping[str, Any] = field(default_factory=dict)


RawDtype = Union[LegacyNumericClass, StructuredDtype]


def parse_raw_dtype(raw: Any) -> Optional[RawDtype]:
    """Build the raw dtype variant matching a wire value."""
    if raw is None or isinstance(raw, (LegacyNumericClass, StructuredDtype)):
        return raw
    if isinstance(raw, Mapping):
        code = raw.get("class")
        if isinstance(code, int) and not isinstance(code, bool):
            fields = {key: value for key, value in raw.items() if key != "class"}
            return LegacyNumericClass(code=code, fields=fields)
        return StructuredDtype(record=dict(raw))
    if isinstance(raw, str):
        return StructuredDtype(record={"dtype": raw})
    raise TypeError(f"Unsupported dtype descriptor: {raw!r}")


@dataclass(frozen=True)
class NormalizedDtype:
    """A dtype with its class resolved to the fixed vocabulary."""

    class_label: DtypeClass
    fields: Mapping[str, Any] = field(default_factory=dict)

    @property
    def is_numeric(self) -> bool:
        return self.class_label in NUMERIC_CLASSES

    def as_dict(self) -> Dict[str, Any]:
        return {**self.fields, "class": self.class_label.value}


@dataclass(frozen=True)
class EntityMetadata:
    """Metadata describing one entity, as returned by the metadata service."""

    path: str
    kind: EntityKind
    shape: Tuple[int, ...] = ()
    dtype: Optional[RawDtype] = None
    attributes: Tuple[Attribute, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "kind", EntityKind.parse(self.kind))
        object.__setattr__(self, "shape", tuple(int(dim) for dim in self.shape))
        object.__setattr__(self, "attributes", tuple(self.attributes))
        object.__setattr__(self, "dtype", parse_raw_dtype(self.dtype))
        if any(dim < 0 for dim in self.shape):
            raise ValueError(f"Shape of {self.path} has negative dimensions: {self.shape}")

    @property
    def is_dataset(self) -> bool:
        return self.kind is EntityKind.DATASET


def has_signal_attribute(attributes: Sequence[Attribute]) -> bool:
    """Return True if any attribute is named ``signal``."""
    return any(attr.name == "signal" for attr in attributes)


@dataclass(frozen=True)
class DiscoveredDataset:
    """
    A numeric dataset retained by a discovery run.

    Frozen except for ``error_path``, which only the pairing pass sets
    through :meth:`link_error`.
    """

    path: str
    shape: Tuple[int, ...]
    dtype: NormalizedDtype
    attributes: Tuple[Attribute, ...] = ()
    error_path: Optional[str] = None

    def link_error(self, error_path: str) -> None:
        object.__setattr__(self, "error_path", error_path)

    @property
    def ndim(self) -> int:
        return len(self.shape)

    @property
    def is_numeric(self) -> bool:
        return self.dtype.is_numeric and self.ndim > 0

    @property
    def is_1d(self) -> bool:
        return self.ndim == 1

    @property
    def is_2d(self) -> bool:
        return self.ndim == 2

    @property
    def is_primary(self) -> bool:
        return has_signal_attribute(self.attributes)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "path": self.path,
            "shape": list(self.shape),
            "dtype": self.dtype.as_dict(),
            "attributes": [attr.name for attr in self.attributes],
            "error_path": self.error_path,
            "is_numeric": self.is_numeric,
            "is_1d": self.is_1d,
            "is_2d": self.is_2d,
            "is_primary": self.is_primary,
        }


@dataclass(frozen=True)
class FileStructure:
    """Terminal result of one discovery run."""

    filename: str
    full_path: str
    datasets: Tuple[DiscoveredDataset, ...] = ()
    data_dataset: Optional[DiscoveredDataset] = None
    error_dataset: Optional[DiscoveredDataset] = None
    statistics: Optional[DiscoveryStatistics] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "datasets", tuple(self.datasets))
        for role, chosen in (("data_dataset", self.data_dataset), ("error_dataset", self.error_dataset)):
            if chosen is not None and not any(chosen is ds for ds in self.datasets):
                raise ValueError(f"{role} {chosen.path!r} is not one of the discovered datasets")

    @property
    def paths(self) -> List[str]:
        return [ds.path for ds in self.datasets]

    def get(self, path: str) -> Optional[DiscoveredDataset]:
        for ds in self.datasets:
            if ds.path == path:
                return ds
        return None

    def error_for(self, dataset: Union[DiscoveredDataset, str]) -> Optional[DiscoveredDataset]:
        """Return the error dataset paired with ``dataset``, if any."""
        ds = self.get(dataset) if isinstance(dataset, str) else dataset
        if ds is None or ds.error_path is None:
            return None
        return self.get(ds.error_path)

    def to_dataframe(self) -> pd.DataFrame:
        """Summarise the discovered datasets, one row per dataset."""
        columns = ["path", "shape", "ndim", "dtype_class", "error_path", "is_primary", "role"]
        rows = []
        for ds in self.datasets:
            if ds is self.data_dataset:
                role = "data"
            elif ds is self.error_dataset:
                role = "error"
            else:
                role = ""
            rows.append({
                "path": ds.path,
                "shape": ds.shape,
                "ndim": ds.ndim,
                "dtype_class": ds.dtype.class_label.value,
                "error_path": ds.error_path,
                "is_primary": ds.is_primary,
                "role": role,
            })
        return pd.DataFrame(rows, columns=columns)


__all__ = [
    "EntityKind",
    "DtypeClass",
    "NUMERIC_CLASSES",
    "Attribute",
    "LegacyNumericClass",
    "StructuredDtype",
    "RawDtype",
    "parse_raw_dtype",
    "NormalizedDtype",
    "EntityMetadata",
    "has_signal_attribute",
    "DiscoveredDataset",
    "FileStructure",
]
