"""Normalization of raw HDF5 dtype descriptors."""

from __future__ import annotations

from typing import Dict, Optional

from fiaplot import logger

from .models import (
    DtypeClass,
    LegacyNumericClass,
    NormalizedDtype,
    RawDtype,
    StructuredDtype,
)

# HDF5 class codes as reported by the metadata service (H5T_class_t order).
HDF5_CLASS_CODES: Dict[int, DtypeClass] = {
    0: DtypeClass.INTEGER,
    1: DtypeClass.FLOAT,
    2: DtypeClass.TIME,
    3: DtypeClass.STRING,
    4: DtypeClass.BITFIELD,
    5: DtypeClass.OPAQUE,
    6: DtypeClass.COMPOUND,
    7: DtypeClass.REFERENCE,
    8: DtypeClass.ENUMERATION,
    9: DtypeClass.ARRAY_VARIABLE_LENGTH,
    10: DtypeClass.ARRAY,
}

_LABELS = {label.value: label for label in DtypeClass}


def class_label_for_code(code: int) -> DtypeClass:
    """Map an HDF5 class code to its label; unknown codes give ``Unknown``."""
    label = HDF5_CLASS_CODES.get(code)
    if label is None:
        logger.warning(f"Unknown HDF5 class code: {code}")
        return DtypeClass.UNKNOWN
    return label


def class_label_for_name(name: object) -> DtypeClass:
    if isinstance(name, DtypeClass):
        return name
    if isinstance(name, str):
        return _LABELS.get(name, DtypeClass.UNKNOWN)
    return DtypeClass.UNKNOWN


def normalize_dtype(raw: Optional[RawDtype]) -> NormalizedDtype:
    """
    Resolve a raw dtype descriptor to a :class:`NormalizedDtype`.

    Legacy class codes go through the fixed HDF5 table. Structured records
    keep their fields and have their class name checked against the
    vocabulary. Nothing here raises for an unrecognised class.
    """
    if raw is None:
        return NormalizedDtype(DtypeClass.UNKNOWN)

    if isinstance(raw, LegacyNumericClass):
        label = class_label_for_code(raw.code)
        logger.trace(f"Converted dtype class {raw.code} -> {label.value}")
        return NormalizedDtype(label, dict(raw.fields))

    if isinstance(raw, StructuredDtype):
        fields = {key: value for key, value in raw.record.items() if key != "class"}
        return NormalizedDtype(class_label_for_name(raw.record.get("class")), fields)

    raise TypeError(f"Unsupported dtype descriptor type: {type(raw).__name__}")


__all__ = [
    "HDF5_CLASS_CODES",
    "class_label_for_code",
    "class_label_for_name",
    "normalize_dtype",
]
