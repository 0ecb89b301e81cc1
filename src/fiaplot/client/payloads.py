"""Pydantic models validating plotting service responses."""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from fiaplot.discovery.models import Attribute, EntityKind, EntityMetadata


class AttributePayload(BaseModel):
    """One entry of an entity's ``attributes`` list."""

    model_config = ConfigDict(extra="allow")

    name: str
    value: Any = None
    dtype: Any = None
    shape: Optional[List[int]] = None

    def to_attribute(self) -> Attribute:
        return Attribute(
            name=self.name,
            value=self.value,
            dtype=self.dtype,
            shape=tuple(self.shape) if self.shape is not None else None,
        )


class EntityPayload(BaseModel):
    """Metadata response for one path."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    name: Optional[str] = None
    kind: str
    shape: Optional[List[int]] = None
    dtype_descriptor: Optional[Union[Dict[str, Any], str]] = Field(default=None, alias="type")
    attributes: List[AttributePayload] = Field(default_factory=list)

    @field_validator("shape")
    @classmethod
    def validate_shape(cls, v: Optional[List[int]]) -> Optional[List[int]]:
        if v is not None and any(dim < 0 for dim in v):
            raise ValueError("Shape dimensions must be non-negative")
        return v

    @field_validator("attributes", mode="before")
    @classmethod
    def default_attributes(cls, v: Any) -> Any:
        return [] if v is None else v

    def to_metadata(self, path: str) -> EntityMetadata:
        return EntityMetadata(
            path=path,
            kind=EntityKind.parse(self.kind),
            shape=tuple(self.shape or ()),
            dtype=self.dtype_descriptor,
            attributes=tuple(attr.to_attribute() for attr in self.attributes),
        )


__all__ = ["AttributePayload", "EntityPayload"]
