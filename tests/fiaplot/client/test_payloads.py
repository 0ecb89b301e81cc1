"""
Tests for the pydantic models validating metadata responses.
"""

import pytest
from pydantic import ValidationError

from fiaplot.client.payloads import AttributePayload, EntityPayload
from fiaplot.discovery.models import Attribute, EntityKind, LegacyNumericClass, StructuredDtype


class TestEntityPayload:
    def test_dataset_response(self):
        payload = EntityPayload.model_validate({
            "name": "counts",
            "kind": "dataset",
            "shape": [100],
            "type": {"class": 1, "size": 8, "order": 0},
            "attributes": [{"name": "signal", "value": 1, "dtype": "<i8", "shape": []}],
            "chunks": [100],
        })

        metadata = payload.to_metadata("/entry/data/counts")

        assert metadata.path == "/entry/data/counts"
        assert metadata.kind is EntityKind.DATASET
        assert metadata.shape == (100,)
        assert metadata.dtype == LegacyNumericClass(code=1, fields={"size": 8, "order": 0})
        assert metadata.attributes == (Attribute("signal", 1, "<i8", ()),)

    def test_group_response(self):
        metadata = EntityPayload.model_validate({"name": "entry", "kind": "group"}).to_metadata("/entry")

        assert metadata.kind is EntityKind.GROUP
        assert metadata.shape == ()
        assert metadata.dtype is None
        assert metadata.attributes == ()

    def test_null_attributes(self):
        payload = EntityPayload.model_validate({"kind": "group", "attributes": None})
        assert payload.attributes == []

    def test_string_dtype(self):
        metadata = EntityPayload(kind="dataset", shape=[2], dtype_descriptor="<f8").to_metadata("/x")
        assert metadata.dtype == StructuredDtype(record={"dtype": "<f8"})

    def test_unknown_kind_maps_to_other(self):
        assert EntityPayload(kind="datatype").to_metadata("/t").kind is EntityKind.OTHER

    def test_missing_kind(self):
        with pytest.raises(ValidationError):
            EntityPayload.model_validate({"name": "entry"})

    def test_negative_shape(self):
        with pytest.raises(ValidationError):
            EntityPayload.model_validate({"kind": "dataset", "shape": [-1]})


def test_attribute_payload_without_shape():
    attribute = AttributePayload(name="units", value="counts").to_attribute()
    assert attribute == Attribute(name="units", value="counts")
