# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Tests for the extensible JSON record codec."""

import logging
from dataclasses import dataclass, field
from typing import Any

import pytest

from copilot_jose.exceptions import DecodeError, FieldDecodeError
from copilot_jose.record import (
    Field,
    JsonRecord,
    decode_octets,
    decode_str,
    decode_uint,
    dumps,
    encode_octets,
    encode_uint,
    loads,
)


@dataclass
class Sample(JsonRecord):
    name: str = ""
    blob: bytes = b""
    number: int | None = None
    additional_members: dict[str, Any] = field(default_factory=dict)

    json_fields = (
        Field("name", "name", decode_str),
        Field("blob", "blob", decode_octets, encode_octets),
        Field("num", "number", decode_uint, encode_uint),
    )


class TestJsonRecord:
    """Tests for JsonRecord decode and encode."""

    def test_registered_members_are_extracted(self):
        """Test that registered members are decoded and the rest kept as additional members."""
        record = Sample.from_json('{"name":"a","blob":"Zm9v","num":"AQAB","x":1,"y":{"z":[true]}}')

        assert record.name == "a"
        assert record.blob == b"foo"
        assert record.number == 65537
        assert record.additional_members == {"x": 1, "y": {"z": [True]}}

    def test_unset_members_are_omitted(self):
        """Test that empty strings, empty bytes and None are not emitted."""
        assert Sample().to_dict() == {}
        assert Sample(name="a").to_json() == '{"name":"a"}'

    def test_encode_is_sorted_and_compact(self):
        """Test the stable JSON output form."""
        record = Sample(name="a", number=25, additional_members={"b": "x", "a": 101})
        assert record.to_json() == '{"a":101,"b":"x","name":"a","num":"GQ"}'

    def test_colliding_additional_members_are_discarded(self, caplog):
        """Test that additional members named like registered members are dropped on encode."""
        record = Sample(name="real", additional_members={"name": "shadow", "num": "x", "other": 1})

        with caplog.at_level(logging.DEBUG, logger="copilot_jose.record"):
            encoded = record.to_dict()

        assert encoded == {"name": "real", "other": 1}
        assert "Discarding additional member 'name'" in caplog.text

    def test_decode_encode_decode_is_idempotent(self):
        """Test that a decoded record survives a round trip unchanged."""
        first = Sample.from_json('{"name":"a","num":"KF0","ext":["v"]}')
        second = Sample.from_json(first.to_json())
        assert second == first

    def test_field_decode_error_names_member(self):
        """Test that a malformed member value reports the member name."""
        with pytest.raises(FieldDecodeError) as exc_info:
            Sample.from_json('{"blob":"not base64!"}')

        assert exc_info.value.field == "blob"
        assert "blob" in str(exc_info.value)

    def test_wrong_json_type_is_field_error(self):
        """Test that a member of the wrong JSON type is a field decode error."""
        with pytest.raises(FieldDecodeError) as exc_info:
            Sample.from_json('{"name":42}')
        assert exc_info.value.field == "name"

    def test_non_object_rejected(self):
        """Test that a JSON array is not accepted as a record."""
        with pytest.raises(DecodeError):
            Sample.from_json("[1,2]")

    def test_reserved_names(self):
        """Test that reserved names are the JSON member names."""
        assert Sample.reserved_names() == frozenset({"name", "blob", "num"})


class TestJsonHelpers:
    """Tests for dumps and loads."""

    def test_loads_invalid_json(self):
        """Test that malformed JSON raises DecodeError."""
        with pytest.raises(DecodeError):
            loads("{not json")

    def test_dumps_keeps_unicode(self):
        """Test that non-ASCII text is emitted as UTF-8 rather than escaped."""
        assert dumps({"k": "é"}) == '{"k":"é"}'
