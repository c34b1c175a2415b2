# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Extensible JSON records.

Every JOSE object (claim sets, headers, keys, key sets, signatures) is a JSON
object with a fixed set of registered members plus arbitrary extension
members. ``JsonRecord`` implements that shape once:

- Decoding pops each registered member from the input, converts it with the
  member's codec and keeps everything else as ``additional members``.
- Encoding emits registered members that are set, then merges the
  additional members, skipping any whose name collides with a registered one.

Subclasses are dataclasses that declare ``json_fields``; the name of the
attribute holding extension members is given by ``additional_attr``.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Callable, ClassVar

from .b64url import b64url_decode, b64url_encode, b64url_to_uint, uint_to_b64url
from .exceptions import DecodeError, FieldDecodeError, JoseError
from .numeric_date import from_numeric_date, to_numeric_date

logger = logging.getLogger("copilot_jose.record")


def dumps(obj: Any) -> str:
    """Serialize to compact JSON with sorted keys."""
    return json.dumps(obj, separators=(",", ":"), sort_keys=True, ensure_ascii=False)


def loads(data: str | bytes) -> Any:
    """Parse JSON text, raising DecodeError on malformed input."""
    try:
        return json.loads(data)
    except (ValueError, TypeError) as e:
        raise DecodeError(f"Invalid JSON: {e}") from e


def _identity(value: Any) -> Any:
    return value


def _is_unset(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, (str, bytes, list, tuple, dict)):
        return len(value) == 0
    return False


# Member codecs


def decode_str(value: Any) -> str:
    if not isinstance(value, str):
        raise TypeError(f"expected a string, got {type(value).__name__}")
    return value


def decode_str_list(value: Any) -> list[str]:
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise TypeError("expected an array of strings")
    return list(value)


def decode_octets(value: Any) -> bytes:
    return b64url_decode(decode_str(value))


def encode_octets(value: bytes) -> str:
    return b64url_encode(value)


def decode_uint(value: Any) -> int:
    return b64url_to_uint(decode_str(value))


def encode_uint(value: int) -> str:
    return uint_to_b64url(value)


def decode_date(value: Any):
    return from_numeric_date(value)


def encode_date(value) -> int:
    return to_numeric_date(value)


@dataclass(frozen=True)
class Field:
    """A registered JSON member of a record.

    Attributes:
        name: JSON member name
        attr: Python attribute holding the decoded value
        decoder: Converts the JSON value to the attribute value
        encoder: Converts the attribute value to a JSON value
        omit: Returns True when the attribute value should not be emitted
    """
    name: str
    attr: str
    decoder: Callable[[Any], Any] = _identity
    encoder: Callable[[Any], Any] = _identity
    omit: Callable[[Any], bool] = _is_unset

    def decode(self, value: Any) -> Any:
        """Decode a JSON value, reporting failures against this member's name."""
        try:
            return self.decoder(value)
        except FieldDecodeError:
            raise
        except (JoseError, TypeError, ValueError) as e:
            raise FieldDecodeError(self.name, str(e)) from e


def nested(record_cls: type) -> Callable[[Any], Any]:
    """Build a decoder for a member whose value is itself a record."""

    def _decode(value: Any):
        return record_cls.from_dict(value)

    return _decode


def encode_nested(value: "JsonRecord") -> dict[str, Any]:
    return value.to_dict()


class JsonRecord:
    """Base class for JOSE objects with registered and additional members."""

    json_fields: ClassVar[tuple[Field, ...]] = ()
    additional_attr: ClassVar[str] = "additional_members"

    @classmethod
    def reserved_names(cls) -> frozenset[str]:
        """Names of the registered members of this record type."""
        return frozenset(f.name for f in cls.json_fields)

    @classmethod
    def decode_known(cls, members: dict[str, Any]) -> dict[str, Any]:
        """Remove and decode registered members from ``members``.

        Returns:
            Constructor keyword arguments for the decoded members
        """
        values = {}
        for f in cls.json_fields:
            if f.name in members:
                values[f.attr] = f.decode(members.pop(f.name))
        return values

    def active_fields(self) -> tuple[Field, ...]:
        """Registered members eligible for encoding."""
        return self.json_fields

    def encode_known(self) -> dict[str, Any]:
        """Encode the registered members that are set."""
        obj = {}
        for f in self.active_fields():
            value = getattr(self, f.attr)
            if f.omit(value):
                continue
            obj[f.name] = f.encoder(value)
        return obj

    def merge_additional(self, obj: dict[str, Any]) -> dict[str, Any]:
        """Add additional members to ``obj``, skipping registered names."""
        reserved = self.reserved_names()
        for name, value in (getattr(self, self.additional_attr) or {}).items():
            if name in reserved:
                logger.debug("Discarding additional member '%s' of %s: name is registered",
                             name, type(self).__name__)
                continue
            obj[name] = value
        return obj

    @classmethod
    def from_dict(cls, obj: Any):
        """Build a record from a parsed JSON object."""
        if not isinstance(obj, dict):
            raise DecodeError(f"{cls.__name__} must be a JSON object")

        members = dict(obj)
        values = cls.decode_known(members)
        values[cls.additional_attr] = members
        return cls(**values)

    def to_dict(self) -> dict[str, Any]:
        """Convert the record to a JSON-compatible dictionary."""
        return self.merge_additional(self.encode_known())

    @classmethod
    def from_json(cls, data: str | bytes):
        """Parse a record from JSON text."""
        return cls.from_dict(loads(data))

    def to_json(self) -> str:
        """Serialize the record as compact JSON."""
        return dumps(self.to_dict())
