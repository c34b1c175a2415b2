# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Unpadded base64url encoding for byte strings and unsigned integers.

JWS, JWK and JWA represent binary values as base64url text without ``=``
padding (RFC 7515 section 2). Integers ("Base64urlUInt" in RFC 7518) are
encoded as their minimal big-endian byte representation.
"""

import base64
import binascii
import re
from dataclasses import dataclass

from .exceptions import DecodeError

_B64URL_RE = re.compile(r"[A-Za-z0-9_-]*")


def b64url_encode(data: bytes) -> str:
    """Encode bytes as unpadded base64url text."""
    return base64.urlsafe_b64encode(data).decode("ascii").rstrip("=")


def b64url_decode(value: str | bytes) -> bytes:
    """Decode unpadded base64url text.

    Args:
        value: base64url text (``str`` or ASCII ``bytes``)

    Returns:
        Decoded bytes

    Raises:
        DecodeError: If the text contains padding or characters outside the
            URL-safe alphabet, or has an impossible length
    """
    if isinstance(value, bytes):
        try:
            value = value.decode("ascii")
        except UnicodeDecodeError as e:
            raise DecodeError("base64url value is not ASCII") from e

    if not isinstance(value, str):
        raise DecodeError(f"base64url value must be a string, got {type(value).__name__}")

    if not _B64URL_RE.fullmatch(value):
        raise DecodeError("base64url value contains invalid characters or padding")

    if len(value) % 4 == 1:
        raise DecodeError("base64url value has an invalid length")

    try:
        return base64.urlsafe_b64decode(value + "=" * (-len(value) % 4))
    except (binascii.Error, ValueError) as e:
        raise DecodeError(f"Unable to decode base64url value: {e}") from e


def uint_to_b64url(value: int) -> str:
    """Encode a non-negative integer as minimal big-endian base64url text."""
    if value < 0:
        raise ValueError("Base64urlUInt values must be non-negative")

    byte_length = (value.bit_length() + 7) // 8
    return b64url_encode(value.to_bytes(byte_length, byteorder="big"))


def b64url_to_uint(value: str | bytes) -> int:
    """Decode base64url text as a big-endian unsigned integer."""
    return int.from_bytes(b64url_decode(value), byteorder="big")


@dataclass(frozen=True)
class Base64UrlOctets:
    """A byte string carried as base64url text."""

    octets: bytes = b""

    def encoded(self) -> str:
        return b64url_encode(self.octets)

    @classmethod
    def decode(cls, value: str | bytes) -> "Base64UrlOctets":
        return cls(b64url_decode(value))


@dataclass(frozen=True)
class Base64UrlUInt:
    """A non-negative integer carried as base64url text."""

    value: int = 0

    def __post_init__(self):
        if self.value < 0:
            raise ValueError("Base64urlUInt values must be non-negative")

    def encoded(self) -> str:
        return uint_to_b64url(self.value)

    @classmethod
    def decode(cls, value: str | bytes) -> "Base64UrlUInt":
        return cls(b64url_to_uint(value))
