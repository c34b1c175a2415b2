# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""JWS wire segments: serialization modes, signing input and compact form."""

from .exceptions import DecodeError

COMPACT = "compact"
FLAT = "flat"
GENERAL = "general"

SERIALIZATIONS = frozenset({COMPACT, FLAT, GENERAL})
JSON_SERIALIZATIONS = frozenset({FLAT, GENERAL})


def signing_input(protected_b64: str, payload_b64: str) -> bytes:
    """Build the JWS signing input ``ASCII(protected || '.' || payload)``."""
    return f"{protected_b64}.{payload_b64}".encode("ascii")


def split_compact(data: str | bytes) -> tuple[str, str, str]:
    """Split a compact JWS into its protected header, payload and signature segments.

    Surrounding whitespace is ignored.

    Raises:
        DecodeError: If the input is not text or does not have exactly three segments
    """
    if isinstance(data, bytes):
        try:
            data = data.decode("ascii")
        except UnicodeDecodeError as e:
            raise DecodeError("Compact JWS must be ASCII text") from e

    segments = data.strip().split(".")
    if len(segments) != 3:
        raise DecodeError(
            f"Invalid compact JWS: expected 3 segments, got {len(segments)}"
        )
    return segments[0], segments[1], segments[2]


def join_compact(protected_b64: str, payload_b64: str, signature_b64: str) -> str:
    return ".".join((protected_b64, payload_b64, signature_b64))


def looks_like_json(data: str | bytes) -> bool:
    """Return True if the input is a JSON serialization rather than compact."""
    if isinstance(data, bytes):
        return data.lstrip().startswith(b"{")
    return data.lstrip().startswith("{")
