# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""JWK Set (RFC 7517 section 5)."""

from dataclasses import dataclass, field
from typing import Any, Iterator

from .jwk import Jwk
from .record import Field, JsonRecord


def _decode_keys(value: Any) -> list[Jwk]:
    if not isinstance(value, list):
        raise TypeError("expected an array of JWK objects")
    return [Jwk.from_dict(v) for v in value]


def _encode_keys(value: list[Jwk]) -> list[dict[str, Any]]:
    return [k.to_dict() for k in value]


@dataclass
class JwkSet(JsonRecord):
    """An ordered collection of keys.

    Attributes:
        keys: Keys in document order
        additional_members: Members other than "keys"
    """
    keys: list[Jwk] = field(default_factory=list)
    additional_members: dict[str, Any] = field(default_factory=dict)

    json_fields = (
        Field("keys", "keys", _decode_keys, _encode_keys),
    )

    def __len__(self) -> int:
        return len(self.keys)

    def __iter__(self) -> Iterator[Jwk]:
        return iter(self.keys)

    def append(self, jwk: Jwk) -> None:
        self.keys.append(jwk)

    def find_by_id(self, kid: str) -> Jwk | None:
        """Return the first key whose trimmed ``kid`` equals ``kid``, or None."""
        kid = kid.strip()
        for jwk in self.keys:
            if jwk.kid.strip() == kid:
                return jwk
        return None

    def find_by_id_and_type(self, kid: str, kty: str) -> Jwk | None:
        """Return the first key matching both ``kid`` and ``kty``, or None.

        Both comparisons are case-sensitive on whitespace-trimmed values.
        """
        kid = kid.strip()
        kty = kty.strip()
        for jwk in self.keys:
            if jwk.kid.strip() == kid and jwk.kty.strip() == kty:
                return jwk
        return None
