# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""JOSE header model (RFC 7515 section 4, RFC 7516 section 4)."""

import base64
import binascii
from dataclasses import dataclass, field
from typing import Any

from .jwk import Jwk
from .record import (
    Field,
    JsonRecord,
    decode_octets,
    decode_str,
    decode_str_list,
    encode_nested,
    encode_octets,
    nested,
)


def _decode_cert_chain(value: Any) -> list[bytes]:
    # x5c entries use standard (padded) base64 of DER certificates
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise TypeError("expected an array of base64 strings")
    try:
        return [base64.b64decode(v, validate=True) for v in value]
    except binascii.Error as e:
        raise ValueError(f"invalid base64 certificate: {e}") from e


def _encode_cert_chain(value: list[bytes]) -> list[str]:
    return [base64.b64encode(cert).decode("ascii") for cert in value]


@dataclass
class JwHeader(JsonRecord):
    """A JOSE header, used both as protected and unprotected JWS header.

    Attributes:
        alg: Algorithm
        enc: Content encryption algorithm
        zip: Compression algorithm
        jku: JWK Set URL
        jwk: Embedded public key
        kid: Key ID
        typ: Media type of the complete object
        cty: Media type of the payload
        apu: Agreement PartyUInfo
        apv: Agreement PartyVInfo
        epk: Ephemeral public key
        crit: Extension members that must be understood
        x5u: X.509 URL
        x5c: X.509 certificate chain (DER, carried opaquely)
        x5t: X.509 SHA-1 thumbprint
        x5t_s256: X.509 SHA-256 thumbprint ("x5t#S256")
        additional_members: Members other than the registered header parameters
    """
    alg: str = ""
    enc: str = ""
    zip: str = ""
    jku: str = ""
    jwk: Jwk | None = None
    kid: str = ""
    typ: str = ""
    cty: str = ""
    apu: bytes = b""
    apv: bytes = b""
    epk: Jwk | None = None
    crit: list[str] = field(default_factory=list)
    x5u: str = ""
    x5c: list[bytes] = field(default_factory=list)
    x5t: str = ""
    x5t_s256: str = ""
    additional_members: dict[str, Any] = field(default_factory=dict)

    json_fields = (
        Field("alg", "alg", decode_str),
        Field("enc", "enc", decode_str),
        Field("zip", "zip", decode_str),
        Field("jku", "jku", decode_str),
        Field("jwk", "jwk", nested(Jwk), encode_nested),
        Field("kid", "kid", decode_str),
        Field("typ", "typ", decode_str),
        Field("cty", "cty", decode_str),
        Field("apu", "apu", decode_octets, encode_octets),
        Field("apv", "apv", decode_octets, encode_octets),
        Field("epk", "epk", nested(Jwk), encode_nested),
        Field("crit", "crit", decode_str_list),
        Field("x5u", "x5u", decode_str),
        Field("x5c", "x5c", _decode_cert_chain, _encode_cert_chain),
        Field("x5t", "x5t", decode_str),
        Field("x5t#S256", "x5t_s256", decode_str),
    )

    def is_empty(self) -> bool:
        """Return True if encoding this header would yield an empty object."""
        return not self.to_dict()
