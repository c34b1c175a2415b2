# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""JSON Web Algorithms registry (RFC 7518).

Algorithm identifiers are plain strings. The tables below classify them by
purpose and by the key type (JWK ``kty``) they operate on.
"""

from types import MappingProxyType

# Key families, equal to the JWK "kty" values
KEY_FAMILY_RSA = "RSA"
KEY_FAMILY_EC = "EC"
KEY_FAMILY_OCT = "oct"
KEY_FAMILY_UNKNOWN = "unknown"

# Signature algorithms (RFC 7518 section 3)
HS256 = "HS256"
HS384 = "HS384"
HS512 = "HS512"
RS256 = "RS256"
RS384 = "RS384"
RS512 = "RS512"
ES256 = "ES256"
ES384 = "ES384"
ES512 = "ES512"
PS256 = "PS256"
PS384 = "PS384"
PS512 = "PS512"
NONE = "none"

# Key management algorithms (RFC 7518 section 4)
DIR = "dir"
RSA1_5 = "RSA1_5"
RSA_OAEP = "RSA-OAEP"
RSA_OAEP_256 = "RSA-OAEP-256"
A128KW = "A128KW"
A192KW = "A192KW"
A256KW = "A256KW"
ECDH_ES = "ECDH-ES"
ECDH_ES_A128KW = "ECDH-ES+A128KW"
ECDH_ES_A192KW = "ECDH-ES+A192KW"
ECDH_ES_A256KW = "ECDH-ES+A256KW"
A128GCMKW = "A128GCMKW"
A192GCMKW = "A192GCMKW"
A256GCMKW = "A256GCMKW"
PBES2_HS256_A128KW = "PBES2-HS256+A128KW"
PBES2_HS384_A192KW = "PBES2-HS384+A192KW"
PBES2_HS512_A256KW = "PBES2-HS512+A256KW"

# Content encryption algorithms (RFC 7518 section 5)
A128CBC_HS256 = "A128CBC-HS256"
A192CBC_HS384 = "A192CBC-HS384"
A256CBC_HS512 = "A256CBC-HS512"
A128GCM = "A128GCM"
A192GCM = "A192GCM"
A256GCM = "A256GCM"

SIGNATURE_ALGORITHMS = frozenset({
    HS256, HS384, HS512,
    RS256, RS384, RS512,
    PS256, PS384, PS512,
    ES256, ES384, ES512,
    NONE,
})

KEY_MANAGEMENT_ALGORITHMS = frozenset({
    DIR, RSA1_5, RSA_OAEP, RSA_OAEP_256,
    A128KW, A192KW, A256KW,
    ECDH_ES, ECDH_ES_A128KW, ECDH_ES_A192KW, ECDH_ES_A256KW,
    A128GCMKW, A192GCMKW, A256GCMKW,
    PBES2_HS256_A128KW, PBES2_HS384_A192KW, PBES2_HS512_A256KW,
})

CONTENT_ENCRYPTION_ALGORITHMS = frozenset({
    A128CBC_HS256, A192CBC_HS384, A256CBC_HS512,
    A128GCM, A192GCM, A256GCM,
})

_KEY_FAMILIES = MappingProxyType({
    **dict.fromkeys(
        (RS256, RS384, RS512, PS256, PS384, PS512, RSA1_5, RSA_OAEP, RSA_OAEP_256),
        KEY_FAMILY_RSA,
    ),
    **dict.fromkeys(
        (ES256, ES384, ES512, ECDH_ES, ECDH_ES_A128KW, ECDH_ES_A192KW, ECDH_ES_A256KW),
        KEY_FAMILY_EC,
    ),
    **dict.fromkeys(
        (HS256, HS384, HS512, DIR, A128KW, A192KW, A256KW, A128GCMKW, A192GCMKW, A256GCMKW,
         PBES2_HS256_A128KW, PBES2_HS384_A192KW, PBES2_HS512_A256KW),
        KEY_FAMILY_OCT,
    ),
})


def is_valid_signature_alg(alg: str) -> bool:
    """Return True if ``alg`` is a registered JWS algorithm (including ``none``)."""
    return alg in SIGNATURE_ALGORITHMS


def key_family_for(alg: str) -> str:
    """Return the key family (``RSA``, ``EC``, ``oct``) an algorithm requires.

    Unrecognized identifiers, and ``none``, yield ``"unknown"``.
    """
    return _KEY_FAMILIES.get(alg, KEY_FAMILY_UNKNOWN)
